# src/html2react/core/utils/path_utils.py
import logging
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger(__name__)


class PathUtils:
    """
    A central utility for reliably retrieving important application paths.
    """

    @staticmethod
    def get_app_package_root() -> Path:
        """Returns the directory of the installed `html2react` package (holds settings.json)."""
        return Path(__file__).resolve().parent.parent.parent

    @staticmethod
    def get_settings_file() -> Path:
        return PathUtils.get_app_package_root() / "settings.json"

    @staticmethod
    def resolve_output_dir(directory: Optional[Union[str, Path]], default: str = "output") -> Path:
        """
        Returns an absolute output directory; relative paths are taken from the
        current working directory. The directory is created if it doesn't exist.
        """
        path = Path(directory or default).expanduser()
        if not path.is_absolute():
            path = Path.cwd() / path
        path.mkdir(parents=True, exist_ok=True)
        return path
