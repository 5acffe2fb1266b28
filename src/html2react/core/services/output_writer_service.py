# src/html2react/core/services/output_writer_service.py
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Union

from converter.model import GeneratedFile

logger = logging.getLogger(__name__)

# file_type -> sub directory
SUBDIRECTORIES: Dict[str, str] = {
    "component": "components",
    "index": "components",
    "type": "components",
    "style": "styles",
}


class OutputWriter:
    """
    Writes generated files to disk: components (and their index/type files)
    under `components/`, stylesheets under `styles/`.
    """

    def __init__(self, base_dir: Union[str, Path]):
        self.base_dir = Path(base_dir)

    def target_for(self, generated: GeneratedFile) -> Path:
        subdir = SUBDIRECTORIES.get(generated.file_type, "")
        name = Path(generated.file_name).name
        return self.base_dir / subdir / name if subdir else self.base_dir / name

    def write(self, files: Iterable[GeneratedFile]) -> List[Path]:
        written: List[Path] = []
        for generated in files:
            target = self.target_for(generated)
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(generated.content, encoding="utf-8")
            logger.debug("Wrote %s (%d bytes).", target, len(generated.content))
            written.append(target)
        logger.info("Wrote %d files to %s.", len(written), self.base_dir)
        return written
