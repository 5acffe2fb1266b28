# src/converter/css/registry.py
import importlib
import logging
import pkgutil
from typing import Dict, List, Type

from converter.css.core import CssConverter, StrategyDefinition
from converter.css.model import UnknownStrategyError

logger = logging.getLogger(__name__)


class StrategyRegistry:
    """
    Central registry for CSS conversion strategies.

    Dynamically discovers modules in the 'converter.css.strategies' package
    that expose a `DEFINITION` (instance of `StrategyDefinition`).
    """

    _strategies: Dict[str, Type[CssConverter]] = {}
    _loaded: bool = False

    @classmethod
    def discover(cls) -> None:
        if cls._loaded:
            return

        try:
            import converter.css.strategies as strategies_pkg

            for _, name, _ in pkgutil.iter_modules(strategies_pkg.__path__):
                full_name = f"converter.css.strategies.{name}"
                try:
                    module = importlib.import_module(full_name)
                    definition = getattr(module, "DEFINITION", None)
                    if isinstance(definition, StrategyDefinition):
                        cls._strategies[definition.name] = definition.converter
                        logger.debug(f"CSS strategy loaded: {definition.name}")
                except Exception as e:
                    logger.error(f"Error loading strategy module {name}: {e}")

            cls._loaded = True
        except ImportError as e:
            logger.error(f"Could not find strategies package: {e}")

    @classmethod
    def get_strategy_names(cls) -> List[str]:
        cls.discover()
        return sorted(cls._strategies)

    @classmethod
    def create(cls, name: str) -> CssConverter:
        cls.discover()
        converter_cls = cls._strategies.get(name)
        if converter_cls is None:
            available = ", ".join(sorted(cls._strategies)) or "none"
            raise UnknownStrategyError(f"Unknown CSS strategy '{name}' (available: {available})")
        return converter_cls()


def create_css_converter(name: str) -> CssConverter:
    """Returns a fresh converter for `name` ('tailwind', 'css-modules' or 'vanilla')."""
    return StrategyRegistry.create(name)


def get_available_strategies() -> List[str]:
    return StrategyRegistry.get_strategy_names()
