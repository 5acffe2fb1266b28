# src/converter/css/strategies/css_modules.py
from typing import Dict, List

from converter.css.core import StrategyDefinition, StylesheetConverter, content_hash, split_important
from converter.css.model import CssConverterOptions, CssProperty, ParsedStyle


def repeated_values(styles: List[ParsedStyle]) -> Dict[str, str]:
    """Values used two or more times across all styles, as {value: --css-var-N} in first-seen order."""
    counts: Dict[str, int] = {}
    for style in styles:
        for raw in style.properties.values():
            value, _ = split_important(raw)
            counts[value] = counts.get(value, 0) + 1

    variables: Dict[str, str] = {}
    for value, count in counts.items():
        if count >= 2:
            variables[value] = f"--css-var-{len(variables)}"
    return variables


class CssModulesConverter(StylesheetConverter):
    """
    Extracts inline styles into a CSS Modules stylesheet.

    Class names are `_<hash>` or `<prefix>_<hash>`. With `use_css_variables`
    values repeated across styles are hoisted into `:root` custom properties.
    """

    name = "css-modules"
    header = ["CSS Modules - Auto-generated", "Class names are scoped to prevent conflicts"]
    occurrence_separator = "_"
    file_suffix = ".module.css"

    def __init__(self):
        super().__init__()
        self._variables: Dict[str, str] = {}

    def base_class_name(self, style: ParsedStyle, key: str, options: CssConverterOptions) -> str:
        digest = content_hash(key, max(options.min_class_name_length, 6))
        return f"{options.class_prefix}_{digest}" if options.class_prefix else f"_{digest}"

    def preamble(self, styles: List[ParsedStyle], options: CssConverterOptions) -> List[str]:
        self._variables = repeated_values(styles) if options.use_css_variables else {}
        if not self._variables:
            return []
        lines = [":root {"]
        lines.extend(f"  {name}: {value};" for value, name in self._variables.items())
        lines.extend(["}", ""])
        return lines

    def render_value(self, prop: CssProperty, options: CssConverterOptions) -> str:
        name = self._variables.get(prop.value)
        return f"var({name})" if name else prop.value


DEFINITION = StrategyDefinition(
    name="css-modules",
    converter=CssModulesConverter,
    description="Inline styles to scoped CSS Modules classes",
)
