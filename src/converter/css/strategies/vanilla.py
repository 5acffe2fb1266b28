# src/converter/css/strategies/vanilla.py
import re
from typing import List

from converter.css.core import StrategyDefinition, StylesheetConverter, content_hash
from converter.css.model import CssConverterOptions, ParsedStyle


def sanitize_selector(selector: str) -> str:
    return re.sub(r"[^a-z0-9]", "", (selector or "").lower())[:10] or "class"


class VanillaCssConverter(StylesheetConverter):
    """
    Extracts inline styles into a plain external stylesheet.

    Class names are `<prefix or tag>-<hash>`. When extracting to a file a
    `<link rel="stylesheet">` is injected unless the markup already has one.
    """

    name = "vanilla"
    header = ["Vanilla CSS - Auto-generated", "Extracted from inline styles"]
    file_suffix = ".css"

    def base_class_name(self, style: ParsedStyle, key: str, options: CssConverterOptions) -> str:
        prefix = options.class_prefix or sanitize_selector(style.selector)
        return f"{prefix}-{content_hash(key, options.min_class_name_length)}"

    def finalize_html(self, html: str, generated_files: List[str], options: CssConverterOptions) -> str:
        if generated_files and "<link" not in html:
            return f'<link rel="stylesheet" href="{generated_files[0]}">\n{html}'
        return html


DEFINITION = StrategyDefinition(
    name="vanilla",
    converter=VanillaCssConverter,
    description="Inline styles to an external stylesheet",
)
