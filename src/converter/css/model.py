# src/converter/css/model.py
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from parser.model import ConversionError


class UnknownStrategyError(ConversionError, LookupError):
    """Raised by the strategy factory for a name no strategy module registers."""


class CssConverterOptions(BaseModel):
    preserve_inline: bool = False
    extract_to_separate_file: bool = False
    class_prefix: str = ""
    use_css_variables: bool = False
    min_class_name_length: int = Field(default=6, ge=1, le=40)
    optimize: bool = False
    target_filename: str = "styles"


class CssProperty(BaseModel):
    property: str
    value: str
    important: bool = False


class CssRule(BaseModel):
    selectors: List[str] = Field(default_factory=list)
    properties: List[CssProperty] = Field(default_factory=list)
    media_query: Optional[str] = None


class ParsedStyle(BaseModel):
    """Declarations of one inline `style` attribute; `selector` is the owning tag."""
    selector: str = "*"
    properties: Dict[str, str] = Field(default_factory=dict)


class CssConversionStats(BaseModel):
    total_elements_processed: int = 0
    inline_styles_converted: int = 0
    classes_generated: int = 0
    rules_extracted: int = 0
    files_created: int = 0


class CssConversionResult(BaseModel):
    html: str = ""
    css: str = ""
    class_name_map: Dict[str, str] = Field(default_factory=dict)
    generated_files: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    strategy: str = ""
