# src/html2react/model.py
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from converter.model import FormattingOptions, GeneratedFile, SplitResult

OutputFormat = Literal["jsx", "tsx"]
StageName = Literal["parse", "split", "generate", "css"]
StageStatus = Literal["pending", "in-progress", "complete", "error"]


class ConversionOptions(BaseModel):
    """
    Options of a single conversion run. Fields left as None are filled from
    the configuration (see `ConvertController.merge_options`).
    """
    component_name: Optional[str] = None
    output_format: Optional[OutputFormat] = None
    split_components: Optional[bool] = None
    css_strategy: Optional[str] = None
    include_react_import: Optional[bool] = None
    include_prop_types: Optional[bool] = None
    convert_class_to_class_name: Optional[bool] = None
    formatting: Optional[FormattingOptions] = None
    extract_css_to_separate_file: Optional[bool] = None
    css_class_prefix: Optional[str] = None
    optimize_css: Optional[bool] = None
    use_css_variables: Optional[bool] = None
    target_filename: Optional[str] = None
    custom_component_selectors: Optional[List[str]] = None
    show_progress: bool = False


class ConversionStage(BaseModel):
    name: StageName
    status: StageStatus = "pending"
    duration: float = 0.0  # ms
    message: str = ""


class ConversionStats(BaseModel):
    processing_time: float = 0.0  # ms
    total_files: int = 0
    total_components: int = 0


class ConversionResult(BaseModel):
    success: bool = False
    files: List[GeneratedFile] = Field(default_factory=list)
    stages: List[ConversionStage] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    error: Optional[str] = None
    stats: ConversionStats = Field(default_factory=ConversionStats)
    split: Optional[SplitResult] = None
