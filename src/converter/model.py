# src/converter/model.py
from __future__ import annotations

from typing import Any, Callable, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from parser.model import ParsedNode, PatternDetectionResult

NamingConvention = Literal["PascalCase", "camelCase", "kebab-case", "UPPER_CASE"]
ComponentRole = Literal[
    "semantic", "layout", "interactive", "content", "navigation", "media", "data", "unknown",
]
ExtractReason = Literal[
    "semantic-tag", "custom-selector", "repeating-pattern", "class-pattern",
    "complex-structure", "user-defined",
]
PropType = Literal["string", "number", "boolean", "ReactNode", "Function", "object", "array", "any"]
TransformType = Literal["direct", "event", "style", "boolean", "custom", "remove"]
FileType = Literal["component", "style", "type", "index"]
ExportType = Literal["named", "default"]


# --- Naming ---

class BemClassification(BaseModel):
    block: str
    element: Optional[str] = None
    modifier: Optional[str] = None
    full_class: str = ""


class NameHints(BaseModel):
    has_children: bool = False
    child_types: List[str] = Field(default_factory=list)
    child_count: int = 0


class NameGenerationContext(BaseModel):
    node: Optional[ParsedNode] = None
    type: Optional[str] = None
    parent_name: Optional[str] = None
    siblings: List[str] = Field(default_factory=list)
    existing_names: List[str] = Field(default_factory=list)
    hints: Optional[NameHints] = None


# --- Splitting ---

class SplitterOptions(BaseModel):
    min_element_count: int = 3
    max_component_depth: int = 5
    detect_patterns: bool = True
    naming_convention: NamingConvention = "PascalCase"
    custom_component_selectors: List[str] = Field(default_factory=list)
    min_pattern_occurrences: int = 2
    similarity_threshold: float = 0.7


class PropSuggestion(BaseModel):
    name: str
    type: PropType
    required: bool = False


class ComponentMetadata(BaseModel):
    element_count: int = 0
    text_length: int = 0
    has_interactive: bool = False
    has_forms: bool = False
    has_images: bool = False
    child_types: List[str] = Field(default_factory=list)
    is_pattern_item: bool = False


class ComponentDefinition(BaseModel):
    id: str
    name: str
    type: str
    html: str
    depth: int
    classes: List[str] = Field(default_factory=list)
    bem_type: Optional[BemClassification] = None
    role: ComponentRole = "unknown"
    pattern_id: Optional[str] = None
    suggested_props: List[PropSuggestion] = Field(default_factory=list)
    metadata: ComponentMetadata = Field(default_factory=ComponentMetadata)
    children: List[str] = Field(default_factory=list)
    parent_id: Optional[str] = None
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    reason: ExtractReason = "user-defined"
    source_node_id: Optional[str] = None


class ComponentTreeNode(BaseModel):
    id: str
    child_ids: List[str] = Field(default_factory=list)
    siblings: List[str] = Field(default_factory=list)
    parent_id: Optional[str] = None
    depth: int = 0


class ComponentEdge(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_: str = Field(alias="from")
    to: str
    type: Literal["contains"] = "contains"


class ComponentTree(BaseModel):
    root: str = ""
    nodes: Dict[str, ComponentTreeNode] = Field(default_factory=dict)
    edges: List[ComponentEdge] = Field(default_factory=list)


class ComponentCounts(BaseModel):
    by_type: Dict[str, int] = Field(default_factory=dict)
    by_role: Dict[str, int] = Field(default_factory=dict)
    by_depth: Dict[int, int] = Field(default_factory=dict)


class PatternStats(BaseModel):
    total_patterns: int = 0
    total_pattern_items: int = 0
    average_confidence: float = 0.0


class SourceStats(BaseModel):
    total_elements: int = 0
    total_nodes: int = 0
    text_content_ratio: float = 0.0


class SplitMetadata(BaseModel):
    total_components: int = 0
    max_depth: int = 0
    processing_time: float = 0.0
    component_counts: ComponentCounts = Field(default_factory=ComponentCounts)
    pattern_stats: PatternStats = Field(default_factory=PatternStats)
    source_stats: SourceStats = Field(default_factory=SourceStats)


class SplitResult(BaseModel):
    components: List[ComponentDefinition] = Field(default_factory=list)
    patterns: List[PatternDetectionResult] = Field(default_factory=list)
    tree: ComponentTree = Field(default_factory=ComponentTree)
    metadata: SplitMetadata = Field(default_factory=SplitMetadata)
    warnings: List[str] = Field(default_factory=list)


# --- Attribute transformation ---

class TransformedAttribute(BaseModel):
    name: str
    value: Any = None
    type: TransformType = "direct"


class AttributeTransformRule(BaseModel):
    """A mapping entry; caller supplied rules are consulted before the built-in table."""
    react_name: str
    type: TransformType = "direct"
    transform: Optional[Callable[[str], Any]] = None


# --- Code generation ---

class FormattingOptions(BaseModel):
    indent_style: Literal["spaces", "tabs"] = "spaces"
    indent_size: int = 2
    print_width: int = 80
    single_quote: bool = True
    semi: bool = True
    enabled: bool = True


class GeneratorOptions(BaseModel):
    component_name: str = "Component"
    formatting: FormattingOptions = Field(default_factory=FormattingOptions)
    include_react_import: bool = True
    custom_imports: List[str] = Field(default_factory=list)
    convert_class_to_class_name: bool = True


class PropDefinition(BaseModel):
    name: str
    type: str = "string"
    required: bool = False
    default_value: Optional[str] = None
    description: Optional[str] = None


class TsxGeneratorOptions(GeneratorOptions):
    include_prop_types: bool = True
    detect_props_from_attributes: bool = False
    export_type: ExportType = "named"
    custom_props: List[PropDefinition] = Field(default_factory=list)


class GeneratedFile(BaseModel):
    file_name: str
    content: str
    file_type: FileType = "component"


class GeneratorStats(BaseModel):
    components_generated: int = 0
    elements_processed: int = 0
    attributes_transformed: int = 0
    inline_styles_converted: int = 0
    lines_of_code: int = 0


class GeneratorResult(BaseModel):
    files: List[GeneratedFile] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    stats: GeneratorStats = Field(default_factory=GeneratorStats)
    entry_point: str = ""


NameGenerationContext.model_rebuild()
