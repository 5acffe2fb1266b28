# src/parser/model.py
from __future__ import annotations

import weakref
from typing import Any, Callable, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

NodeKind = Literal["element", "text", "comment", "fragment"]
SemanticType = Literal[
    "header", "nav", "main", "aside", "footer", "section", "article",
    "figure", "form", "table", "list", "card", "hero", "none",
]
PatternType = Literal["card", "nav", "list", "section", "unknown"]
ProgressStage = Literal["parsing", "analyzing", "complete"]


class ConversionError(Exception):
    """Base class for every error raised by the conversion pipeline."""


class EmptyInputError(ConversionError, ValueError):
    """Raised when the parser receives no HTML at all (None)."""


class InvalidSelectorError(ConversionError, ValueError):
    """Raised when a CSS selector cannot be compiled."""


class EventHandler(BaseModel):
    type: str
    handler: str


class ParsedAttributes(BaseModel):
    """
    Normalized attribute bag of a single element.

    `class` never lives in `html`; it is kept in `class_name`.
    Boolean attributes are stored as `True`.
    """
    html: Dict[str, Union[bool, str]] = Field(default_factory=dict)
    style: Optional[Dict[str, str]] = None
    class_name: Optional[str] = None
    events: List[EventHandler] = Field(default_factory=list)
    has_danger_html: bool = False

    @property
    def classes(self) -> List[str]:
        return self.class_name.split() if self.class_name else []


class ParsedNode(BaseModel):
    """
    A node in the parsed document arena.

    The parent link is a weak reference so the tree does not hold cycles;
    it is set once by the parser.
    """
    id: str
    kind: NodeKind
    tag_name: Optional[str] = None
    attributes: ParsedAttributes = Field(default_factory=ParsedAttributes)
    children: List["ParsedNode"] = Field(default_factory=list)
    text_content: Optional[str] = None
    depth: int = 0

    _parent: Optional[weakref.ReferenceType] = PrivateAttr(default=None)
    # bs4 Tag this element was translated from; selectors are matched against it
    _source: Any = PrivateAttr(default=None)

    @property
    def parent(self) -> Optional["ParsedNode"]:
        return self._parent() if self._parent is not None else None

    def set_parent(self, parent: "ParsedNode") -> None:
        if self._parent is not None:
            raise ValueError(f"Parent of {self.id} is already set.")
        self._parent = weakref.ref(parent)

    @property
    def source_tag(self) -> Any:
        return self._source

    def bind_source(self, tag: Any) -> None:
        self._source = tag

    @property
    def is_element(self) -> bool:
        return self.kind == "element"

    @property
    def element_children(self) -> List["ParsedNode"]:
        return [c for c in self.children if c.kind == "element"]

    def __eq__(self, other: object) -> bool:
        # Structural comparison; the weak parent link is not part of identity.
        if not isinstance(other, ParsedNode):
            return NotImplemented
        return (
            self.id == other.id
            and self.kind == other.kind
            and self.tag_name == other.tag_name
            and self.text_content == other.text_content
            and self.depth == other.depth
            and self.attributes == other.attributes
            and self.children == other.children
        )

    def get_attribute(self, name: str) -> Any:
        if name == "class":
            return self.attributes.class_name
        return self.attributes.html.get(name)


class DocumentMetadata(BaseModel):
    source: str = ""
    title: Optional[str] = None
    lang: Optional[str] = None
    charset: Optional[str] = None
    viewport: Optional[str] = None
    node_count: int = 0
    max_depth: int = 0
    unique_tags: List[str] = Field(default_factory=list)
    unique_classes: List[str] = Field(default_factory=list)
    unique_ids: List[str] = Field(default_factory=list)


class SemanticRule(BaseModel):
    type: SemanticType
    selector: str
    min_confidence: float = 0.0
    component_name_template: Optional[str] = None


class SemanticSection(BaseModel):
    type: SemanticType
    node: ParsedNode
    component_name: str
    nodes: List[ParsedNode] = Field(default_factory=list)
    confidence: float = Field(ge=0.0, le=1.0)
    reasoning: str = ""


class SectionHierarchy(BaseModel):
    section: SemanticSection
    parent: Optional[SemanticSection] = None
    children: List[SemanticSection] = Field(default_factory=list)


class SemanticAnalysisResult(BaseModel):
    sections: List[SemanticSection] = Field(default_factory=list)
    component_names: Dict[str, str] = Field(default_factory=dict)
    extractable_nodes: List[ParsedNode] = Field(default_factory=list)


class ParsedDocument(BaseModel):
    root: ParsedNode
    nodes: Dict[str, ParsedNode] = Field(default_factory=dict)
    metadata: DocumentMetadata = Field(default_factory=DocumentMetadata)
    sections: List[SemanticSection] = Field(default_factory=list)


class ParseProgress(BaseModel):
    stage: ProgressStage
    processed: int = 0
    total: int = 0


class ParseOptions(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    max_depth: Optional[int] = None
    preserve_whitespace: bool = False
    include_comments: bool = False
    semantic_rules: List[SemanticRule] = Field(default_factory=list)
    on_progress: Optional[Callable[[ParseProgress], Any]] = None


class AttributeExtractionResult(BaseModel):
    attributes: ParsedAttributes
    is_void: bool = False
    is_fragment: bool = False
    warnings: List[str] = Field(default_factory=list)


class PatternDetectionResult(BaseModel):
    pattern: str
    count: int
    elements: List[str] = Field(default_factory=list)
    confidence: float = Field(ge=0.0, le=1.0)
    pattern_type: PatternType = "unknown"
    sample_structure: str = ""


ParsedNode.model_rebuild()
SemanticSection.model_rebuild()
