# src/converter/services/component_split_service.py
from __future__ import annotations

import logging
import re
import time
from typing import Dict, List, Optional, Set, Tuple, Union

from pydantic import BaseModel

from converter.model import (
    ComponentCounts,
    ComponentDefinition,
    ComponentMetadata,
    ExtractReason,
    NameGenerationContext,
    NameHints,
    PatternStats,
    PropSuggestion,
    SourceStats,
    SplitMetadata,
    SplitResult,
    SplitterOptions,
)
from converter.services.component_tree_service import ComponentTreeBuilder
from converter.services.name_generator_service import NameGenerator, parse_bem
from parser.model import InvalidSelectorError, ParsedDocument, ParsedNode, PatternDetectionResult
from parser.services.html_parse_service import HTMLParser
from parser.services.pattern_detect_service import PatternDetector, element_identifier
from parser.utils.dom_utils import (
    element_nesting_depth,
    iter_elements,
    render_html,
    selector_matches,
    text_content,
)

logger = logging.getLogger(__name__)

SEMANTIC_TAGS = {
    "header", "nav", "main", "footer", "article", "section",
    "aside", "figure", "figcaption", "dialog", "details", "summary",
}
INTERACTIVE_TAGS = {"button", "a", "input", "textarea", "select", "form", "details", "dialog"}
MEDIA_TAGS = {"img", "picture", "video", "audio", "canvas", "svg"}
DATA_TAGS = {"table", "ul", "ol", "dl"}
INTERACTIVE_DESCENDANTS = {"button", "a", "input", "textarea", "select", "form"}

CONTAINER_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in (r"container", r"wrapper", r"layout", r"grid", r"flex", r"row", r"col", r"section")
]
NAVIGATION_PATTERN = re.compile(r"nav|menu|breadcrumb|pagination", re.IGNORECASE)
CONTENT_PATTERN = re.compile(r"card|article|post|item|entry", re.IGNORECASE)

MAX_TEXT_RATIO = 0.8


class ExtractDecision(BaseModel):
    should_extract: bool = False
    confidence: float = 0.0
    suggested_name: str = ""
    reason: ExtractReason = "user-defined"
    pattern: Optional[PatternDetectionResult] = None


class ComponentSplitter:
    """
    Decides which elements of a document become standalone components.

    One decision per element, in precedence order: semantic tag, custom
    selector, repeating pattern, class pattern, complex structure. Every
    `split()` starts from a clean slate: ids, names and the extracted map
    never carry over between runs.
    """

    def __init__(
            self,
            options: Optional[SplitterOptions] = None,
            parser: Optional[HTMLParser] = None,
            pattern_detector: Optional[PatternDetector] = None,
            name_generator: Optional[NameGenerator] = None,
    ):
        self.options = options or SplitterOptions()
        self.parser = parser or HTMLParser()
        self.pattern_detector = pattern_detector or PatternDetector(
            min_pattern_occurrences=self.options.min_pattern_occurrences,
            similarity_threshold=self.options.similarity_threshold,
            parser=self.parser,
        )
        self.name_generator = name_generator or NameGenerator(convention=self.options.naming_convention)
        self.tree_builder = ComponentTreeBuilder()

        self._component_counter = 0
        self._extracted: Dict[str, ComponentDefinition] = {}
        self._warnings: List[str] = []
        self._invalid_selectors: Set[str] = set()

    def split(self, source: Union[str, ParsedDocument, None]) -> SplitResult:
        """
        Splits HTML (or an already parsed document) into component definitions.

        Returns:
            SplitResult with components in document order, detected patterns,
            the component tree and run statistics.
        """
        started = time.perf_counter()
        self._reset()

        document = self._resolve_document(source)
        if document is None or (document.root.kind != "element" and not document.root.element_children):
            return SplitResult()

        patterns: List[PatternDetectionResult] = []
        if self.options.detect_patterns:
            patterns = self.pattern_detector.detect_patterns(document)

        components = self._extract_components(document.root, patterns)
        tree = self.tree_builder.build(components)
        metadata = self._calculate_metadata(components, patterns, started)

        logger.info("Split into %d components (%d patterns).", len(components), len(patterns))
        return SplitResult(
            components=components,
            patterns=patterns,
            tree=tree,
            metadata=metadata,
            warnings=list(self._warnings),
        )

    def _reset(self) -> None:
        self._component_counter = 0
        self._extracted = {}
        self._warnings = []
        self._invalid_selectors = set()
        self.name_generator.reset()

    def _resolve_document(self, source: Union[str, ParsedDocument, None]) -> Optional[ParsedDocument]:
        if isinstance(source, ParsedDocument):
            return source
        if not source or not source.strip():
            return None
        return self.parser.parse(source)

    # --- Traversal ---

    def _extract_components(self, root: ParsedNode, patterns: List[PatternDetectionResult]) -> List[ComponentDefinition]:
        components: List[ComponentDefinition] = []
        visited: Set[str] = set()
        names: List[str] = []
        member_index = self._index_pattern_members(patterns)

        # (node, component depth, id of the nearest extracted ancestor)
        stack: List[Tuple[ParsedNode, int, Optional[str]]] = [(root, 0, None)]
        while stack:
            node, depth, owner_id = stack.pop()
            if node.id in visited:
                continue
            visited.add(node.id)

            if node.kind != "element":
                stack.extend((c, depth, owner_id) for c in reversed(node.element_children))
                continue

            decision = ExtractDecision()
            if depth <= self.options.max_component_depth:
                decision = self._decide(node, member_index, names)

            if not decision.should_extract:
                stack.extend((c, depth, owner_id) for c in reversed(node.element_children))
                continue

            component = self._create_definition(node, decision, depth, owner_id)
            components.append(component)
            names.append(component.name)
            self._extracted[component.id] = component
            if owner_id is not None:
                self._extracted[owner_id].children.append(component.id)

            stack.extend((c, depth + 1, component.id) for c in reversed(node.element_children))

        return components

    @staticmethod
    def _index_pattern_members(patterns: List[PatternDetectionResult]) -> Dict[str, PatternDetectionResult]:
        index: Dict[str, PatternDetectionResult] = {}
        for pattern in patterns:
            for identifier in pattern.elements:
                index.setdefault(identifier, pattern)
        return index

    def _decide(
            self,
            node: ParsedNode,
            member_index: Dict[str, PatternDetectionResult],
            names: List[str],
    ) -> ExtractDecision:
        tag = node.tag_name or ""
        classes = node.attributes.classes

        if tag in SEMANTIC_TAGS:
            return self._extract(node, 0.95, "semantic-tag", names, type=tag)

        for selector in self.options.custom_component_selectors:
            if self._matches_custom_selector(node, selector):
                return self._extract(node, 0.9, "custom-selector", names)

        pattern = member_index.get(element_identifier(node))
        if pattern is not None:
            return self._extract(node, pattern.confidence, "repeating-pattern", names,
                                 type=pattern.pattern, pattern=pattern)

        if classes:
            bem_block = next((c for c in classes if "__" not in c and "--" not in c), None)
            if bem_block and self.is_significant_element(node):
                return self._extract(node, 0.7, "class-pattern", names)
            if any(p.search(c) for c in classes for p in CONTAINER_PATTERNS):
                return self._extract(node, 0.65, "class-pattern", names)

        if self.is_complex_structure(node):
            hints = NameHints(has_children=True, child_count=len(node.element_children))
            return self._extract(node, 0.6, "complex-structure", names, hints=hints)

        return ExtractDecision()

    def _extract(
            self,
            node: ParsedNode,
            confidence: float,
            reason: ExtractReason,
            names: List[str],
            type: Optional[str] = None,
            pattern: Optional[PatternDetectionResult] = None,
            hints: Optional[NameHints] = None,
    ) -> ExtractDecision:
        name = self.name_generator.generate_name(
            NameGenerationContext(node=node, type=type, existing_names=names, hints=hints)
        )
        logger.debug("Extracting %s as '%s' (%s, %.2f).", node.id, name, reason, confidence)
        return ExtractDecision(
            should_extract=True,
            confidence=confidence,
            suggested_name=name,
            reason=reason,
            pattern=pattern,
        )

    def _matches_custom_selector(self, node: ParsedNode, selector: str) -> bool:
        if selector in self._invalid_selectors:
            return False
        try:
            return selector_matches(node, selector)
        except InvalidSelectorError as e:
            self._invalid_selectors.add(selector)
            message = f"Invalid custom component selector '{selector}': {e}"
            self._warnings.append(message)
            logger.warning(message)
            return False

    def is_significant_element(self, node: ParsedNode) -> bool:
        """Enough element children and mostly markup rather than text."""
        if len(node.element_children) < self.options.min_element_count:
            return False
        markup = render_html(node)
        ratio = len(text_content(node)) / len(markup) if markup else 0.0
        return ratio <= MAX_TEXT_RATIO

    @staticmethod
    def is_complex_structure(node: ParsedNode) -> bool:
        if len(node.element_children) < 2:
            return False
        return element_nesting_depth(node) >= 2

    # --- Definitions ---

    def _next_component_id(self) -> str:
        self._component_counter += 1
        return f"component-{self._component_counter}"

    def _create_definition(
            self,
            node: ParsedNode,
            decision: ExtractDecision,
            depth: int,
            owner_id: Optional[str],
    ) -> ComponentDefinition:
        return ComponentDefinition(
            id=self._next_component_id(),
            name=decision.suggested_name,
            type=node.tag_name or "div",
            html=render_html(node),
            depth=depth,
            classes=node.attributes.classes,
            bem_type=self._bem_type(node),
            role=self.determine_role(node),
            pattern_id=decision.pattern.pattern if decision.pattern else None,
            suggested_props=self._suggest_props(node, decision),
            metadata=self._build_metadata(node, decision),
            parent_id=owner_id,
            confidence=max(0.0, min(decision.confidence, 1.0)),
            reason=decision.reason,
            source_node_id=node.id,
        )

    @staticmethod
    def determine_role(node: ParsedNode) -> str:
        tag = node.tag_name or ""
        classes = node.attributes.classes
        if tag in SEMANTIC_TAGS:
            return "semantic"
        if tag in INTERACTIVE_TAGS:
            return "interactive"
        if tag in MEDIA_TAGS:
            return "media"
        if tag in DATA_TAGS:
            return "data"
        if any(NAVIGATION_PATTERN.search(c) for c in classes):
            return "navigation"
        if any(p.search(c) for c in classes for p in CONTAINER_PATTERNS):
            return "layout"
        if any(CONTENT_PATTERN.search(c) for c in classes):
            return "content"
        return "unknown"

    @staticmethod
    def _bem_type(node: ParsedNode):
        for cls in node.attributes.classes:
            if "__" in cls or "--" in cls:
                bem = parse_bem(cls)
                if bem.element or bem.modifier:
                    return bem
        return None

    @staticmethod
    def _suggest_props(node: ParsedNode, decision: ExtractDecision) -> List[PropSuggestion]:
        tag = node.tag_name or ""
        props = [PropSuggestion(name="className", type="string")]
        if node.element_children:
            props.append(PropSuggestion(name="children", type="ReactNode"))
        if tag in INTERACTIVE_TAGS:
            props.append(PropSuggestion(name="onClick", type="Function"))
        if tag == "img":
            props.append(PropSuggestion(name="src", type="string", required=True))
            props.append(PropSuggestion(name="alt", type="string", required=True))
        if tag == "a":
            props.append(PropSuggestion(name="href", type="string", required=True))
        if decision.pattern is not None:
            props.append(PropSuggestion(name="variant", type="string"))
        return props

    @staticmethod
    def _build_metadata(node: ParsedNode, decision: ExtractDecision) -> ComponentMetadata:
        descendants = [n.tag_name for n in iter_elements(node, include_self=False)]
        return ComponentMetadata(
            element_count=len(descendants),
            text_length=len(text_content(node)),
            has_interactive=any(t in INTERACTIVE_DESCENDANTS for t in descendants),
            has_forms="form" in descendants,
            has_images="img" in descendants,
            child_types=[c.tag_name for c in node.element_children],
            is_pattern_item=decision.reason == "repeating-pattern",
        )

    # --- Statistics ---

    @staticmethod
    def _calculate_metadata(
            components: List[ComponentDefinition],
            patterns: List[PatternDetectionResult],
            started: float,
    ) -> SplitMetadata:
        counts = ComponentCounts()
        for c in components:
            counts.by_type[c.type] = counts.by_type.get(c.type, 0) + 1
            counts.by_role[c.role] = counts.by_role.get(c.role, 0) + 1
            counts.by_depth[c.depth] = counts.by_depth.get(c.depth, 0) + 1

        total_html = sum(len(c.html) for c in components)
        total_text = sum(c.metadata.text_length for c in components)

        return SplitMetadata(
            total_components=len(components),
            max_depth=max((c.depth for c in components), default=0),
            processing_time=(time.perf_counter() - started) * 1000,
            component_counts=counts,
            pattern_stats=PatternStats(
                total_patterns=len(patterns),
                total_pattern_items=sum(p.count for p in patterns),
                average_confidence=sum(p.confidence for p in patterns) / len(patterns) if patterns else 0.0,
            ),
            source_stats=SourceStats(
                total_elements=sum(c.metadata.element_count for c in components),
                total_nodes=len(components),
                text_content_ratio=total_text / max(total_html, 1),
            ),
        )
