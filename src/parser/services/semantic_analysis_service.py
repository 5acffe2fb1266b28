# src/parser/services/semantic_analysis_service.py
import logging
import re
from typing import Dict, List, Optional, Set

from parser.model import (
    InvalidSelectorError,
    ParsedDocument,
    ParsedNode,
    SectionHierarchy,
    SemanticAnalysisResult,
    SemanticRule,
    SemanticSection,
)
from parser.utils.dom_utils import iter_nodes, selector_matches

logger = logging.getLogger(__name__)

SEMANTIC_PATTERNS: Dict[str, Dict[str, List[str]]] = {
    "header": {"tags": ["header", "masthead"],
               "classes": ["header", "site-header", "page-header", "main-header", "top-bar"]},
    "nav": {"tags": ["nav", "navigation"],
            "classes": ["nav", "navbar", "navigation", "menu", "main-menu", "top-nav"]},
    "main": {"tags": ["main", "article"],
             "classes": ["main", "content", "main-content", "primary-content"]},
    "aside": {"tags": ["aside", "sidebar"],
              "classes": ["aside", "sidebar", "side-bar", "secondary-content"]},
    "footer": {"tags": ["footer"],
               "classes": ["footer", "site-footer", "page-footer", "bottom-bar"]},
    "section": {"tags": ["section"], "classes": ["section"]},
    "article": {"tags": ["article"], "classes": ["article", "post", "entry"]},
    "figure": {"tags": ["figure"], "classes": ["figure", "image", "media"]},
    "form": {"tags": ["form"], "classes": ["form", "search-form", "login-form"]},
    "table": {"tags": ["table"], "classes": ["table", "data-table"]},
    "list": {"tags": ["ul", "ol", "dl"], "classes": ["list", "items", "listing"]},
    "card": {"tags": [], "classes": ["card", "panel", "box", "tile"]},
    "hero": {"tags": [], "classes": ["hero", "banner", "jumbotron", "showcase"]},
}

COMPONENT_NAME_TEMPLATES: Dict[str, str] = {
    "header": "Header",
    "nav": "Navigation",
    "main": "MainContent",
    "aside": "Sidebar",
    "footer": "Footer",
    "section": "Section",
    "article": "Article",
    "figure": "Figure",
    "form": "Form",
    "table": "Table",
    "list": "List",
    "card": "Card",
    "hero": "Hero",
    "none": "Component",
}

# Tags that map straight onto a semantic type (confidence 1.0)
TAG_TYPES: Dict[str, str] = {
    "header": "header", "masthead": "header",
    "nav": "nav", "navigation": "nav",
    "main": "main", "article": "article",
    "aside": "aside", "sidebar": "aside",
    "footer": "footer", "section": "section",
    "figure": "figure", "form": "form", "table": "table",
    "ul": "list", "ol": "list", "dl": "list",
}

_NON_ALNUM = re.compile(r"[^a-zA-Z0-9]")


def to_pascal_case(value: str) -> str:
    words = _NON_ALNUM.sub(" ", value).split()
    return "".join(w[:1].upper() + w[1:].lower() for w in words)


class SemanticAnalyzer:
    """
    Finds the semantic sections of a parsed tree (header, nav, cards, ...)
    that are good candidates for standalone components.

    Precedence per element: custom rules, then card/hero class vocabularies,
    then direct tag matches. Nested sections lose to their ancestors.
    """

    def __init__(self):
        self._custom_rules: List[SemanticRule] = []
        self._broken_selectors: Set[str] = set()

    def analyze(self, root: ParsedNode, custom_rules: Optional[List[SemanticRule]] = None) -> List[SemanticSection]:
        self._custom_rules = list(custom_rules or [])
        self._broken_selectors = set()

        sections: List[SemanticSection] = []
        for node in iter_nodes(root):
            if node.kind != "element":
                continue
            rule = self._matching_rule(node)
            semantic_type = rule.type if rule else self._identify_type(node)
            if semantic_type == "none":
                continue
            sections.append(self._create_section(node, semantic_type, rule))

        return self._post_process(sections)

    # --- Classification ---

    def _matching_rule(self, node: ParsedNode) -> Optional[SemanticRule]:
        for rule in self._custom_rules:
            if rule.selector in self._broken_selectors:
                continue
            try:
                if selector_matches(node, rule.selector):
                    return rule
            except InvalidSelectorError as e:
                self._broken_selectors.add(rule.selector)
                logger.warning(f"Ignoring semantic rule: {e}")
        return None

    @staticmethod
    def _identify_type(node: ParsedNode) -> str:
        classes = node.attributes.classes
        if any(c in SEMANTIC_PATTERNS["card"]["classes"] for c in classes):
            return "card"
        if any(c in SEMANTIC_PATTERNS["hero"]["classes"] for c in classes):
            return "hero"
        return TAG_TYPES.get(node.tag_name or "", "none")

    @staticmethod
    def _is_tag_match(tag_name: Optional[str], semantic_type: str) -> bool:
        if not tag_name:
            return False
        if tag_name == "article":
            return semantic_type == "article"
        return TAG_TYPES.get(tag_name) == semantic_type

    @staticmethod
    def calculate_confidence(node: ParsedNode, semantic_type: str) -> float:
        """Weighted score: +0.9 tag listed for the type, +0.4 exact class, +0.2 partial class."""
        patterns = SEMANTIC_PATTERNS.get(semantic_type, {"tags": [], "classes": []})
        score = 0.0

        if node.tag_name and node.tag_name in patterns["tags"]:
            score += 0.9

        for cls in node.attributes.classes:
            if cls in patterns["classes"]:
                score += 0.4
                break
            if any(cls in p or p in cls for p in patterns["classes"]):
                score += 0.2

        return min(score, 1.0)

    def _create_section(self, node: ParsedNode, semantic_type: str, rule: Optional[SemanticRule]) -> SemanticSection:
        if self._is_tag_match(node.tag_name, semantic_type):
            confidence = 1.0
        else:
            confidence = self.calculate_confidence(node, semantic_type)
        if rule is not None:
            confidence = min(max(confidence, rule.min_confidence), 1.0)

        return SemanticSection(
            type=semantic_type,
            node=node,
            component_name=self._component_name(node, semantic_type, rule),
            nodes=list(iter_nodes(node)),
            confidence=confidence,
            reasoning=self._reasoning(node, semantic_type),
        )

    @staticmethod
    def _component_name(node: ParsedNode, semantic_type: str, rule: Optional[SemanticRule]) -> str:
        if rule is not None and rule.component_name_template:
            return rule.component_name_template

        base = COMPONENT_NAME_TEMPLATES[semantic_type]
        node_id = node.attributes.html.get("id")
        if isinstance(node_id, str) and node_id:
            return f"{base}{to_pascal_case(node_id)}"
        classes = node.attributes.classes
        if classes:
            return f"{base}{to_pascal_case(classes[0])}"
        return base

    @staticmethod
    def _reasoning(node: ParsedNode, semantic_type: str) -> str:
        reasons = []
        if node.tag_name == semantic_type:
            reasons.append(f'Tag name matches semantic type "{semantic_type}"')

        for cls in node.attributes.classes:
            if semantic_type in cls:
                reasons.append(f'Class name "{cls}" suggests {semantic_type} component')
                break

        node_id = node.attributes.html.get("id")
        if node_id:
            reasons.append(f'Has ID "{node_id}"')

        return "; ".join(reasons) or f"Pattern matching detected {semantic_type} component"

    @staticmethod
    def _post_process(sections: List[SemanticSection]) -> List[SemanticSection]:
        """Keeps ancestors over nested sections and returns document order."""
        ordered = sorted(sections, key=lambda s: (s.node.depth, -s.confidence))

        kept: List[SemanticSection] = []
        covered: Set[str] = set()
        for section in ordered:
            if section.node.id in covered:
                continue
            kept.append(section)
            covered.update(n.id for n in section.nodes)

        kept.sort(key=lambda s: _node_index(s.node.id))
        return kept

    # --- Document helpers ---

    @staticmethod
    def get_component_names(document: ParsedDocument) -> Dict[str, str]:
        names: Dict[str, str] = {}
        for section in document.sections:
            for node in section.nodes:
                names[node.id] = section.component_name
        return names

    @staticmethod
    def get_extractable_nodes(document: ParsedDocument) -> List[ParsedNode]:
        return [s.node for s in document.sections]

    def analyze_document(self, document: ParsedDocument) -> SemanticAnalysisResult:
        return SemanticAnalysisResult(
            sections=document.sections,
            component_names=self.get_component_names(document),
            extractable_nodes=self.get_extractable_nodes(document),
        )

    @staticmethod
    def find_sections_by_type(document: ParsedDocument, semantic_type: str) -> List[SemanticSection]:
        return [s for s in document.sections if s.type == semantic_type]

    @staticmethod
    def find_sections_by_confidence(document: ParsedDocument, min_confidence: float) -> List[SemanticSection]:
        return [s for s in document.sections if s.confidence >= min_confidence]

    @staticmethod
    def get_section_for_node(document: ParsedDocument, node_id: str) -> Optional[SemanticSection]:
        for section in document.sections:
            if any(n.id == node_id for n in section.nodes):
                return section
        return None

    @staticmethod
    def should_extract(node: ParsedNode, document: ParsedDocument) -> bool:
        return any(s.node.id == node.id for s in document.sections)

    @staticmethod
    def get_component_hierarchy(document: ParsedDocument) -> List[SectionHierarchy]:
        """Relates every section to the sections containing it and contained by it."""
        hierarchy = []
        for section in document.sections:
            parent = None
            children = []
            for other in document.sections:
                if other is section:
                    continue
                if parent is None and any(n.id == section.node.id for n in other.nodes):
                    parent = other
                if any(n.id == other.node.id for n in section.nodes):
                    children.append(other)
            hierarchy.append(SectionHierarchy(section=section, parent=parent, children=children))
        return hierarchy


def _node_index(node_id: str) -> int:
    try:
        return int(node_id.rsplit("-", 1)[1])
    except (IndexError, ValueError):
        return 0
