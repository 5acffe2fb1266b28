# src/parser/services/pattern_detect_service.py
import logging
import re
from collections import Counter
from typing import Dict, List, Optional, Sequence, Union

from parser.model import ParsedDocument, ParsedNode, PatternDetectionResult
from parser.services.html_parse_service import HTMLParser
from parser.utils.dom_utils import iter_elements, render_html

logger = logging.getLogger(__name__)

# Tags that repeat naturally even without a class or id
REPEATING_TAGS = {"tr", "li", "dt", "dd", "td", "th"}

# Section-level names that count as a pattern on a single occurrence
SEMANTIC_SECTION_NAMES = {
    "hero", "breadcrumb", "header", "footer", "sidebar", "aside", "main",
    "section", "banner", "cta", "modal", "dialog",
}

PATTERN_KEYWORDS = [
    ("card", ("card", "product")),
    ("nav", ("nav", "menu", "link", "breadcrumb")),
    ("list", ("item", "list", "row", "entry")),
    ("section", ("section", "hero", "feature")),
]

SAMPLE_LENGTH = 200
_OPEN_TAG = re.compile(r"<([a-zA-Z][\w-]*)")


def element_selector(node: ParsedNode) -> str:
    """Grouping key of an element: data-component > id > first class > tag name."""
    data_component = node.attributes.html.get("data-component")
    if isinstance(data_component, str) and data_component:
        return data_component
    node_id = node.attributes.html.get("id")
    if isinstance(node_id, str) and node_id:
        return node_id
    classes = node.attributes.classes
    if classes:
        return classes[0]
    return node.tag_name or ""


def element_identifier(node: ParsedNode) -> str:
    """The string a pattern uses to list one of its members."""
    return f"{element_selector(node)} ({node.tag_name})"


def normalize_pattern_name(selector: str) -> str:
    return re.sub(r"^[.#]", "", selector).replace("__", "-")


def _tag_sequence(value: Union[str, ParsedNode]) -> List[str]:
    if isinstance(value, ParsedNode):
        return [n.tag_name for n in iter_elements(value) if n.tag_name]
    return [t.lower() for t in _OPEN_TAG.findall(value or "")]


class PatternDetector:
    """
    Finds repeating structures (cards, list items, nav links) in a document.

    Elements are grouped by their selector key; a group is reported when it
    repeats often enough (or carries a section-level name) and its members
    are structurally similar.
    """

    def __init__(
            self,
            min_pattern_occurrences: int = 2,
            similarity_threshold: float = 0.7,
            parser: Optional[HTMLParser] = None,
    ):
        self.min_pattern_occurrences = min_pattern_occurrences
        self.similarity_threshold = similarity_threshold
        self._parser = parser

    def detect_patterns(self, source: Union[str, ParsedDocument, None]) -> List[PatternDetectionResult]:
        """
        Args:
            source: Raw HTML or an already parsed document.

        Returns:
            One PatternDetectionResult per qualifying group, in first-seen order.
        """
        root = self._resolve_root(source)
        if root is None:
            return []

        groups: Dict[str, List[ParsedNode]] = {}
        for node in iter_elements(root):
            if not self._is_candidate(node):
                continue
            selector = element_selector(node)
            if selector:
                groups.setdefault(selector, []).append(node)

        patterns = []
        for selector, members in groups.items():
            confidence = self.calculate_pattern_confidence(members)
            explicit = any(m.attributes.classes or m.attributes.html.get("data-component") for m in members)
            threshold = 0.0 if explicit else self.similarity_threshold

            enough = len(members) >= self.min_pattern_occurrences or self.is_semantic_pattern(selector)
            if not (enough and confidence >= threshold):
                logger.debug("Skipping group '%s' (count=%d, confidence=%.2f).", selector, len(members), confidence)
                continue

            patterns.append(PatternDetectionResult(
                pattern=normalize_pattern_name(selector),
                count=len(members),
                elements=[element_identifier(m) for m in members],
                confidence=confidence,
                pattern_type=self.classify_pattern(selector),
                sample_structure=render_html(members[0])[:SAMPLE_LENGTH] + "...",
            ))

        logger.debug("Detected %d patterns.", len(patterns))
        return patterns

    def _resolve_root(self, source: Union[str, ParsedDocument, None]) -> Optional[ParsedNode]:
        if isinstance(source, ParsedDocument):
            return source.root
        if not source or not source.strip():
            return None
        if self._parser is None:
            self._parser = HTMLParser()
        return self._parser.parse(source).root

    @staticmethod
    def _is_candidate(node: ParsedNode) -> bool:
        html = node.attributes.html
        if html.get("id") or node.attributes.classes or html.get("data-component"):
            return True
        return node.tag_name in REPEATING_TAGS

    # --- Scoring ---

    @staticmethod
    def calculate_similarity(first: Union[str, ParsedNode], second: Union[str, ParsedNode]) -> float:
        """Multiset Jaccard overlap of the tag sequences of two structures."""
        tags_a, tags_b = _tag_sequence(first), _tag_sequence(second)
        if not tags_a and not tags_b:
            return 1.0
        if not tags_a or not tags_b:
            return 0.0
        if tags_a == tags_b:
            return 1.0

        count_a, count_b = Counter(tags_a), Counter(tags_b)
        intersection = sum((count_a & count_b).values())
        union = sum((count_a | count_b).values())
        return intersection / union

    def _average_similarity(self, items: Sequence[Union[str, ParsedNode]]) -> Optional[float]:
        total, comparisons = 0.0, 0
        for i in range(len(items) - 1):
            for j in range(i + 1, len(items)):
                total += self.calculate_similarity(items[i], items[j])
                comparisons += 1
        return total / comparisons if comparisons else None

    def calculate_pattern_confidence(self, members: Sequence[ParsedNode]) -> float:
        """
        0.3 * min(count / 5, 1) + 0.7 * average pairwise similarity.

        Groups of two or more near-identical members (similarity >= 0.95) get a
        0.2 bonus. A single member has no pairs, so it never earns the bonus.
        """
        count_score = min(len(members) / 5, 1.0)
        similarity = self._average_similarity(members)
        if similarity is None:
            return min(count_score * 0.3 + 0.7, 1.0)

        confidence = count_score * 0.3 + similarity * 0.7
        if similarity >= 0.95:
            confidence += 0.2
        return max(0.0, min(confidence, 1.0))

    def is_repeating_pattern(self, elements: Sequence[Union[str, ParsedNode]]) -> bool:
        if len(elements) < self.min_pattern_occurrences:
            return False
        similarity = self._average_similarity(elements)
        return similarity is not None and similarity >= self.similarity_threshold

    # --- Classification ---

    @staticmethod
    def is_semantic_pattern(selector: str) -> bool:
        normalized = re.sub(r"[.#]", "", selector.lower()).replace("__", "-")
        return normalized in SEMANTIC_SECTION_NAMES

    @staticmethod
    def classify_pattern(selector: Union[str, Sequence[str]]) -> str:
        if not isinstance(selector, str):
            selector = selector[0] if selector else ""
        normalized = selector.lower().replace("__", "-")
        for pattern_type, keywords in PATTERN_KEYWORDS:
            if any(k in normalized for k in keywords):
                return pattern_type
        return "unknown"

    def group_by_pattern(self, selectors: Sequence[str]) -> Dict[str, List[str]]:
        groups: Dict[str, List[str]] = {}
        for selector in selectors:
            groups.setdefault(self.classify_pattern(selector), []).append(selector)
        return groups
