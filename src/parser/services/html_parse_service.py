# src/parser/services/html_parse_service.py
from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple

from bs4 import BeautifulSoup, Comment, NavigableString, PageElement, Tag
from bs4.element import PreformattedString

from parser.model import (
    DocumentMetadata,
    EmptyInputError,
    ParsedDocument,
    ParsedNode,
    ParseOptions,
    ParseProgress,
)
from parser.services.attribute_extract_service import AttributeExtractor
from parser.services.semantic_analysis_service import SemanticAnalyzer

logger = logging.getLogger(__name__)


class _IdSequence:
    """Hands out `node-N` ids in creation order. Reset for every parse."""

    def __init__(self, prefix: str = "node"):
        self.prefix = prefix
        self.counter = 0

    def next(self) -> str:
        value = f"{self.prefix}-{self.counter}"
        self.counter += 1
        return value

    def reset(self) -> None:
        self.counter = 0


class HTMLParser:
    """
    Converts an HTML string into a ParsedDocument.

    BeautifulSoup does the tolerant tokenizing; this service translates the
    soup into the flat node arena once (pre-order ids, weak parent links)
    and runs the semantic analyzer over the result.
    """

    def __init__(
            self,
            attribute_extractor: Optional[AttributeExtractor] = None,
            semantic_analyzer: Optional[SemanticAnalyzer] = None,
    ):
        self.attribute_extractor = attribute_extractor or AttributeExtractor()
        self.semantic_analyzer = semantic_analyzer or SemanticAnalyzer()
        self._ids = _IdSequence()

    def parse(self, html: Optional[str], options: Optional[ParseOptions] = None) -> ParsedDocument:
        """
        Parses HTML into the node arena.

        Args:
            html: The markup. `None` is rejected, empty input yields an empty fragment.
            options: Depth limit, whitespace/comment handling, custom semantic
                     rules and an optional progress callback.

        Returns:
            ParsedDocument with root, node map, metadata and semantic sections.
        """
        if html is None:
            raise EmptyInputError("HTML input cannot be None.")

        options = options or ParseOptions()
        source = html.strip()
        self._ids.reset()

        if not source:
            return self._empty_document()

        self._report(options, ParseProgress(stage="parsing"))

        soup = BeautifulSoup(source, "html.parser")
        metadata = self._extract_metadata(soup, source)

        nodes: Dict[str, ParsedNode] = {}
        top_level = [c for c in self._top_level_sources(soup) if self._is_significant(c, options)]

        if len(top_level) == 1 and isinstance(top_level[0], Tag):
            root = self._build(top_level[0], None, 0, nodes, options)
        else:
            root = self._new_node("fragment", 0)
            nodes[root.id] = root
            self._build_children(root, top_level, 1, nodes, options)

        metadata.node_count = len(nodes)
        metadata.max_depth = max((n.depth for n in nodes.values() if n.kind == "element"), default=0)
        self._collect_unique_info(nodes, metadata)

        self._report(options, ParseProgress(stage="analyzing", processed=len(nodes), total=len(nodes)))
        sections = self.semantic_analyzer.analyze(root, options.semantic_rules or None)
        self._report(options, ParseProgress(stage="complete", processed=len(nodes), total=len(nodes)))

        logger.debug("Parsed %d nodes (max depth %d, %d sections).",
                     metadata.node_count, metadata.max_depth, len(sections))
        return ParsedDocument(root=root, nodes=nodes, metadata=metadata, sections=sections)

    # --- Arena construction ---

    def _build(
            self,
            source: PageElement,
            parent: Optional[ParsedNode],
            depth: int,
            nodes: Dict[str, ParsedNode],
            options: ParseOptions,
    ) -> Optional[ParsedNode]:
        """Builds the subtree below `source` with an explicit stack. Returns its root."""
        built_root: Optional[ParsedNode] = None
        stack: List[Tuple[PageElement, Optional[ParsedNode], int]] = [(source, parent, depth)]

        while stack:
            current, owner, level = stack.pop()
            if options.max_depth is not None and level > options.max_depth:
                continue

            node = self._translate(current, level, options)
            if node is None:
                continue

            nodes[node.id] = node
            if owner is not None:
                owner.children.append(node)
                node.set_parent(owner)
            if built_root is None:
                built_root = node

            if isinstance(current, Tag):
                children = [c for c in current.children if self._is_significant(c, options)]
                stack.extend((c, node, level + 1) for c in reversed(children))

        return built_root

    def _build_children(
            self,
            owner: ParsedNode,
            sources: List[PageElement],
            depth: int,
            nodes: Dict[str, ParsedNode],
            options: ParseOptions,
    ) -> None:
        for source in sources:
            self._build(source, owner, depth, nodes, options)

    def _translate(self, source: PageElement, depth: int, options: ParseOptions) -> Optional[ParsedNode]:
        if isinstance(source, Tag):
            node = self._new_node("element", depth, tag_name=(source.name or "").lower())
            node.attributes = self.attribute_extractor.extract(source)
            node.bind_source(source)
            return node
        if isinstance(source, Comment):
            if not options.include_comments:
                return None
            return self._new_node("comment", depth, text_content=str(source))
        if isinstance(source, PreformattedString):
            # doctype, CDATA, processing instructions
            return None
        if isinstance(source, NavigableString):
            text = str(source)
            if not options.preserve_whitespace and not text.strip():
                return None
            return self._new_node("text", depth, text_content=text)
        return None

    def _new_node(self, kind: str, depth: int, **fields) -> ParsedNode:
        return ParsedNode(id=self._ids.next(), kind=kind, depth=depth, **fields)

    @staticmethod
    def _is_significant(source: PageElement, options: ParseOptions) -> bool:
        if isinstance(source, Tag):
            return True
        if isinstance(source, Comment):
            return options.include_comments
        if isinstance(source, PreformattedString):
            return False
        if isinstance(source, NavigableString):
            return options.preserve_whitespace or bool(str(source).strip())
        return False

    @staticmethod
    def _top_level_sources(soup: BeautifulSoup) -> List[PageElement]:
        if soup.body is not None:
            return list(soup.body.children)
        if soup.html is not None:
            return [c for c in soup.html.children if not (isinstance(c, Tag) and c.name == "head")]
        return [c for c in soup.contents if not (isinstance(c, Tag) and c.name == "head")]

    def _empty_document(self) -> ParsedDocument:
        root = self._new_node("fragment", 0)
        return ParsedDocument(
            root=root,
            nodes={root.id: root},
            metadata=DocumentMetadata(source="", node_count=1, max_depth=0),
            sections=[],
        )

    # --- Metadata ---

    @staticmethod
    def _extract_metadata(soup: BeautifulSoup, source: str) -> DocumentMetadata:
        metadata = DocumentMetadata(source=source)

        title = soup.find("title")
        if title:
            metadata.title = title.get_text() or None

        html_el = soup.find("html")
        if html_el and html_el.get("lang"):
            metadata.lang = html_el.get("lang")

        charset = soup.find("meta", attrs={"charset": True})
        if charset:
            metadata.charset = charset.get("charset") or None

        viewport = soup.find("meta", attrs={"name": "viewport"})
        if viewport:
            metadata.viewport = viewport.get("content") or None

        return metadata

    @staticmethod
    def _collect_unique_info(nodes: Dict[str, ParsedNode], metadata: DocumentMetadata) -> None:
        tags, classes, ids = set(), set(), set()
        for node in nodes.values():
            if node.kind != "element":
                continue
            if node.tag_name:
                tags.add(node.tag_name)
            classes.update(node.attributes.classes)
            node_id = node.attributes.html.get("id")
            if isinstance(node_id, str) and node_id:
                ids.add(node_id)

        metadata.unique_tags = sorted(tags)
        metadata.unique_classes = sorted(classes)
        metadata.unique_ids = sorted(ids)

    @staticmethod
    def _report(options: ParseOptions, progress: ParseProgress) -> None:
        if options.on_progress is None:
            return
        try:
            options.on_progress(progress)
        except Exception as e:
            logger.warning(f"Progress callback failed during '{progress.stage}': {e}")
