# src/parser/utils/dom_utils.py
"""
Helpers that operate on the parsed node arena: serialization back to HTML,
text extraction, element iteration and CSS selector matching (soupsieve).

All walks use an explicit stack so pathological nesting cannot exhaust the
interpreter's recursion limit.
"""
from html import escape
from typing import Iterator, List, Optional, Tuple

import soupsieve
from bs4 import BeautifulSoup, Tag

from parser.model import InvalidSelectorError, ParsedNode
from parser.services.attribute_extract_service import VOID_ELEMENTS, AttributeExtractor

RAW_TEXT_ELEMENTS = {"script", "style"}

_extractor = AttributeExtractor()


def render_html(node: ParsedNode) -> str:
    """Serializes a node (and its subtree) back to an HTML string."""
    out: List[str] = []
    # (node, closing, raw_text)
    stack: List[Tuple[ParsedNode, bool, bool]] = [(node, False, False)]

    while stack:
        current, closing, raw = stack.pop()
        if closing:
            out.append(f"</{current.tag_name}>")
            continue

        if current.kind == "text":
            text = current.text_content or ""
            out.append(text if raw else escape(text, quote=False))
        elif current.kind == "comment":
            out.append(f"<!--{current.text_content or ''}-->")
        elif current.kind == "fragment":
            stack.extend((c, False, False) for c in reversed(current.children))
        else:
            attrs = _extractor.to_html_string(current.attributes)
            out.append(f"<{current.tag_name} {attrs}>" if attrs else f"<{current.tag_name}>")
            if current.tag_name in VOID_ELEMENTS:
                continue
            stack.append((current, True, False))
            child_raw = current.tag_name in RAW_TEXT_ELEMENTS
            stack.extend((c, False, child_raw) for c in reversed(current.children))

    return "".join(out)


def iter_nodes(node: ParsedNode) -> Iterator[ParsedNode]:
    """Yields the node and all descendants in document (pre-)order."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def iter_elements(node: ParsedNode, include_self: bool = True) -> Iterator[ParsedNode]:
    for current in iter_nodes(node):
        if current.kind != "element":
            continue
        if current is node and not include_self:
            continue
        yield current


def text_content(node: ParsedNode) -> str:
    return "".join(n.text_content or "" for n in iter_nodes(node) if n.kind == "text")


def element_nesting_depth(node: ParsedNode) -> int:
    """Depth of the deepest descendant element, counting the node itself as 0."""
    deepest = 0
    stack = [(node, 0)]
    while stack:
        current, level = stack.pop()
        deepest = max(deepest, level)
        stack.extend((c, level + 1) for c in current.element_children)
    return deepest


def compile_selector(selector: str) -> soupsieve.SoupSieve:
    """Compiles a CSS selector, raising InvalidSelectorError on bad syntax."""
    try:
        return soupsieve.compile(selector or "")
    except soupsieve.SelectorSyntaxError as e:
        raise InvalidSelectorError(f"Unsupported selector: '{selector}' ({e})") from e


def _match_target(node: ParsedNode) -> Optional[Tag]:
    tag = node.source_tag
    if isinstance(tag, Tag):
        return tag
    # Nodes built outside the parser only match within their own subtree
    soup = BeautifulSoup(render_html(node), "html.parser")
    return soup.find(True)


def selector_matches(node: ParsedNode, selector: str) -> bool:
    """
    Tests an element against a CSS selector.

    Matching runs on the bs4 tag the node was parsed from, so combinators and
    structural pseudo-classes see the whole document. Invalid selectors raise
    InvalidSelectorError, even for non-element nodes.
    """
    compiled = compile_selector(selector)
    if node.kind != "element":
        return False
    target = _match_target(node)
    return target is not None and compiled.match(target)
