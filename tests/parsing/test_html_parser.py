# tests/parsing/test_html_parser.py
from unittest.mock import MagicMock

import pytest

from parser.model import EmptyInputError, EventHandler, InvalidSelectorError, ParsedAttributes, ParsedNode, ParseOptions
from parser.services.attribute_extract_service import AttributeExtractor
from parser.services.html_parse_service import HTMLParser
from parser.utils.dom_utils import iter_nodes, selector_matches

PAGE = """
<html lang="en">
  <head><title>Shop</title><meta charset="utf-8"></head>
  <body>
    <header class="site-header"><h1>Title</h1></header>
    <main id="content">
      <div class="card"><h2>A</h2><p>One</p></div>
      <div class="card"><h2>B</h2><p>Two</p></div>
    </main>
  </body>
</html>
"""


@pytest.fixture
def parser():
    return HTMLParser()


def test_node_count_matches_node_index(parser):
    """Test that the metadata node count equals the number of indexed nodes."""
    document = parser.parse(PAGE)
    assert document.metadata.node_count == len(document.nodes)


def test_ids_are_deterministic():
    """Test that two fresh parsers hand out the same id sequence."""
    first = HTMLParser().parse(PAGE)
    second = HTMLParser().parse(PAGE)
    assert list(first.nodes) == list(second.nodes)
    assert list(first.nodes)[0] == "node-0"


def test_none_input_raises(parser):
    """Test that None is rejected with EmptyInputError."""
    with pytest.raises(EmptyInputError):
        parser.parse(None)


def test_empty_input_gives_fragment(parser):
    """Test that empty markup yields a single fragment node."""
    document = parser.parse("")
    assert document.root.kind == "fragment"
    assert document.metadata.node_count == 1


def test_single_element_is_root(parser):
    """Test that a single top-level element becomes the root at depth 0."""
    document = parser.parse("<section><p>Hi</p></section>")
    assert document.root.kind == "element"
    assert document.root.tag_name == "section"
    assert document.root.depth == 0


def test_multiple_top_level_nodes_are_wrapped(parser):
    """Test that sibling top-level elements share a fragment root."""
    document = parser.parse("<p>a</p><p>b</p>")
    assert document.root.kind == "fragment"
    assert [c.tag_name for c in document.root.element_children] == ["p", "p"]
    assert all(c.depth == 1 for c in document.root.element_children)


def test_metadata_extraction(parser):
    """Test title, language, charset and unique tag/class/id collection."""
    metadata = parser.parse(PAGE).metadata
    assert metadata.title == "Shop"
    assert metadata.lang == "en"
    assert metadata.charset == "utf-8"
    assert "card" in metadata.unique_classes
    assert metadata.unique_ids == ["content"]
    assert metadata.unique_tags == sorted(metadata.unique_tags)


def test_parent_links(parser):
    """Test that children point back to their parent."""
    document = parser.parse("<ul><li>x</li></ul>")
    item = document.root.element_children[0]
    assert item.parent is document.root


def test_progress_callback_stages(parser):
    """Test that progress is reported through parsing, analyzing and complete."""
    callback = MagicMock()
    parser.parse(PAGE, ParseOptions(on_progress=callback))
    stages = [c.args[0].stage for c in callback.call_args_list]
    assert stages[0] == "parsing"
    assert stages[-1] == "complete"
    assert "analyzing" in stages


def test_failing_progress_callback_is_ignored(parser):
    """Test that an exception inside the progress callback does not abort parsing."""
    def explode(_):
        raise RuntimeError("boom")

    document = parser.parse("<div></div>", ParseOptions(on_progress=explode))
    assert document.root.tag_name == "div"


def test_attribute_round_trip(parser):
    """Test that serializing and re-extracting attributes reproduces an equal set."""
    extractor = AttributeExtractor()
    original = parser.parse(
        '<div id="x" class="a b" data-kind="card" aria-label="Card" style="color: red" hidden></div>'
    ).root.attributes

    serialized = extractor.to_html_string(original)
    rebuilt = HTMLParser().parse(f"<div {serialized}></div>").root.attributes

    assert extractor.equals(original, rebuilt)


def test_max_depth_drops_deeper_nodes(parser):
    """Test that nodes below the depth limit are left out of the arena."""
    document = parser.parse("<div><p><span>deep</span></p></div>", ParseOptions(max_depth=1))
    assert [n.tag_name for n in document.nodes.values()] == ["div", "p"]
    assert document.metadata.max_depth == 1


def test_comments_only_when_enabled(parser):
    """Test that comments become nodes only with include_comments."""
    html = "<div><!-- note --><p>x</p></div>"
    assert not [n for n in parser.parse(html).nodes.values() if n.kind == "comment"]

    comments = [n for n in parser.parse(html, ParseOptions(include_comments=True)).nodes.values()
                if n.kind == "comment"]
    assert [c.text_content for c in comments] == [" note "]


def test_whitespace_only_when_preserved(parser):
    """Test that whitespace-only text nodes are kept only with preserve_whitespace."""
    html = "<div> <p>x</p> </div>"

    def blank(document):
        return [n for n in document.nodes.values() if n.kind == "text" and not n.text_content.strip()]

    assert blank(parser.parse(html)) == []
    assert len(blank(parser.parse(html, ParseOptions(preserve_whitespace=True)))) == 2


def test_merge_attribute_bags():
    """Test that later bags override keys while classes and events accumulate."""
    extractor = AttributeExtractor()
    first = ParsedAttributes(html={"id": "a", "title": "t"}, style={"color": "red"}, class_name="card",
                             events=[EventHandler(type="onClick", handler="go()")])
    second = ParsedAttributes(html={"id": "b"}, style={"margin": "0"}, class_name="card--wide",
                              events=[EventHandler(type="onFocus", handler="f()")])

    merged = extractor.merge(first, second)
    assert merged.html == {"id": "b", "title": "t"}
    assert merged.style == {"color": "red", "margin": "0"}
    assert merged.classes == ["card", "card--wide"]
    assert [e.type for e in merged.events] == ["onClick", "onFocus"]
    assert first.html == {"id": "a", "title": "t"}


def test_clone_is_independent():
    """Test that a cloned bag shares no mutable state with its source."""
    extractor = AttributeExtractor()
    original = ParsedAttributes(html={"id": "a"}, style={"color": "red"})
    copy = extractor.clone(original)

    copy.html["id"] = "b"
    copy.style["color"] = "blue"
    assert extractor.equals(original, ParsedAttributes(html={"id": "a"}, style={"color": "red"}))


def test_selector_matches_against_document(parser):
    """Test combinators and pseudo-classes against the parsed document."""
    document = parser.parse('<section><div class="promo">a</div><div>b</div></section>')
    promo, plain = document.root.element_children

    assert selector_matches(promo, "section > .promo")
    assert selector_matches(plain, "div:nth-child(2)")
    assert not selector_matches(plain, "section > .promo")
    assert not selector_matches(next(n for n in iter_nodes(document.root) if n.kind == "text"), "div")


def test_selector_matches_detached_node():
    """Test matching a node that was built by hand rather than parsed."""
    node = ParsedNode(id="x", kind="element", tag_name="div", attributes=ParsedAttributes(class_name="card"))
    assert selector_matches(node, "div.card")
    assert not selector_matches(node, "section > div")


def test_invalid_selector_raises(parser):
    """Test that malformed selectors raise InvalidSelectorError."""
    document = parser.parse("<div>x</div>")
    with pytest.raises(InvalidSelectorError):
        selector_matches(document.root, "div[")
