# tests/conversion/test_component_splitter.py
import networkx as nx
import pytest

from converter.model import SplitterOptions
from converter.services.component_split_service import ComponentSplitter
from converter.services.component_tree_service import ComponentTreeBuilder
from parser.services.html_parse_service import HTMLParser

CARD = '<div class="card"><h2>Title</h2><p>Body</p></div>'
CARD_GRID = f'<div class="cards">{CARD * 3}</div>'


@pytest.fixture
def splitter():
    return ComponentSplitter(SplitterOptions(min_pattern_occurrences=2))


def test_header_becomes_single_component(splitter):
    """Test that a lone header is extracted once with the semantic-tag confidence."""
    result = splitter.split("<header><h1>Title</h1></header>")

    assert len(result.components) == 1
    header = result.components[0]
    assert header.type == "header"
    assert header.confidence == 0.95
    assert header.name == "Header"
    assert header.reason == "semantic-tag"
    assert header.role == "semantic"


def test_repeating_cards_reference_their_pattern(splitter):
    """Test that card siblings form a pattern and the extracted cards point at it."""
    result = splitter.split(CARD_GRID)

    assert [(p.pattern, p.count) for p in result.patterns] == [("card", 3)]
    cards = [c for c in result.components if c.pattern_id is not None]
    assert len(cards) == 3
    assert {c.pattern_id for c in cards} == {"card"}
    assert [c.name for c in cards] == ["Card", "Card2", "Card3"]
    assert all(c.metadata.is_pattern_item for c in cards)


def test_containment_tree(splitter):
    """Test that nested components are linked through parent and child ids."""
    result = splitter.split(CARD_GRID)
    grid = result.components[0]

    assert grid.name == "Cards"
    assert len(grid.children) == 3
    assert result.tree.root == grid.id
    assert all(result.tree.nodes[i].parent_id == grid.id for i in grid.children)
    assert len(result.tree.edges) == 3


def test_ids_and_names_restart_on_each_split(splitter):
    """Test that a second split reuses the same ids and names."""
    first = splitter.split(CARD_GRID)
    second = splitter.split(CARD_GRID)
    assert [c.id for c in first.components] == [c.id for c in second.components]
    assert [c.name for c in first.components] == [c.name for c in second.components]
    assert first.components[0].id == "component-1"


def test_split_accepts_parsed_document(splitter):
    """Test that an already parsed document can be split directly."""
    document = HTMLParser().parse("<footer><p>(c)</p></footer>")
    result = splitter.split(document)
    assert [c.name for c in result.components] == ["Footer"]


def test_empty_input_gives_empty_result(splitter):
    """Test that blank input produces no components."""
    assert splitter.split("").components == []
    assert splitter.split(None).components == []


def test_custom_selector_extracts(splitter):
    """Test that a custom selector extracts otherwise plain elements."""
    splitter.options = SplitterOptions(custom_component_selectors=["[data-widget]"])
    result = splitter.split('<div><span data-widget="clock">12:00</span></div>')
    assert [c.reason for c in result.components] == ["custom-selector"]
    assert result.components[0].confidence == 0.9


def test_combinator_selector_extracts(splitter):
    """Test that combinators are matched against the surrounding document."""
    splitter.options = SplitterOptions(custom_component_selectors=["section > .promo"])
    result = splitter.split(
        '<section class="grid"><div class="promo"><h3>Deal</h3><p>Now</p></div></section>'
    )
    assert result.warnings == []
    assert "custom-selector" in [c.reason for c in result.components]


def test_structural_pseudo_class_selector(splitter):
    """Test that :nth-child selectors only match the addressed sibling."""
    splitter.options = SplitterOptions(custom_component_selectors=["span:nth-child(2)"])
    result = splitter.split("<div><span>a</span><span>b</span><span>c</span></div>")
    custom = [c for c in result.components if c.reason == "custom-selector"]
    assert result.warnings == []
    assert len(custom) == 1
    assert custom[0].html == "<span>b</span>"


def test_invalid_selector_becomes_warning(splitter):
    """Test that an unsupported selector is reported once and skipped."""
    splitter.options = SplitterOptions(custom_component_selectors=["div["])
    result = splitter.split("<header><p>a</p><p>b</p></header>")
    assert len(result.warnings) == 1
    assert "div[" in result.warnings[0]
    assert [c.name for c in result.components] == ["Header"]


def test_max_depth_limits_extraction():
    """Test that components deeper than the maximum depth are not extracted."""
    splitter = ComponentSplitter(SplitterOptions(max_component_depth=0))
    result = splitter.split("<main><header><nav><a href='#'>x</a></nav></header></main>")
    assert [c.type for c in result.components] == ["main"]


def test_props_and_metadata(splitter):
    """Test suggested props and metadata of an interactive component."""
    result = splitter.split('<form class="login"><label>User</label><input name="u"><button>Go</button></form>')
    form = result.components[0]
    prop_names = [p.name for p in form.suggested_props]
    assert prop_names[:2] == ["className", "children"]
    assert "onClick" in prop_names
    assert form.metadata.has_interactive
    assert form.metadata.child_types == ["label", "input", "button"]


def test_split_statistics(splitter):
    """Test the aggregated run statistics."""
    result = splitter.split(CARD_GRID)
    metadata = result.metadata
    assert metadata.total_components == len(result.components)
    assert metadata.pattern_stats.total_patterns == 1
    assert metadata.pattern_stats.total_pattern_items == 3
    assert metadata.max_depth == 1


def test_tree_graph_is_acyclic(splitter):
    """Test that the containment graph is a DAG rooted at the outer component."""
    components = splitter.split(CARD_GRID).components
    graph = ComponentTreeBuilder.to_graph(components)
    assert nx.is_directed_acyclic_graph(graph)
    assert graph.out_degree(components[0].id) == 3


def test_tree_of_no_components():
    """Test that an empty component list yields an empty tree."""
    tree = ComponentTreeBuilder().build([])
    assert tree.root == ""
    assert tree.nodes == {}
