# tests/conversion/test_name_generator.py
import pytest

from converter.model import NameGenerationContext, NameHints
from converter.services.name_generator_service import (
    MAX_NAME_LENGTH,
    NameGenerator,
    apply_naming_convention,
    name_from_class,
    parse_bem,
    to_pascal_case,
)
from parser.services.html_parse_service import HTMLParser


def node_for(html):
    return HTMLParser().parse(html).root


@pytest.fixture
def generator():
    return NameGenerator()


def test_to_pascal_case():
    """Test PascalCasing of separators, camel humps and leading digits."""
    assert to_pascal_case("user-profile") == "UserProfile"
    assert to_pascal_case("card__body") == "CardBody"
    assert to_pascal_case("myCard") == "MyCard"
    assert to_pascal_case("2col-grid") == "ColGrid"
    assert to_pascal_case("") == ""


def test_parse_bem():
    """Test block/element/modifier classification of class names."""
    element = parse_bem("card__title")
    assert (element.block, element.element, element.modifier) == ("card", "title", None)
    modifier = parse_bem("button--primary")
    assert (modifier.block, modifier.modifier) == ("button", "primary")
    assert parse_bem("plain").block == "plain"


def test_naming_conventions():
    """Test the supported casing conventions."""
    assert apply_naming_convention("UserCard", "camelCase") == "userCard"
    assert apply_naming_convention("UserCard", "kebab-case") == "user-card"
    assert apply_naming_convention("UserCard", "UPPER_CASE") == "USER_CARD"


def test_names_are_distinct_until_reset(generator):
    """Test that repeated requests never return the same name twice."""
    node = node_for('<div class="card"><p>x</p></div>')
    names = [generator.generate_name(NameGenerationContext(node=node)) for _ in range(5)]
    names += [generator.generate_unique_name("Card") for _ in range(3)]

    assert len(set(names)) == len(names)
    assert names[:3] == ["Card", "Card2", "Card3"]

    generator.reset()
    assert generator.generate_name(NameGenerationContext(node=node)) == "Card"


def test_semantic_tag_names(generator):
    """Test that semantic tags map onto fixed names."""
    header = node_for("<header><h1>Title</h1></header>")
    assert generator.generate_name(NameGenerationContext(node=header)) == "Header"
    assert generator.generate_name(NameGenerationContext(type="nav")) == "Nav"


def test_explicit_data_component_wins(generator):
    """Test that a data-component attribute overrides the derived name."""
    node = node_for('<header data-component="site-banner"></header>')
    assert generator.generate_name(NameGenerationContext(node=node)) == "SiteBanner"


def test_reserved_words_get_suffix(generator):
    """Test that reserved words are suffixed with Component."""
    node = node_for('<div class="switch"></div>')
    assert generator.generate_name(NameGenerationContext(node=node)) == "SwitchComponent"


def test_bem_element_name(generator):
    """Test that a BEM element class becomes Block + Element."""
    node = node_for('<div class="card__header"></div>')
    assert generator.generate_name(NameGenerationContext(node=node)) == "CardHeader"


def test_generic_buttons(generator):
    """Test that generic button classes fall back to Button."""
    generic = node_for('<button class="btn-primary">Go</button>')
    specific = node_for('<button class="subscribe">Go</button>')
    assert generator.generate_name(NameGenerationContext(node=generic)) == "Button"
    assert generator.generate_name(NameGenerationContext(node=specific)) == "Subscribe"


def test_existing_names_are_respected(generator):
    """Test that caller supplied names are avoided."""
    node = node_for('<div class="card"></div>')
    name = generator.generate_name(NameGenerationContext(node=node, existing_names=["Card", "Card2"]))
    assert name == "Card3"


def test_generic_name_with_hints(generator):
    """Test the generic fallbacks when nothing else identifies the element."""
    assert generator.generate_name(NameGenerationContext()) == "Component1"
    hinted = generator.generate_name(NameGenerationContext(hints=NameHints(child_types=["list"])))
    assert hinted == "ListContainer2"


def test_long_names_are_truncated_uniquely(generator):
    """Test that overly long names are shortened and stay unique."""
    long_name = "Very" * 20
    first = generator.generate_unique_name(long_name)
    second = generator.generate_unique_name(long_name)
    assert len(first) <= MAX_NAME_LENGTH
    assert len(second) <= MAX_NAME_LENGTH
    assert first != second


def test_extract_prefix_from_sibling():
    """Test prefix extraction from sibling component names."""
    assert NameGenerator.extract_prefix_from_sibling("CardHeader") == "Card"
    assert NameGenerator.extract_prefix_from_sibling("") is None


def test_suggest_name_from_content(generator):
    """Test content based suggestions from headings and buttons."""
    assert generator.suggest_name_from_content("<div><h2>Latest news</h2></div>") == "LatestNews"
    assert generator.suggest_name_from_content("<div><button>Buy</button></div>") == "BuyButton"


def test_validate_name():
    """Test component identifier validation."""
    assert NameGenerator.validate_name("UserCard")
    assert not NameGenerator.validate_name("userCard")
    assert not NameGenerator.validate_name("Class")
    assert not NameGenerator.validate_name("Div")
    assert NameGenerator.validate_name("DivWrapper")


def test_name_from_class():
    """Test the one-shot class string helper."""
    assert name_from_class("product-card featured") == "ProductCard"
