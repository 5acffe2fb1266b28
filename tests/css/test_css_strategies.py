# tests/css/test_css_strategies.py
import pytest

from converter.css.core import (
    CssConverterContext,
    content_hash,
    parse_style_declarations,
    properties_key,
    split_important,
)
from converter.css.model import CssConverterOptions, ParsedStyle, UnknownStrategyError
from converter.css.registry import StrategyRegistry, create_css_converter, get_available_strategies
from converter.css.strategies.css_modules import CssModulesConverter, repeated_values
from converter.css.strategies.tailwind import TailwindConverter, tailwind_class
from converter.css.strategies.vanilla import VanillaCssConverter, sanitize_selector

STYLED = '<div style="color: red; padding: 10px;">a</div>'
TWICE = STYLED + STYLED


# --- Helpers ---

def test_parse_style_declarations():
    """Test declaration parsing with lower-cased names and raw values."""
    assert parse_style_declarations("Color: Red; ; broken; margin:0 auto") == {"color": "Red", "margin": "0 auto"}


def test_split_important():
    """Test splitting the !important flag off a value."""
    assert split_important("red !important") == ("red", True)
    assert split_important(" red ") == ("red", False)


def test_properties_key_is_order_independent():
    """Test that declaration order does not change the key or hash."""
    first = properties_key({"color": "red", "padding": "1px"})
    second = properties_key({"padding": "1px", "color": "red"})
    assert first == second
    assert content_hash(first) == content_hash(second)
    assert len(content_hash(first, 8)) == 8


# --- Registry ---

def test_registry_discovers_all_strategies():
    """Test that every strategy module registers itself."""
    assert get_available_strategies() == ["css-modules", "tailwind", "vanilla"]
    assert isinstance(create_css_converter("tailwind"), TailwindConverter)
    assert create_css_converter("vanilla") is not create_css_converter("vanilla")


def test_unknown_strategy_raises():
    """Test that an unknown name raises and lists the available strategies."""
    with pytest.raises(UnknownStrategyError) as excinfo:
        StrategyRegistry.create("sass")
    assert "css-modules" in str(excinfo.value)


# --- CSS Modules ---

def test_css_modules_optimize_shares_one_class():
    """Test that equal declarations share one generated class when optimizing."""
    converter = CssModulesConverter()
    result = converter.convert(TWICE, CssConverterOptions(optimize=True))

    classes = list(result.class_name_map.values())
    assert len(classes) == 2
    assert classes[0] == classes[1]
    assert classes[0].startswith("_")
    assert result.css.count(f".{classes[0]} {{") == 1
    assert "style=" not in result.html
    assert converter.get_stats().rules_extracted == 1


def test_css_modules_without_optimize_numbers_repeats():
    """Test that repeats get their own numbered class without optimizing."""
    result = CssModulesConverter().convert(TWICE, CssConverterOptions(optimize=False))
    first, second = result.class_name_map.values()
    assert second == f"{first}_2"


def test_css_modules_prefix_and_file():
    """Test the class prefix and the module stylesheet name."""
    options = CssConverterOptions(class_prefix="app", extract_to_separate_file=True, target_filename="card")
    result = CssModulesConverter().convert(STYLED, options)
    assert list(result.class_name_map.values())[0].startswith("app_")
    assert result.generated_files == ["card.module.css"]


def test_css_modules_variables():
    """Test that repeated values are hoisted into :root custom properties."""
    html = '<p style="color: red; margin: 4px">a</p><span style="color: red; padding: 2px">b</span>'
    result = CssModulesConverter().convert(html, CssConverterOptions(use_css_variables=True))
    assert ":root {\n  --css-var-0: red;\n}" in result.css
    assert "color: var(--css-var-0);" in result.css


def test_repeated_values():
    """Test detection of values used more than once."""
    styles = [ParsedStyle(properties={"color": "red"}), ParsedStyle(properties={"background": "red !important"})]
    assert repeated_values(styles) == {"red": "--css-var-0"}


# --- Vanilla ---

def test_vanilla_stylesheet_and_link():
    """Test that vanilla extraction writes rules and injects a stylesheet link."""
    options = CssConverterOptions(extract_to_separate_file=True, optimize=True)
    result = VanillaCssConverter().convert(TWICE, options)

    class_name = list(result.class_name_map.values())[0]
    assert class_name.startswith("div-")
    assert result.html.startswith('<link rel="stylesheet" href="styles.css">\n')
    assert f".{class_name} {{\n  color: red;\n  padding: 10px;\n}}" in result.css
    assert result.css.startswith("/*\n * Vanilla CSS - Auto-generated")


def test_vanilla_keeps_existing_link():
    """Test that no second link is injected when the markup has one."""
    html = '<link rel="stylesheet" href="main.css">' + STYLED
    result = VanillaCssConverter().convert(html, CssConverterOptions(extract_to_separate_file=True))
    assert result.html.count("<link") == 1


def test_vanilla_important_and_preserve_inline():
    """Test !important output and keeping the inline style."""
    html = '<b style="color: red !important">x</b>'
    result = VanillaCssConverter().convert(html, CssConverterOptions(preserve_inline=True))
    assert "color: red !important;" in result.css
    assert 'style="color: red !important"' in result.html


def test_sanitize_selector():
    """Test that selectors are reduced to short lowercase alphanumerics."""
    assert sanitize_selector("My-Element") == "myelement"
    assert sanitize_selector("") == "class"


def test_no_styles_no_css():
    """Test that markup without inline styles is returned untouched."""
    html = "<div><p>plain</p></div>"
    result = VanillaCssConverter().convert(html, CssConverterOptions())
    assert result.html == html
    assert result.css == ""


# --- Tailwind ---

def test_tailwind_utilities():
    """Test the declaration to utility mapping."""
    assert tailwind_class("display", "flex") == "flex"
    assert tailwind_class("padding", "16px") == "p-4"
    assert tailwind_class("margin", "auto") == "mx-auto"
    assert tailwind_class("opacity", "0.5") == "opacity-50"
    assert tailwind_class("top", "0") == "top-0"
    assert tailwind_class("color", "red !important") == "!text-red-500"
    assert tailwind_class("cursor", "grab") is None


def test_tailwind_conversion_warns_on_unsupported():
    """Test that unmapped declarations are reported and no stylesheet is produced."""
    html = '<div style="display: flex; padding: 16px; cursor: grab">x</div>'
    converter = TailwindConverter()
    result = converter.convert(html, CssConverterOptions())

    assert result.warnings == ["Unsupported property: cursor: grab"]
    assert 'class="flex p-4"' in result.html
    assert result.css == ""
    assert converter.get_stats().classes_generated == 2


def test_tailwind_keeps_style_without_utilities():
    """Test that an element with no mappable declaration keeps its style."""
    html = '<div style="cursor: grab">x</div>'
    result = TailwindConverter().convert(html, CssConverterOptions())
    assert result.html == html
    assert result.class_name_map == {}


# --- Context ---

def test_context_switches_strategies_and_records_history():
    """Test the strategy context delegation and history."""
    context = CssConverterContext(VanillaCssConverter())
    context.convert(STYLED, CssConverterOptions())
    assert context.get_strategy_name() == "vanilla"

    context.set_strategy(TailwindConverter())
    context.convert('<p style="display: block">x</p>')
    assert context.get_strategy_name() == "tailwind"
    assert [r.strategy for r in context.get_history()] == ["vanilla", "tailwind"]
    assert context.parse_inline_styles(STYLED)[0].properties == {"color": "red", "padding": "10px"}

    context.clear_history()
    assert context.get_history() == []


def test_generate_css_from_parsed_styles():
    """Test generating a stylesheet directly from parsed styles."""
    converter = VanillaCssConverter()
    css = converter.generate_css(converter.parse_inline_styles(TWICE), CssConverterOptions(optimize=True))
    assert css.count("{\n  color: red;") == 1


@pytest.mark.parametrize("converter_class", [VanillaCssConverter, CssModulesConverter])
def test_generate_css_ignores_previous_conversion(converter_class):
    """Test that generate_css renders only the styles it is given after a convert run."""
    converter = converter_class()
    converter.convert('<p style="color: red">a</p>')

    css = converter.generate_css(converter.parse_inline_styles('<p style="margin: 0">b</p>'))
    assert "margin: 0;" in css
    assert "color: red" not in css
    assert converter.get_stats().rules_extracted == 1
