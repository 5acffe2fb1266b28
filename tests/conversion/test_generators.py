# tests/conversion/test_generators.py
import pytest

from converter.model import GeneratorOptions, PropDefinition, TsxGeneratorOptions
from converter.services.jsx_generator_service import JSXGenerator, escape_attribute, escape_text
from converter.services.tsx_generator_service import TSXGenerator, infer_prop_type
from parser.services.html_parse_service import HTMLParser

BOX = '<div class="box" data-reactid="3"><label for="name">Name</label><input id="name" disabled></div>'


def test_jsx_component_file():
    """Test the emitted JSX component for a small form fragment."""
    result = JSXGenerator(GeneratorOptions(component_name="Box")).generate(BOX)

    assert [f.file_name for f in result.files] == ["Box.jsx"]
    assert result.entry_point == "Box.jsx"
    code = result.files[0].content
    assert code.startswith("import React from 'react';\n")
    assert "function Box() {" in code
    assert '<div className="box">' in code
    assert '<label htmlFor="name">' in code
    assert '<input id="name" disabled />' in code
    assert "data-reactid" not in code
    assert code.rstrip().endswith("export default Box;")


def test_jsx_accepts_parsed_node():
    """Test that an already parsed subtree can be rendered."""
    node = HTMLParser().parse("<p>Hello</p>").root
    code = JSXGenerator().generate(node).files[0].content
    assert "<p>\n" in code
    assert "Hello" in code


def test_jsx_keeps_spaces_around_inline_elements():
    """Test that whitespace between text and inline elements survives the line breaks."""
    code = JSXGenerator().generate("<p>Hello <b>world</b> again</p>").files[0].content
    assert "Hello{' '}\n" in code
    assert "{' '}again\n" in code
    assert "world{' '}" not in code


def test_jsx_edge_text_has_no_explicit_space():
    """Test that whitespace at the start or end of an element is not rendered."""
    code = JSXGenerator().generate("<p> Hello </p>").files[0].content
    assert "{' '}" not in code


def test_jsx_fragment_for_multiple_roots():
    """Test that several top-level elements are wrapped in a fragment."""
    code = JSXGenerator().generate("<p>a</p><p>b</p>").files[0].content
    assert "<>" in code
    assert "</>" in code


def test_jsx_empty_source_renders_null():
    """Test that empty input renders null."""
    code = JSXGenerator().generate("").files[0].content
    assert "null" in code


def test_inline_style_object():
    """Test that inline styles become a style object with numeric values unquoted."""
    generator = JSXGenerator()
    code = generator.generate('<div style="color: red; z-index: 2"></div>').files[0].content
    assert "style={{ color: 'red', zIndex: 2 }}" in code
    assert generator.get_stats().inline_styles_converted == 1


def test_string_handler_is_wrapped():
    """Test that string event handlers become arrow functions with a warning."""
    result = JSXGenerator().generate('<button onclick="save()">Save</button>')
    assert "onClick={() => { save(); }}" in result.files[0].content
    assert len(result.warnings) == 1


def test_class_attribute_kept_when_requested():
    """Test that class is kept when className conversion is off."""
    options = GeneratorOptions(convert_class_to_class_name=False)
    code = JSXGenerator(options).generate('<div class="a"></div>').files[0].content
    assert '<div class="a" />' in code


def test_custom_imports():
    """Test that extra imports follow the React import."""
    options = GeneratorOptions(custom_imports=["import './styles.css';"], include_react_import=False)
    code = JSXGenerator(options).generate("<div></div>").files[0].content
    assert code.startswith("import './styles.css';\n")
    assert "import React" not in code


def test_escaping():
    """Test text and attribute escaping."""
    assert escape_text("a < b {x}") == "a &lt; b &#123;x&#125;"
    assert escape_attribute('say "hi" & go') == "say &quot;hi&quot; &amp; go"


@pytest.mark.parametrize("name, value, expected", [
    ("itemCount", "", "number"),
    ("isOpen", "", "boolean"),
    ("onSaveHandler", "", "() => void"),
    ("size", "{3}", "number"),
    ("flag", "{true}", "boolean"),
    ("title", "", "string"),
])
def test_infer_prop_type(name, value, expected):
    """Test prop type inference from names and values."""
    assert infer_prop_type(name, value) == expected


def test_tsx_detected_props():
    """Test that {prop} attribute values become typed, destructured props."""
    options = TsxGeneratorOptions(component_name="Card", detect_props_from_attributes=True)
    generator = TSXGenerator(options)
    result = generator.generate('<div class="card" title="{title}"><span data-count="{itemCount}">x</span></div>')

    code = result.files[0].content
    assert result.files[0].file_name == "Card.tsx"
    assert "interface CardProps {\n  title?: string;\n  itemCount?: number;\n}" in code
    assert "export function Card({ title, itemCount }: CardProps) {" in code
    assert 'title={title}' in code
    assert "export default" not in code
    assert [p.name for p in generator.get_detected_props()] == ["title", "itemCount"]


def test_tsx_without_props():
    """Test the empty interface and default export."""
    options = TsxGeneratorOptions(component_name="Empty", export_type="default")
    code = TSXGenerator(options).generate("<div></div>").files[0].content
    assert "interface EmptyProps {}" in code
    assert "export default function Empty() {" in code


def test_tsx_custom_props_win():
    """Test that caller props override detected props and carry defaults and descriptions."""
    options = TsxGeneratorOptions(component_name="Badge", detect_props_from_attributes=True)
    generator = TSXGenerator(options)
    generator.add_custom_prop(PropDefinition(name="label", type="string", required=True,
                                             default_value="New", description="Badge text"))
    code = generator.generate('<span title="{label}"></span>').files[0].content

    assert "  /** Badge text */\n  label: string;" in code
    assert 'export function Badge({ label = "New" }: BadgeProps) {' in code


def test_tsx_prop_management():
    """Test removing props and switching the export style."""
    generator = TSXGenerator(TsxGeneratorOptions(component_name="Row"))
    generator.add_custom_prop(PropDefinition(name="id"))
    generator.remove_prop("id")
    assert generator.get_all_props() == []

    generator.set_export_type("default")
    assert "export default function Row()" in generator.generate("<tr></tr>").files[0].content


def test_tsx_without_prop_types():
    """Test that the interface and annotation are omitted when prop types are off."""
    options = TsxGeneratorOptions(component_name="Plain", include_prop_types=False,
                                  custom_props=[PropDefinition(name="text")])
    code = TSXGenerator(options).generate("<p>x</p>").files[0].content
    assert "interface" not in code
    assert "export function Plain({ text }) {" in code
