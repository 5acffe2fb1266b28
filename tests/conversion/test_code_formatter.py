# tests/conversion/test_code_formatter.py
from converter.model import FormattingOptions
from converter.services.code_format_service import CodeFormatter

SOURCE = (
    "import React from 'react';\n"
    "\n"
    "\n"
    "function Box() {   \n"
    "  return (\n"
    "    <div />\n"
    "  );\n"
    "}\n"
    "\n"
    "export default Box;\n"
)


def test_default_formatting_is_stable():
    """Test that generator style input passes through the default policy unchanged apart from blank runs."""
    formatted = CodeFormatter().format(SOURCE, "jsx")
    assert "\n\n\n" not in formatted
    assert "function Box() {\n" in formatted
    assert formatted.endswith("export default Box;\n")


def test_tabs_and_no_semicolons():
    """Test re-indentation with tabs and dropping statement semicolons."""
    formatter = CodeFormatter(FormattingOptions(indent_style="tabs", semi=False, single_quote=False))
    formatted = formatter.format(SOURCE, "tsx")

    assert 'import React from "react"\n' in formatted
    assert "\treturn (\n\t\t<div />\n\t)\n" in formatted
    assert formatted.endswith("export default Box\n")


def test_wider_indent():
    """Test re-indentation with four spaces."""
    formatted = CodeFormatter(FormattingOptions(indent_size=4)).format(SOURCE, "jsx")
    assert "\n    return (\n        <div />\n" in formatted


def test_blank_and_unknown_input_is_returned():
    """Test that empty code, disabled formatting and unknown parsers leave the input alone."""
    assert CodeFormatter().format("") == ""
    assert CodeFormatter().format(None) == ""
    assert CodeFormatter().format(SOURCE, "css") == SOURCE
    assert CodeFormatter(FormattingOptions(enabled=False)).format(SOURCE) == SOURCE


def test_check_and_options():
    """Test the check helper and option updates."""
    formatter = CodeFormatter()
    formatted = formatter.format(SOURCE)
    assert formatter.check(formatted)
    assert not formatter.check(SOURCE)

    formatter.update_options(semi=False)
    assert formatter.get_options().semi is False
    assert "typescript" in CodeFormatter.get_supported_parsers()
