# src/converter/services/jsx_generator_service.py
import logging
import re
from typing import Any, Dict, List, Optional, Tuple, Union

from converter.model import GeneratedFile, GeneratorOptions, GeneratorResult, GeneratorStats, TransformedAttribute
from converter.services.attribute_transform_service import AttributeTransformer
from converter.services.code_format_service import CodeFormatter
from parser.model import ParsedNode
from parser.services.attribute_extract_service import VOID_ELEMENTS, AttributeExtractor
from parser.services.html_parse_service import HTMLParser

logger = logging.getLogger(__name__)

SELF_CLOSING_TAGS = VOID_ELEMENTS | {"keygen"}
INDENT = "  "
# Body lines sit inside `function X() {` + `return (`
BODY_LEVEL = 2

_NUMERIC = re.compile(r"^\d+(\.\d+)?$")
_EXPRESSION = re.compile(r"^\{(.*)\}$", re.DOTALL)

Line = Tuple[int, str]


def escape_text(text: str) -> str:
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace("{", "&#123;")
        .replace("}", "&#125;")
    )


def escape_attribute(value: str) -> str:
    return (
        value.replace("&", "&amp;")
        .replace('"', "&quot;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
    )


class JSXGenerator:
    """
    Emits a React function component (JSX) for a parsed subtree.

    Attributes go back through their HTML names and the AttributeTransformer,
    so custom transform rules apply to generated code as well.
    """

    extension = "jsx"

    def __init__(
            self,
            options: Optional[GeneratorOptions] = None,
            transformer: Optional[AttributeTransformer] = None,
            formatter: Optional[CodeFormatter] = None,
    ):
        self.options = options or GeneratorOptions()
        self.transformer = transformer or AttributeTransformer()
        self.formatter = formatter or CodeFormatter(self.options.formatting)
        self.extractor = AttributeExtractor()
        self.warnings: List[str] = []
        self.stats = GeneratorStats()

    @property
    def component_name(self) -> str:
        return self.options.component_name or "Component"

    def generate(self, source: Union[ParsedNode, str]) -> GeneratorResult:
        """
        Args:
            source: The subtree to render, or raw HTML which is parsed first.

        Returns:
            GeneratorResult with a single component file.
        """
        self.warnings = []
        self.reset_stats()

        node = self._resolve(source)
        self._before_generate(node)
        content = self.generate_component(node)

        component = GeneratedFile(
            file_name=f"{self.component_name}.{self.extension}",
            content=content,
            file_type="component",
        )
        self.stats.components_generated = 1
        self.stats.lines_of_code = len(content.splitlines())

        logger.debug("Generated %s (%d lines).", component.file_name, self.stats.lines_of_code)
        return GeneratorResult(
            files=[component],
            warnings=list(self.warnings),
            stats=self.stats.model_copy(),
            entry_point=component.file_name,
        )

    @staticmethod
    def _resolve(source: Union[ParsedNode, str]) -> ParsedNode:
        if isinstance(source, ParsedNode):
            return source
        return HTMLParser().parse(source or "").root

    def _before_generate(self, node: ParsedNode) -> None:
        """Hook for subclasses that need a pass over the tree first."""

    def generate_component(self, node: ParsedNode) -> str:
        code = self.generate_imports() + self.generate_component_body(node)
        return self.formatter.format(code, self.extension)

    def generate_imports(self) -> str:
        imports = []
        if self.options.include_react_import:
            imports.append("import React from 'react';")
        imports.extend(self.options.custom_imports)
        return "\n".join(imports) + "\n\n" if imports else ""

    def generate_component_body(self, node: ParsedNode) -> str:
        return "\n".join([
            f"function {self.component_name}() {{",
            f"{INDENT}return (",
            self.render_jsx(node),
            f"{INDENT});",
            "}",
            "",
            f"export default {self.component_name};",
            "",
        ])

    # --- JSX rendering ---

    def render_jsx(self, node: ParsedNode, level: int = BODY_LEVEL) -> str:
        lines = self._emit(node, level)
        if not lines:
            lines = [(level, "null")]
        return "\n".join(f"{INDENT * lvl}{text}" for lvl, text in lines)

    def _emit(self, root: ParsedNode, level: int) -> List[Line]:
        lines: List[Line] = []

        top = root
        if root.kind == "fragment":
            significant = [c for c in root.children if self._renders(c)]
            if not significant:
                return lines
            if len(significant) == 1:
                top = significant[0]

        # (node, level, closing)
        stack: List[Tuple[ParsedNode, int, bool]] = [(top, level, False)]
        while stack:
            node, lvl, closing = stack.pop()
            if closing:
                lines.append((lvl, "</>" if node.kind == "fragment" else f"</{node.tag_name}>"))
                continue

            self.stats.elements_processed += 1

            if node.kind == "text":
                if self._renders(node):
                    lines.append((lvl, self._text_line(node)))
                continue

            if node.kind == "comment":
                lines.append((lvl, f"{{/* {(node.text_content or '').strip()} */}}"))
                continue

            children = [c for c in node.children if self._renders(c)]

            if node.kind == "fragment":
                lines.append((lvl, "<>"))
                stack.append((node, lvl, True))
                stack.extend((c, lvl + 1, False) for c in reversed(children))
                continue

            attrs = self.build_attributes(node)
            tag = node.tag_name or "div"
            if tag in SELF_CLOSING_TAGS or not children:
                lines.append((lvl, f"<{tag} {attrs} />" if attrs else f"<{tag} />"))
                continue

            lines.append((lvl, f"<{tag} {attrs}>" if attrs else f"<{tag}>"))
            stack.append((node, lvl, True))
            stack.extend((c, lvl + 1, False) for c in reversed(children))

        return lines

    @staticmethod
    def _renders(node: ParsedNode) -> bool:
        if node.kind == "text":
            return bool((node.text_content or "").strip())
        return True

    def _text_line(self, node: ParsedNode) -> str:
        """Escaped text; edge whitespace next to a rendered sibling becomes an explicit `{' '}`."""
        raw = node.text_content or ""
        text = escape_text(raw.strip())
        parent = node.parent
        siblings = [c for c in parent.children if self._renders(c)] if parent is not None else [node]
        if raw[:1].isspace() and siblings[0] is not node:
            text = "{' '}" + text
        if raw[-1:].isspace() and siblings[-1] is not node:
            text += "{' '}"
        return text

    # --- Attributes ---

    def transform_attributes(self, node: ParsedNode) -> List[TransformedAttribute]:
        html_attrs = self.extractor.to_html_dict(node.attributes)
        transformed = self.transformer.transform_batch(html_attrs)
        self.stats.attributes_transformed += len(transformed)
        return transformed

    def build_attributes(self, node: ParsedNode) -> str:
        parts = []
        for attr in self.transform_attributes(node):
            rendered = self.render_attribute(attr)
            if rendered:
                parts.append(rendered)
        return " ".join(parts)

    def render_attribute(self, attr: TransformedAttribute) -> str:
        name, value = attr.name, attr.value
        if name == "className" and not self.options.convert_class_to_class_name:
            name = "class"

        if attr.type == "style" and isinstance(value, dict):
            if not value:
                return ""
            self.stats.inline_styles_converted += 1
            return f"style={{{self.style_object(value)}}}"

        if value is True:
            return name
        if value is False or value is None:
            return ""

        if isinstance(value, str):
            expression = _EXPRESSION.match(value)
            if expression:
                return f"{name}={{{expression.group(1)}}}"
            if attr.type == "event":
                self.warnings.append(f"Inline handler on {name} wrapped in an arrow function.")
                return f"{name}={{() => {{ {value.strip().rstrip(';')}; }}}}"
            return f'{name}="{escape_attribute(value)}"'

        return f"{name}={{{self._literal(value)}}}"

    @staticmethod
    def style_object(styles: Dict[str, str]) -> str:
        entries = []
        for key, value in styles.items():
            if _NUMERIC.match(value):
                entries.append(f"{key}: {value}")
            else:
                escaped = value.replace("\\", "\\\\").replace("'", "\\'")
                entries.append(f"{key}: '{escaped}'")
        return "{ " + ", ".join(entries) + " }"

    def _literal(self, value: Any) -> str:
        if isinstance(value, dict):
            return self.style_object({str(k): str(v) for k, v in value.items()})
        return repr(value)

    # --- Stats ---

    def get_stats(self) -> GeneratorStats:
        return self.stats.model_copy()

    def reset_stats(self) -> None:
        self.stats = GeneratorStats()
