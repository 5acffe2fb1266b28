# src/parser/services/attribute_extract_service.py
import logging
import re
from html import escape
from typing import Dict, List, Optional, Union

from bs4 import Tag

from parser.model import AttributeExtractionResult, EventHandler, ParsedAttributes

logger = logging.getLogger(__name__)

VOID_ELEMENTS = {
    "area", "base", "br", "col", "embed", "hr", "img", "input",
    "link", "meta", "param", "source", "track", "wbr",
}

REACT_ATTRIBUTE_ALIASES: Dict[str, str] = {
    "class": "className",
    "for": "htmlFor",
    "tabindex": "tabIndex",
    "readonly": "readOnly",
    "maxlength": "maxLength",
    "cellpadding": "cellPadding",
    "cellspacing": "cellSpacing",
    "colspan": "colSpan",
    "rowspan": "rowSpan",
    "frameborder": "frameBorder",
    "allowfullscreen": "allowFullScreen",
    "autocomplete": "autoComplete",
    "autofocus": "autoFocus",
    "autoplay": "autoPlay",
    "charset": "charSet",
    "contenteditable": "contentEditable",
    "crossorigin": "crossOrigin",
    "enctype": "encType",
    "formaction": "formAction",
    "formenctype": "formEncType",
    "formmethod": "formMethod",
    "formnovalidate": "formNoValidate",
    "formtarget": "formTarget",
    "hreflang": "hrefLang",
    "inputmode": "inputMode",
    "minlength": "minLength",
    "novalidate": "noValidate",
    "srcdoc": "srcDoc",
    "srcset": "srcSet",
}
HTML_ATTRIBUTE_NAMES: Dict[str, str] = {v: k for k, v in REACT_ATTRIBUTE_ALIASES.items()}

BOOLEAN_ATTRIBUTES = {
    "allowfullscreen", "async", "autofocus", "autoplay", "checked", "controls",
    "default", "defer", "disabled", "download", "formnovalidate", "hidden",
    "ismap", "itemscope", "loop", "multiple", "muted", "nomodule", "novalidate",
    "open", "playsinline", "readonly", "required", "reversed", "selected",
}

_EVENT_NAME = re.compile(r"^on[a-zA-Z]")
_KEBAB_SEGMENT = re.compile(r"-([a-z])")
_UPPER_CHAR = re.compile(r"([A-Z])")


def css_to_camel_case(prop: str) -> str:
    """Converts a CSS property name (kebab-case) to camelCase."""
    return _KEBAB_SEGMENT.sub(lambda m: m.group(1).upper(), prop)


def camel_to_kebab_case(prop: str) -> str:
    return _UPPER_CHAR.sub(r"-\1", prop).lower()


def parse_style_string(style_value: Optional[str]) -> Dict[str, str]:
    """
    Splits an inline style declaration into a camelCased property map.

    Declarations without a colon are skipped; values are kept verbatim
    (including `!important`).
    """
    styles: Dict[str, str] = {}
    if not style_value or not style_value.strip():
        return styles

    for declaration in style_value.split(";"):
        if not declaration.strip() or ":" not in declaration:
            continue
        prop, value = declaration.split(":", 1)
        prop = prop.strip()
        if not prop:
            continue
        styles[css_to_camel_case(prop)] = value.strip()
    return styles


def _raw_value(value: Union[str, List[str], None]) -> str:
    # bs4 hands multi-valued attributes (class, rel, ...) back as lists
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return " ".join(value)
    return str(value)


class AttributeExtractor:
    """
    Normalizes the raw attributes of a BeautifulSoup element into a
    ParsedAttributes bag.

    Categorization order (first match wins): event handler, style, class,
    alias table, boolean attribute, data-/aria- passthrough, generic.
    """

    def extract(self, element: Tag) -> ParsedAttributes:
        result = ParsedAttributes()
        for name, raw in element.attrs.items():
            self._process_attribute(name, _raw_value(raw), result)
        return result

    def extract_with_result(self, element: Tag) -> AttributeExtractionResult:
        return AttributeExtractionResult(
            attributes=self.extract(element),
            is_void=(element.name or "").lower() in VOID_ELEMENTS,
        )

    def _process_attribute(self, name: str, value: str, result: ParsedAttributes) -> None:
        lower = name.lower()

        if self.is_event_handler(name):
            result.events.append(EventHandler(type=name, handler=value))
            return

        if lower == "style":
            result.style = parse_style_string(value)
            return

        if lower == "class":
            result.class_name = value
            return

        react_name = REACT_ATTRIBUTE_ALIASES.get(lower, name)

        if lower in BOOLEAN_ATTRIBUTES:
            result.html[react_name] = True if value in ("", lower) else value
            return

        if lower.startswith("data-") or lower.startswith("aria-"):
            result.html[name] = value
            return

        result.html[react_name] = value

    @staticmethod
    def is_event_handler(name: str) -> bool:
        return bool(_EVENT_NAME.match(name))

    # --- Element helpers ---

    def get_classes(self, element: Tag) -> List[str]:
        return _raw_value(element.get("class")).split()

    def get_data_attributes(self, element: Tag) -> Dict[str, str]:
        """Returns data-* attributes keyed by their camelCased name without the prefix."""
        return {
            css_to_camel_case(name[5:]): _raw_value(value)
            for name, value in element.attrs.items()
            if name.startswith("data-")
        }

    def get_aria_attributes(self, element: Tag) -> Dict[str, str]:
        return {
            name: _raw_value(value)
            for name, value in element.attrs.items()
            if name.startswith("aria-")
        }

    # --- Bag operations ---

    def merge(self, *attributes: ParsedAttributes) -> ParsedAttributes:
        """
        Merges attribute bags left to right.

        Later html/style keys override earlier ones, class lists are
        concatenated and events are appended.
        """
        merged = ParsedAttributes()
        for attrs in attributes:
            merged.html.update(attrs.html)
            if attrs.style:
                merged.style = {**(merged.style or {}), **attrs.style}
            if attrs.class_name:
                classes = merged.classes + attrs.classes
                merged.class_name = " ".join(classes)
            merged.events.extend(e.model_copy() for e in attrs.events)
        merged.has_danger_html = any(a.has_danger_html for a in attributes)
        return merged

    def clone(self, attributes: ParsedAttributes) -> ParsedAttributes:
        return attributes.model_copy(deep=True)

    def equals(self, a: ParsedAttributes, b: ParsedAttributes) -> bool:
        if a.html != b.html or a.class_name != b.class_name:
            return False
        if (a.style or {}) != (b.style or {}):
            return False
        return [(e.type, e.handler) for e in a.events] == [(e.type, e.handler) for e in b.events]

    def to_html_dict(self, attributes: ParsedAttributes) -> Dict[str, Union[bool, str]]:
        """
        Rebuilds the HTML attribute mapping (original attribute names) from a bag.

        Boolean `True` stays `True`; `False`/`None` values are dropped.
        """
        out: Dict[str, Union[bool, str]] = {}
        if attributes.class_name:
            out["class"] = attributes.class_name
        for name, value in attributes.html.items():
            if value is False or value is None:
                continue
            out[HTML_ATTRIBUTE_NAMES.get(name, name)] = value
        if attributes.style:
            out["style"] = "; ".join(
                f"{camel_to_kebab_case(prop)}: {value}" for prop, value in attributes.style.items()
            )
        for event in attributes.events:
            out[event.type] = event.handler
        return out

    def to_html_string(self, attributes: ParsedAttributes) -> str:
        parts = []
        for name, value in self.to_html_dict(attributes).items():
            if value is True:
                parts.append(name)
            else:
                parts.append(f'{name}="{escape(str(value), quote=True)}"')
        return " ".join(parts)
