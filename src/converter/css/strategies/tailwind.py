# src/converter/css/strategies/tailwind.py
import logging
import re
from typing import Callable, Dict, List, Optional

from converter.css.core import CssConverter, StrategyDefinition, split_important
from converter.css.model import CssConverterOptions, ParsedStyle

logger = logging.getLogger(__name__)

SPACING_SCALE = {
    "0": "0",
    "4px": "1", "0.25rem": "1",
    "8px": "2", "0.5rem": "2",
    "12px": "3", "0.75rem": "3",
    "16px": "4", "1rem": "4",
    "24px": "6", "1.5rem": "6",
    "32px": "8", "2rem": "8",
}

VALUE_TABLES: Dict[str, Dict[str, str]] = {
    "display": {
        "flex": "flex", "grid": "grid", "block": "block", "inline": "inline",
        "inline-block": "inline-block", "inline-flex": "inline-flex", "none": "hidden",
    },
    "flex-direction": {
        "row": "flex-row", "column": "flex-col",
        "row-reverse": "flex-row-reverse", "column-reverse": "flex-col-reverse",
    },
    "flex-wrap": {"wrap": "flex-wrap", "nowrap": "flex-nowrap"},
    "position": {
        "static": "static", "fixed": "fixed", "absolute": "absolute",
        "relative": "relative", "sticky": "sticky",
    },
    "overflow": {
        "hidden": "overflow-hidden", "scroll": "overflow-scroll",
        "auto": "overflow-auto", "visible": "overflow-visible",
    },
    "overflow-x": {"hidden": "overflow-x-hidden", "scroll": "overflow-x-scroll", "auto": "overflow-x-auto"},
    "overflow-y": {"hidden": "overflow-y-hidden", "scroll": "overflow-y-scroll", "auto": "overflow-y-auto"},
    "text-align": {"left": "text-left", "center": "text-center", "right": "text-right", "justify": "text-justify"},
    "color": {
        "black": "text-black", "white": "text-white", "red": "text-red-500",
        "blue": "text-blue-500", "green": "text-green-500",
    },
    "background-color": {
        "black": "bg-black", "white": "bg-white", "red": "bg-red-500",
        "blue": "bg-blue-500", "transparent": "bg-transparent",
    },
    "font-weight": {
        "normal": "font-normal", "bold": "font-bold",
        "400": "font-normal", "500": "font-medium", "600": "font-semibold", "700": "font-bold",
    },
    "border-radius": {
        "4px": "rounded", "8px": "rounded-lg", "12px": "rounded-xl",
        "16px": "rounded-2xl", "9999px": "rounded-full", "50%": "rounded-full",
    },
    "box-shadow": {
        "0 1px 2px 0 rgba(0, 0, 0, 0.05)": "shadow-sm",
        "0 2px 4px rgba(0,0,0,0.1)": "shadow-md",
        "0 4px 6px -1px rgba(0, 0, 0, 0.1)": "shadow-lg",
        "0 10px 15px -3px rgba(0, 0, 0, 0.1)": "shadow-xl",
        "none": "shadow-none",
    },
    "align-items": {
        "start": "items-start", "end": "items-end", "center": "items-center",
        "stretch": "items-stretch", "baseline": "items-baseline",
        "flex-start": "items-start", "flex-end": "items-end",
    },
    "justify-content": {
        "start": "justify-start", "end": "justify-end", "center": "justify-center",
        "flex-start": "justify-start", "flex-end": "justify-end",
        "space-between": "justify-between", "space-around": "justify-around",
        "space-evenly": "justify-evenly",
    },
    "width": {
        "100%": "w-full", "50%": "w-1/2", "25%": "w-1/4", "33%": "w-1/3",
        "66%": "w-2/3", "75%": "w-3/4", "auto": "w-auto",
    },
    "height": {"100%": "h-full", "100px": "h-25", "auto": "h-auto", "100vh": "h-screen"},
    "grid-template-columns": {
        "1fr 1fr": "grid-cols-2", "1fr 1fr 1fr": "grid-cols-3",
        "repeat(2, 1fr)": "grid-cols-2", "repeat(3, 1fr)": "grid-cols-3", "repeat(4, 1fr)": "grid-cols-4",
    },
    "cursor": {"pointer": "cursor-pointer", "default": "cursor-default"},
}

# Properties resolved through the spacing scale: property -> class prefix
SPACING_PROPERTIES = {
    "padding": "p", "padding-top": "pt", "padding-right": "pr", "padding-bottom": "pb", "padding-left": "pl",
    "margin": "m", "margin-top": "mt", "margin-right": "mr", "margin-bottom": "mb", "margin-left": "ml",
    "gap": "gap",
}

INSET_PROPERTIES = ("top", "right", "bottom", "left")

_NUMBER = re.compile(r"^\d*\.?\d+$")


def _margin(value: str) -> Optional[str]:
    return "mx-auto" if value == "auto" else None


def _opacity(value: str) -> Optional[str]:
    if not _NUMBER.match(value):
        return None
    return f"opacity-{round(float(value) * 100)}"


def _border(value: str) -> Optional[str]:
    return "border" if "solid" in value else None


SPECIAL_MAPPERS: Dict[str, Callable[[str], Optional[str]]] = {
    "margin": _margin,
    "opacity": _opacity,
    "border": _border,
}


def tailwind_class(prop: str, value: str) -> Optional[str]:
    """Maps one declaration onto a Tailwind utility, None when there is no equivalent."""
    prop = prop.lower()
    value, important = split_important(value)
    token = _lookup(prop, value)
    if token and important:
        return f"!{token}"
    return token


def _lookup(prop: str, value: str) -> Optional[str]:
    table = VALUE_TABLES.get(prop)
    if table is not None and value in table:
        return table[value]

    prefix = SPACING_PROPERTIES.get(prop)
    if prefix and value in SPACING_SCALE:
        return f"{prefix}-{SPACING_SCALE[value]}"

    if prop in INSET_PROPERTIES and value in ("0", "auto"):
        return f"{prop}-{value}"

    mapper = SPECIAL_MAPPERS.get(prop)
    return mapper(value) if mapper else None


class TailwindConverter(CssConverter):
    """
    Replaces inline declarations with Tailwind utility classes.

    Declarations without a utility stay unmapped and are reported as
    warnings. The strategy never produces a stylesheet.
    """

    name = "tailwind"

    def class_for(self, style: ParsedStyle, options: CssConverterOptions, warnings: List[str]) -> str:
        classes = []
        for prop, value in style.properties.items():
            token = tailwind_class(prop, value)
            if token is None:
                warnings.append(f"Unsupported property: {prop}: {value}")
                continue
            if token not in classes:
                classes.append(token)
        self.stats.classes_generated += len(classes)
        return " ".join(classes)

    def properties_to_classes(self, properties: Dict[str, str]) -> List[str]:
        return [c for c in (tailwind_class(p, v) for p, v in properties.items()) if c]

    def generate_css(self, styles: List[ParsedStyle], options: Optional[CssConverterOptions] = None) -> str:
        return ""


DEFINITION = StrategyDefinition(
    name="tailwind",
    converter=TailwindConverter,
    description="Inline styles to Tailwind utility classes",
)
