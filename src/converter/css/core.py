# src/converter/css/core.py
import hashlib
import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Tuple, Type

from bs4 import BeautifulSoup, Tag

from converter.css.model import (
    CssConversionResult,
    CssConversionStats,
    CssConverterOptions,
    CssProperty,
    CssRule,
    ParsedStyle,
)

logger = logging.getLogger(__name__)

IMPORTANT = "!important"


def parse_style_declarations(style: str) -> Dict[str, str]:
    """Splits `a: b; c: d` into an ordered {property: raw value} dict with lower-cased names."""
    properties: Dict[str, str] = {}
    for declaration in (style or "").split(";"):
        prop, sep, value = declaration.partition(":")
        prop, value = prop.strip().lower(), value.strip()
        if sep and prop and value:
            properties[prop] = value
    return properties


def split_important(value: str) -> Tuple[str, bool]:
    if IMPORTANT in value:
        return value.replace(IMPORTANT, "").strip(), True
    return value.strip(), False


def properties_key(properties: Dict[str, str]) -> str:
    """Order independent key of a declaration set."""
    return ";".join(f"{prop}:{properties[prop]}" for prop in sorted(properties))


def content_hash(key: str, length: int = 6) -> str:
    return hashlib.sha1(key.encode("utf-8")).hexdigest()[:length]


def to_css_properties(properties: Dict[str, str]) -> List[CssProperty]:
    result = []
    for prop, raw in properties.items():
        value, important = split_important(raw)
        result.append(CssProperty(property=prop, value=value, important=important))
    return result


def add_class(tag: Tag, class_name: str) -> None:
    classes = tag.get("class") or []
    if isinstance(classes, str):
        classes = classes.split()
    for token in class_name.split():
        if token not in classes:
            classes.append(token)
    tag["class"] = classes


class CssConverter(ABC):
    """
    Strategy interface for turning inline styles into another styling artifact.

    `convert` walks every element carrying a `style` attribute, asks the
    strategy for a class name and rewrites the element. Strategies without a
    class for a declaration set leave the element untouched.
    """

    name: str = ""
    # Extension of the stylesheet the strategy produces, "" when it never writes one
    file_suffix: str = ""

    def __init__(self):
        self.stats = CssConversionStats()

    def convert(self, html: Optional[str], options: Optional[CssConverterOptions] = None) -> CssConversionResult:
        options = options or CssConverterOptions()
        html = html or ""
        self.reset()

        warnings: List[str] = []
        class_name_map: Dict[str, str] = {}
        styles: List[ParsedStyle] = []

        soup = BeautifulSoup(html, "html.parser")
        changed = False
        for tag in soup.find_all(style=True):
            style = self._style_of(tag)
            if not style.properties:
                continue
            self.stats.total_elements_processed += 1
            styles.append(style)

            class_name = self.class_for(style, options, warnings)
            if not class_name:
                continue

            if not options.preserve_inline:
                del tag["style"]
            add_class(tag, class_name)
            class_name_map[f"el-{self.stats.total_elements_processed}"] = class_name
            self.stats.inline_styles_converted += 1
            changed = True

        converted = str(soup) if changed else html
        css = self.render_css(styles, options)
        generated_files = self.generated_files(options)
        self.stats.files_created = len(generated_files)

        logger.debug(
            "%s strategy converted %d of %d styled elements.",
            self.get_strategy_name(), self.stats.inline_styles_converted, self.stats.total_elements_processed,
        )
        return CssConversionResult(
            html=self.finalize_html(converted, generated_files, options),
            css=css,
            class_name_map=class_name_map,
            generated_files=generated_files,
            warnings=warnings,
            strategy=self.get_strategy_name(),
        )

    @staticmethod
    def _style_of(tag: Tag) -> ParsedStyle:
        return ParsedStyle(selector=tag.name or "*", properties=parse_style_declarations(tag.get("style", "")))

    def parse_inline_styles(self, html: str) -> List[ParsedStyle]:
        soup = BeautifulSoup(html or "", "html.parser")
        styles = [self._style_of(tag) for tag in soup.find_all(style=True)]
        return [s for s in styles if s.properties]

    @abstractmethod
    def class_for(self, style: ParsedStyle, options: CssConverterOptions, warnings: List[str]) -> str:
        """Returns the class attribute tokens for a declaration set, or "" to leave it inline."""

    @abstractmethod
    def generate_css(self, styles: List[ParsedStyle], options: Optional[CssConverterOptions] = None) -> str:
        ...

    def render_css(self, styles: List[ParsedStyle], options: CssConverterOptions) -> str:
        """Stylesheet for the styles collected by the current `convert` run."""
        return self.generate_css(styles, options)

    def stylesheet_name(self, options: CssConverterOptions) -> str:
        return f"{options.target_filename or 'styles'}{self.file_suffix}"

    def generated_files(self, options: CssConverterOptions) -> List[str]:
        if not (options.extract_to_separate_file and self.file_suffix):
            return []
        return [self.stylesheet_name(options)]

    def finalize_html(self, html: str, generated_files: List[str], options: CssConverterOptions) -> str:
        return html

    def get_strategy_name(self) -> str:
        return self.name

    def get_stats(self) -> CssConversionStats:
        return self.stats.model_copy()

    def reset(self) -> None:
        self.stats = CssConversionStats()


class StylesheetConverter(CssConverter):
    """
    Shared base of the strategies that extract declarations into class rules.

    Class names derive from a sha1 of the sorted declaration set, so equal
    sets always map to the same base name. With `optimize` equal sets share
    one class and one rule; without it every occurrence gets its own rule and
    repeats of a base name are numbered in document order.
    """

    header: List[str] = []
    occurrence_separator = "-"

    def __init__(self):
        super().__init__()
        self.rules: List[CssRule] = []
        self._shared: Dict[str, str] = {}
        self._occurrences: Dict[str, int] = {}

    def reset(self) -> None:
        super().reset()
        self.rules = []
        self._shared = {}
        self._occurrences = {}

    @abstractmethod
    def base_class_name(self, style: ParsedStyle, key: str, options: CssConverterOptions) -> str:
        ...

    def class_for(self, style: ParsedStyle, options: CssConverterOptions, warnings: List[str]) -> str:
        key = properties_key(style.properties)
        if options.optimize and key in self._shared:
            return self._shared[key]

        base = self.base_class_name(style, key, options)
        count = self._occurrences.get(base, 0) + 1
        self._occurrences[base] = count
        class_name = base if count == 1 else f"{base}{self.occurrence_separator}{count}"

        self.rules.append(CssRule(selectors=[f".{class_name}"], properties=to_css_properties(style.properties)))
        self.stats.classes_generated += 1
        self.stats.rules_extracted += 1
        if options.optimize:
            self._shared[key] = class_name
        return class_name

    def generate_css(self, styles: List[ParsedStyle], options: Optional[CssConverterOptions] = None) -> str:
        """Builds a stylesheet for `styles` alone. Rules and stats of earlier runs are discarded."""
        options = options or CssConverterOptions()
        self.reset()
        for style in styles:
            self.class_for(style, options, [])
        return self.render_css(styles, options)

    def render_css(self, styles: List[ParsedStyle], options: CssConverterOptions) -> str:
        if not self.rules:
            return ""

        lines = ["/*"] + [f" * {line}" for line in self.header] + [" */", ""]
        lines.extend(self.preamble(styles, options))
        for rule in self.rules:
            lines.extend(self.render_rule(rule, options))
            lines.append("")
        return "\n".join(lines)

    def preamble(self, styles: List[ParsedStyle], options: CssConverterOptions) -> List[str]:
        return []

    def render_value(self, prop: CssProperty, options: CssConverterOptions) -> str:
        return prop.value

    def render_rule(self, rule: CssRule, options: CssConverterOptions) -> List[str]:
        lines = [f"{rule.media_query} {{"] if rule.media_query else []
        lines.append(f"{', '.join(rule.selectors)} {{")
        for prop in rule.properties:
            important = f" {IMPORTANT}" if prop.important else ""
            lines.append(f"  {prop.property}: {self.render_value(prop, options)}{important};")
        lines.append("}")
        if rule.media_query:
            lines.append("}")
        return lines


class StrategyDefinition:
    """Binds a strategy name to its converter class; picked up by the strategy registry."""

    def __init__(self, name: str, converter: Type[CssConverter], description: str = ""):
        self.name = name
        self.converter = converter
        self.description = description


class CssConverterContext:
    """Holds the active strategy, delegates to it and keeps a conversion history."""

    def __init__(self, strategy: CssConverter):
        self.strategy = strategy
        self.history: List[CssConversionResult] = []

    def set_strategy(self, strategy: CssConverter) -> None:
        self.strategy = strategy

    def get_strategy(self) -> CssConverter:
        return self.strategy

    def convert(self, html: str, options: Optional[CssConverterOptions] = None) -> CssConversionResult:
        result = self.strategy.convert(html, options)
        self.history.append(result)
        return result

    def parse_inline_styles(self, html: str) -> List[ParsedStyle]:
        return self.strategy.parse_inline_styles(html)

    def generate_css(self, styles: List[ParsedStyle], options: Optional[CssConverterOptions] = None) -> str:
        return self.strategy.generate_css(styles, options)

    def get_strategy_name(self) -> str:
        return self.strategy.get_strategy_name()

    def get_stats(self) -> CssConversionStats:
        return self.strategy.get_stats()

    def get_history(self) -> List[CssConversionResult]:
        return list(self.history)

    def clear_history(self) -> None:
        self.history = []
