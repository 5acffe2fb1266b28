# src/converter/services/name_generator_service.py
import logging
import re
from typing import Iterable, List, Optional, Set

from bs4 import BeautifulSoup

from converter.model import BemClassification, NameGenerationContext, NameHints, NamingConvention

logger = logging.getLogger(__name__)

RESERVED_WORDS = {
    "abstract", "await", "boolean", "break", "byte", "case", "catch", "char",
    "class", "const", "continue", "debugger", "default", "delete", "do", "double",
    "else", "enum", "export", "extends", "false", "final", "finally", "float",
    "for", "function", "goto", "if", "implements", "import", "in", "instanceof",
    "int", "interface", "let", "long", "native", "new", "null", "package",
    "private", "protected", "public", "return", "short", "static", "super",
    "switch", "synchronized", "this", "throw", "throws", "transient", "true",
    "try", "typeof", "var", "void", "volatile", "while", "with", "yield",
    # React
    "render", "constructor", "component", "props", "state", "ref", "key",
    "children", "classname", "style", "onclick", "onchange",
}

SEMANTIC_TAG_NAMES = {
    "header": "Header",
    "nav": "Nav",
    "main": "Main",
    "footer": "Footer",
    "article": "Article",
    "section": "Section",
    "aside": "AsideSidebar",
    "figure": "Figure",
    "figcaption": "Figcaption",
    "dialog": "Dialog",
    "details": "Details",
    "summary": "Summary",
}

GENERIC_BUTTON_CLASSES = (
    "clickable", "button", "btn-primary", "btn-secondary", "btn-default",
    "btn-large", "btn-small", "btn-", "button-",
)
GENERIC_CLASS_NAMES = {"container", "wrapper", "content", "section", "area", "box"}
SIBLING_SUFFIXES = (
    "Header", "Footer", "Body", "Sidebar", "Content", "Title", "Description",
    "Nav", "Navigation", "Aside", "Main", "Section", "Wrapper", "Container",
)
CONTENT_KEYWORDS = (
    "contact", "support", "help", "about", "settings", "profile",
    "dashboard", "login", "register", "search", "filter", "sort",
    "product", "service", "feature", "pricing", "team", "news",
)
HTML_TAG_NAMES = {
    "div", "span", "p", "a", "img", "button", "input", "form",
    "ul", "ol", "li", "table", "tr", "td", "th",
}

MAX_NAME_LENGTH = 49
ELLIPSIS = "..."

_WORD_SPLIT = re.compile(r"[-_\s]+|(?=[A-Z])|(?<=\d)(?=[A-Za-z])|(?<=[A-Za-z])(?=\d)")
_NON_ALNUM = re.compile(r"[^a-zA-Z0-9]")
_BEM_ELEMENT = re.compile(r"^(.+)__([^_]+)$")
_BEM_MODIFIER = re.compile(r"^(.+?)(?:__[^_]+)?--(.+)$")
_VALID_IDENTIFIER = re.compile(r"^[A-Z][a-zA-Z0-9]*$")


def to_pascal_case(value: str) -> str:
    """
    PascalCases arbitrary text. Splits on separators, capitals and digit
    boundaries; pure-digit words and leading digits are dropped.
    """
    words = []
    for word in _WORD_SPLIT.split(str(value)):
        cleaned = _NON_ALNUM.sub("", word or "").lstrip("0123456789")
        if cleaned:
            words.append(cleaned[0].upper() + cleaned[1:].lower())
    return "".join(words)


def parse_bem(class_name: str) -> BemClassification:
    match = _BEM_ELEMENT.match(class_name)
    if match:
        return BemClassification(block=match.group(1), element=match.group(2), full_class=class_name)
    match = _BEM_MODIFIER.match(class_name)
    if match:
        return BemClassification(block=match.group(1), modifier=match.group(2), full_class=class_name)
    return BemClassification(block=class_name, full_class=class_name)


def apply_naming_convention(name: str, convention: NamingConvention) -> str:
    if not name:
        return name
    if convention == "camelCase":
        return name[0].lower() + name[1:]
    if convention == "kebab-case":
        return re.sub(r"([A-Z])", r"-\1", name).lower().lstrip("-")
    if convention == "UPPER_CASE":
        return re.sub(r"([A-Z])", r"_\1", name).upper().lstrip("_")
    return name[0].upper() + name[1:]


class NameGenerator:
    """
    Produces component names from element context.

    Every name returned by `generate_name` or `generate_unique_name` is
    registered; the generator never hands out the same name twice until
    `reset()` is called.
    """

    def __init__(self, convention: NamingConvention = "PascalCase", prefix: str = "", suffix: str = ""):
        self.convention = convention
        self.prefix = prefix
        self.suffix = suffix
        self._used_names: Set[str] = set()

    def generate_name(self, context: NameGenerationContext) -> str:
        node = context.node
        element_type = context.type or (node.tag_name if node is not None else None)
        hints = context.hints

        override = self._explicit_name(context)
        if override is not None:
            name = override
        elif element_type and element_type in SEMANTIC_TAG_NAMES:
            name = (context.parent_name or "") + SEMANTIC_TAG_NAMES[element_type]
        elif element_type == "a":
            name = (context.parent_name or "") + "Link"
        elif element_type in ("img", "image"):
            name = (context.parent_name or "") + "Image"
        elif element_type == "button":
            name = self._button_name(context)
        elif context.siblings:
            name = self._sibling_name(context)
        elif node is not None and node.attributes.classes:
            name = (context.parent_name or "") + self.generate_from_classes(node.attributes.classes, hints)
        elif context.parent_name:
            name = self._name_with_parent(context.parent_name, context.siblings, hints)
        elif element_type:
            name = to_pascal_case(element_type)
        else:
            name = self._generic_name(hints)

        if not name:
            name = self._generic_name(hints)

        if override is None and name.lower() in RESERVED_WORDS:
            name = f"{name}Component"

        name = f"{self.prefix}{apply_naming_convention(name, self.convention)}{self.suffix}"
        final = self._claim(name, context.existing_names)
        logger.debug("Generated component name '%s' for <%s>.", final, element_type)
        return final

    def generate_unique_name(self, base_name: str, existing_names: Iterable[str] = ()) -> str:
        """Returns `base_name`, or `base_name{n}` with n = highest taken suffix + 1."""
        return self._claim(base_name, existing_names)

    # --- Cascade steps ---

    @staticmethod
    def _explicit_name(context: NameGenerationContext) -> Optional[str]:
        if context.node is None:
            return None
        for attr in ("data-component", "data-name"):
            value = context.node.attributes.html.get(attr)
            if isinstance(value, str) and value.strip():
                return to_pascal_case(value)
        return None

    def _button_name(self, context: NameGenerationContext) -> str:
        classes = context.node.attributes.classes if context.node is not None else []
        first = classes[0].lower() if classes else ""
        if first and not any(first.startswith(g) for g in GENERIC_BUTTON_CLASSES):
            return self.generate_from_classes(classes, context.hints)
        return "Button"

    def _sibling_name(self, context: NameGenerationContext) -> str:
        prefix = context.parent_name or self.extract_prefix_from_sibling(context.siblings[0]) or ""
        classes = context.node.attributes.classes if context.node is not None else []
        if classes:
            return prefix + self.generate_from_classes(classes, context.hints)
        return f"{prefix}Section"

    def _name_with_parent(self, parent_name: str, siblings: List[str], hints: Optional[NameHints]) -> str:
        if siblings:
            sibling_base = siblings[0].replace(parent_name, "").strip()
            if sibling_base:
                return f"{parent_name}{to_pascal_case(sibling_base)}{len(siblings) + 1}"
        if hints and (hints.has_children or hints.child_types):
            return f"{parent_name}Container"
        return f"{parent_name}Section"

    def _generic_name(self, hints: Optional[NameHints] = None) -> str:
        counter = len(self._used_names) + 1
        if hints and hints.child_types:
            return f"{to_pascal_case(hints.child_types[0])}Container{counter}"
        if hints and (hints.has_children or hints.child_count):
            return f"Container{counter}"
        return f"Component{counter}"

    @staticmethod
    def extract_prefix_from_sibling(sibling_name: str) -> Optional[str]:
        """`CardHeader` -> `Card`. Falls back to the first capital-to-lowercase transition."""
        if not sibling_name:
            return None
        for suffix in SIBLING_SUFFIXES:
            if sibling_name.endswith(suffix) and len(sibling_name) > len(suffix):
                return sibling_name[:-len(suffix)]
        for i in range(1, len(sibling_name) - 1):
            if sibling_name[i].isupper() and sibling_name[i + 1].islower():
                return sibling_name[:i]
        return None

    def generate_from_classes(self, classes: List[str], hints: Optional[NameHints] = None) -> str:
        meaningful = next(
            (c for c in classes
             if len(c) > 1
             and not c.startswith(("js-", "is-", "has-"))
             and not c.isdigit()
             and "--" not in c),
            None,
        )
        if meaningful is None:
            return self._generic_name(hints)

        if meaningful.lower() in GENERIC_CLASS_NAMES and hints and hints.child_types:
            return self._generic_name(hints)

        bem = parse_bem(meaningful)
        if bem.element and bem.block:
            return to_pascal_case(f"{bem.block} {bem.element}")
        return to_pascal_case(meaningful) or self._generic_name(hints)

    # --- Registry ---

    def _claim(self, name: str, existing_names: Iterable[str]) -> str:
        taken = set(existing_names) | self._used_names
        candidate = self._unique(name, taken)
        if len(candidate) > MAX_NAME_LENGTH:
            candidate = self._truncate(candidate, taken)
        self._used_names.add(candidate)
        return candidate

    @staticmethod
    def _unique(base_name: str, taken: Set[str]) -> str:
        if base_name not in taken:
            return base_name
        pattern = re.compile(rf"^{re.escape(base_name)}(\d+)$")
        numbers = [int(m.group(1)) for m in (pattern.match(n) for n in taken) if m]
        return f"{base_name}{max(numbers + [1]) + 1}"

    @staticmethod
    def _truncate(name: str, taken: Set[str]) -> str:
        keep = MAX_NAME_LENGTH - len(ELLIPSIS)
        candidate = name[:keep] + ELLIPSIS
        counter = 2
        while candidate in taken:
            marker = str(counter)
            candidate = name[:keep - len(marker)] + marker + ELLIPSIS
            counter += 1
        return candidate

    # --- Content based helpers ---

    def suggest_name_from_content(self, html: str) -> str:
        soup = BeautifulSoup(html or "", "html.parser")

        heading = soup.find(["h1", "h2", "h3", "h4", "h5", "h6"])
        if heading and heading.get_text(strip=True):
            return to_pascal_case(heading.get_text(strip=True))

        button = soup.find("button")
        if button and button.get_text(strip=True):
            return to_pascal_case(button.get_text(strip=True) + "Button")

        link = soup.find("a")
        if link and link.get_text(strip=True):
            return to_pascal_case(link.get_text(strip=True) + "Link")

        for paragraph in soup.find_all("p"):
            text = paragraph.get_text(strip=True).lower()
            for keyword in CONTENT_KEYWORDS:
                if keyword in text:
                    return to_pascal_case(keyword)

        return self._generic_name()

    @staticmethod
    def validate_name(name: str) -> bool:
        if name.lower() in RESERVED_WORDS:
            return False
        if name.lower() in HTML_TAG_NAMES:
            return name.endswith(("Component", "Wrapper"))
        return bool(_VALID_IDENTIFIER.match(name))

    def get_used_names(self) -> List[str]:
        return sorted(self._used_names)

    def reset(self) -> None:
        self._used_names.clear()


def name_from_class(class_name: str, convention: NamingConvention = "PascalCase") -> str:
    """Quick class-string to component-name conversion with a throwaway generator."""
    generator = NameGenerator(convention=convention)
    return apply_naming_convention(generator.generate_from_classes(class_name.split()), convention)
