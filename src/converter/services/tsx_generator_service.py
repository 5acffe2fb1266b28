# src/converter/services/tsx_generator_service.py
import json
import logging
import re
from typing import List, Optional

from converter.model import ExportType, PropDefinition, TsxGeneratorOptions
from converter.services.attribute_transform_service import AttributeTransformer
from converter.services.code_format_service import CodeFormatter
from converter.services.jsx_generator_service import INDENT, JSXGenerator
from parser.model import ParsedNode
from parser.utils.dom_utils import iter_elements

logger = logging.getLogger(__name__)

_PROP_REFERENCE = re.compile(r"^\{\s*([A-Za-z_$][\w$]*)\s*\}$")


def infer_prop_type(prop_name: str, value: str = "") -> str:
    lower = prop_name.lower()
    if "count" in lower or "num" in lower:
        return "number"
    if lower.startswith(("is", "has")):
        return "boolean"
    if "callback" in lower or "handler" in lower:
        return "() => void"
    if re.match(r"^\{\d+\}$", value):
        return "number"
    if re.match(r"^\{(true|false)\}$", value):
        return "boolean"
    return "string"


class TSXGenerator(JSXGenerator):
    """
    TypeScript flavour of the JSX generator: adds a props interface,
    destructured typed props and a configurable export style.

    Props are detected from attribute values written as `{propName}` and
    merged with caller supplied props (caller definitions win).
    """

    extension = "tsx"

    def __init__(
            self,
            options: Optional[TsxGeneratorOptions] = None,
            transformer: Optional[AttributeTransformer] = None,
            formatter: Optional[CodeFormatter] = None,
    ):
        options = options or TsxGeneratorOptions()
        super().__init__(options, transformer, formatter)
        self.custom_props: List[PropDefinition] = list(options.custom_props)
        self.detected_props: List[PropDefinition] = []

    @property
    def tsx_options(self) -> TsxGeneratorOptions:
        return self.options

    def _before_generate(self, node: ParsedNode) -> None:
        self.detected_props = []
        if self.tsx_options.detect_props_from_attributes:
            self.detected_props = self.detect_props(node)

    def detect_props(self, node: ParsedNode) -> List[PropDefinition]:
        props: List[PropDefinition] = []
        seen = set()
        for element in iter_elements(node):
            for value in self.extractor.to_html_dict(element.attributes).values():
                if not isinstance(value, str):
                    continue
                match = _PROP_REFERENCE.match(value)
                if not match or match.group(1) in seen:
                    continue
                seen.add(match.group(1))
                props.append(PropDefinition(name=match.group(1), type=infer_prop_type(match.group(1), value)))
        logger.debug("Detected %d props for %s.", len(props), self.component_name)
        return props

    def get_all_props(self) -> List[PropDefinition]:
        merged = {p.name: p for p in self.detected_props}
        for prop in self.custom_props:
            merged[prop.name] = prop
        return list(merged.values())

    # --- Emission ---

    def generate_props_interface(self) -> str:
        props = self.get_all_props()
        name = f"{self.component_name}Props"
        if not props:
            return f"interface {name} {{}}\n\n"

        lines = [f"interface {name} {{"]
        for prop in props:
            if prop.description:
                lines.append(f"{INDENT}/** {prop.description} */")
            optional = "" if prop.required else "?"
            lines.append(f"{INDENT}{prop.name}{optional}: {prop.type};")
        lines.append("}")
        return "\n".join(lines) + "\n\n"

    def _props_parameter(self) -> str:
        props = self.get_all_props()
        if not props:
            return ""
        names = []
        for prop in props:
            if prop.default_value is not None:
                names.append(f"{prop.name} = {json.dumps(prop.default_value)}")
            else:
                names.append(prop.name)
        destructured = "{ " + ", ".join(names) + " }"
        if self.tsx_options.include_prop_types:
            return f"{destructured}: {self.component_name}Props"
        return destructured

    def generate_component_body(self, node: ParsedNode) -> str:
        interface = self.generate_props_interface() if self.tsx_options.include_prop_types else ""
        keyword = "export default function" if self.tsx_options.export_type == "default" else "export function"
        return interface + "\n".join([
            f"{keyword} {self.component_name}({self._props_parameter()}) {{",
            f"{INDENT}return (",
            self.render_jsx(node),
            f"{INDENT});",
            "}",
            "",
        ])

    # --- Prop management ---

    def add_custom_prop(self, prop: PropDefinition) -> None:
        self.custom_props.append(prop)

    def remove_prop(self, prop_name: str) -> None:
        self.custom_props = [p for p in self.custom_props if p.name != prop_name]
        self.detected_props = [p for p in self.detected_props if p.name != prop_name]

    def get_detected_props(self) -> List[PropDefinition]:
        return list(self.detected_props)

    def set_export_type(self, export_type: ExportType) -> None:
        self.options = self.tsx_options.model_copy(update={"export_type": export_type})
