# src/converter/services/attribute_transform_service.py
import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from converter.model import AttributeTransformRule, TransformedAttribute
from parser.services.attribute_extract_service import parse_style_string

logger = logging.getLogger(__name__)

DIRECT_RENAMES = {
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
    "marginwidth": "marginWidth",
    "marginheight": "marginHeight",
    "noresize": "noResize",
    "enctype": "encType",
    "autocomplete": "autoComplete",
    "allowpaymentrequest": "allowPaymentRequest",
    "formaction": "formAction",
    "formenctype": "formEncType",
    "formmethod": "formMethod",
    "formnovalidate": "formNoValidate",
    "formtarget": "formTarget",
    "inputmode": "inputMode",
    "minlength": "minLength",
    "novalidate": "noValidate",
    "radiogroup": "radioGroup",
    "spellcheck": "spellCheck",
    "srcdoc": "srcDoc",
    "srclang": "srcLang",
}

REACT_EVENTS = [
    "onClick", "onDoubleClick", "onChange", "onSubmit", "onLoad", "onError",
    "onKeyDown", "onKeyUp", "onKeyPress",
    "onMouseOver", "onMouseOut", "onMouseMove", "onMouseDown", "onMouseUp",
    "onMouseEnter", "onMouseLeave",
    "onFocus", "onBlur", "onScroll", "onInput",
    "onTouchStart", "onTouchEnd", "onTouchMove", "onTouchCancel", "onWheel",
    "onCopy", "onCut", "onPaste",
    "onCompositionStart", "onCompositionEnd", "onCompositionUpdate",
    "onDrag", "onDragEnd", "onDragEnter", "onDragExit", "onDragLeave",
    "onDragOver", "onDragStart", "onDrop",
    "onReset", "onSelect", "onToggle", "onBeforeInput",
    "onPointerDown", "onPointerMove", "onPointerUp", "onPointerCancel",
    "onPointerEnter", "onPointerLeave", "onPointerOver", "onPointerOut",
    "onGotPointerCapture", "onLostPointerCapture", "onContextMenu",
    "onAnimationStart", "onAnimationEnd", "onAnimationIteration", "onTransitionEnd",
    "onCanPlay", "onCanPlayThrough", "onDurationChange", "onEmptied", "onEncrypted",
    "onEnded", "onLoadedData", "onLoadedMetadata", "onPause", "onPlay", "onPlaying",
    "onProgress", "onRateChange", "onSeeked", "onSeeking", "onStalled", "onSuspend",
    "onTimeUpdate", "onVolumeChange", "onWaiting",
    "onAbort", "onMessage", "onClose", "onOpen",
]
# `ondblclick` is the one event whose React name is not a plain re-casing
EVENT_NAMES = {name.lower(): name for name in REACT_EVENTS}
EVENT_NAMES["ondblclick"] = EVENT_NAMES.pop("ondoubleclick")

BOOLEAN_RENAMES = {
    "disabled": "disabled", "checked": "checked", "required": "required",
    "multiple": "multiple", "muted": "muted", "loop": "loop", "controls": "controls",
    "autoplay": "autoPlay", "autofocus": "autoFocus", "default": "default",
    "hidden": "hidden", "selected": "selected", "nomodule": "noModule",
    "async": "async", "defer": "defer", "reversed": "reversed", "open": "open",
    "download": "download",
}

REMOVED_ATTRIBUTES = {"data-reactid", "data-reactroot", "reactid", "reactroot"}

BOOLEAN_ATTRIBUTES = {
    "disabled", "checked", "required", "multiple", "muted", "loop", "controls",
    "autoplay", "default", "hidden", "selected", "autofocus", "allowfullscreen",
    "nomodule", "async", "defer", "reversed", "open", "download", "formnovalidate",
    "ismap", "noshade", "nowrap", "readonly", "seamless",
}


def _build_standard_mappings() -> Dict[str, AttributeTransformRule]:
    mappings: Dict[str, AttributeTransformRule] = {}
    for html_name, react_name in DIRECT_RENAMES.items():
        mappings[html_name] = AttributeTransformRule(react_name=react_name, type="direct")
    for html_name, react_name in EVENT_NAMES.items():
        mappings[html_name] = AttributeTransformRule(react_name=react_name, type="event")
    for html_name, react_name in BOOLEAN_RENAMES.items():
        mappings[html_name] = AttributeTransformRule(react_name=react_name, type="boolean")
    for html_name in REMOVED_ATTRIBUTES:
        mappings[html_name] = AttributeTransformRule(react_name="", type="remove")
    return mappings


STANDARD_MAPPINGS = _build_standard_mappings()


class AttributeTransformer:
    """
    Maps HTML attribute names and values onto their React equivalents.

    Lookup order: caller registered custom rules, the standard table,
    `style`, `data-*`/`aria-*` passthrough, the boolean fallback set and
    finally an unchanged `direct` passthrough.
    """

    def __init__(self):
        self._custom_rules: Dict[str, AttributeTransformRule] = {}

    def transform(self, name: str, value: Union[str, bool, None]) -> TransformedAttribute:
        custom = self._custom_rules.get(name)
        if custom is not None:
            out = custom.transform(value) if custom.transform else value
            return TransformedAttribute(name=custom.react_name, value=out, type=custom.type)

        mapping = STANDARD_MAPPINGS.get(name)
        if mapping is not None:
            if mapping.type == "remove":
                return TransformedAttribute(name="", value="", type="remove")
            out = True if mapping.type == "boolean" else value
            return TransformedAttribute(name=mapping.react_name, value=out, type=mapping.type)

        if name == "style":
            return TransformedAttribute(name="style", value=self.transform_style(value), type="style")

        if name.startswith("data-") or name.startswith("aria-"):
            return TransformedAttribute(name=name, value=value, type="direct")

        if name in BOOLEAN_ATTRIBUTES:
            return TransformedAttribute(name=name, value=True, type="boolean")

        return TransformedAttribute(name=name, value=value, type="direct")

    def transform_batch(self, attributes: Mapping[str, Union[str, bool]]) -> List[TransformedAttribute]:
        """Transforms every attribute and drops the ones marked for removal."""
        results = [self.transform(name, value) for name, value in attributes.items()]
        return [r for r in results if r.type != "remove"]

    @staticmethod
    def transform_style(style_value: Union[str, bool, None]) -> Dict[str, str]:
        if not isinstance(style_value, str):
            return {}
        return parse_style_string(style_value)

    # --- Custom rules ---

    def add_custom_rule(
            self,
            html_attr: str,
            react_attr: str,
            transform: Optional[Callable[[str], Any]] = None,
    ) -> None:
        self._custom_rules[html_attr] = AttributeTransformRule(
            react_name=react_attr, type="custom", transform=transform,
        )
        logger.debug("Registered custom attribute rule %s -> %s.", html_attr, react_attr)

    def remove_custom_rule(self, html_attr: str) -> None:
        self._custom_rules.pop(html_attr, None)

    # --- Queries ---

    def should_remove(self, name: str) -> bool:
        mapping = STANDARD_MAPPINGS.get(name)
        custom = self._custom_rules.get(name)
        return bool(mapping and mapping.type == "remove") or bool(custom and custom.type == "remove")

    @staticmethod
    def get_standard_mappings() -> Dict[str, AttributeTransformRule]:
        return dict(STANDARD_MAPPINGS)

    @staticmethod
    def is_boolean_attribute(name: str) -> bool:
        return name in BOOLEAN_ATTRIBUTES

    @staticmethod
    def is_event_attribute(name: str) -> bool:
        mapping = STANDARD_MAPPINGS.get(name)
        return (mapping is not None and mapping.type == "event") or name.startswith("on")
