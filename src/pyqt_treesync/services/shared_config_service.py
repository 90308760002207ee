"""
Shared display configuration and its parsing.

SharedConfig holds the fields replicated onto every content node of a
region. Raw configuration usually comes from editor controls as loosely
typed values (strings, missing keys, camelCase attribute names); the
parsers here turn a malformed field into its default instead of failing.
"""

import copy
import dataclasses
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from pyqt_treesync.io.exceptions import ConfigParseFault

logger = logging.getLogger(__name__)

DEFAULT_BUTTON_TEXT = "Add to cart"
ITEM_ID_FIELD = "item_id"

_TRUE_STRINGS = {"true", "1", "yes", "on"}
_FALSE_STRINGS = {"false", "0", "no", "off", ""}

# Block attribute names as stored by the editor
_ATTRIBUTE_ALIASES = {
    "showAddToCart": "show_add_to_cart",
    "buttonText": "button_text",
    "showCardHoverShadow": "show_card_hover_shadow",
    "showCardHoverJump": "show_card_hover_jump",
    "hoverMediaTag": "hover_media_tag",
}


@dataclass(frozen=True)
class SharedConfig:
    """Configuration written identically onto every content node."""
    show_add_to_cart: bool = True
    button_text: str = DEFAULT_BUTTON_TEXT
    show_card_hover_shadow: bool = True
    show_card_hover_jump: bool = True
    hover_media_tag: str = ""
    translations: Mapping[str, Any] = field(default_factory=dict)

    def propagated_values(self) -> Dict[str, Any]:
        """Values of every propagated field, deep-copied per call."""
        return {name: copy.deepcopy(getattr(self, name)) for name in sorted(PROPAGATED_FIELDS)}

    def replace(self, **changes: Any) -> "SharedConfig":
        return dataclasses.replace(self, **changes)


# Fields that may be rewritten in place. Nothing here affects list membership
# or order, and the item id is never part of it.
PROPAGATED_FIELDS = frozenset(f.name for f in dataclasses.fields(SharedConfig))


# ---------- Strict field parsers (raise ConfigParseFault) ----------

def parse_bool(field_name: str, raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, int) and raw in (0, 1):
        return bool(raw)
    if isinstance(raw, str) and raw.strip().lower() in _TRUE_STRINGS | _FALSE_STRINGS:
        return raw.strip().lower() in _TRUE_STRINGS
    raise ConfigParseFault(field_name, raw, "a boolean")


def parse_text(field_name: str, raw: Any) -> str:
    if isinstance(raw, str):
        return raw
    raise ConfigParseFault(field_name, raw, "a string")


def parse_translations(field_name: str, raw: Any) -> Dict[str, Any]:
    """Accept {lang: text} and {field: {lang: text}} maps."""
    if not isinstance(raw, Mapping):
        raise ConfigParseFault(field_name, raw, "a mapping")
    parsed: Dict[str, Any] = {}
    for key, value in raw.items():
        if not isinstance(key, str):
            raise ConfigParseFault(field_name, raw, "string keys")
        if isinstance(value, str):
            parsed[key] = value
        elif isinstance(value, Mapping) and all(
            isinstance(k, str) and isinstance(v, str) for k, v in value.items()
        ):
            parsed[key] = dict(value)
        else:
            raise ConfigParseFault(f"{field_name}.{key}", value, "text or a language map")
    return parsed


def parse_positive_int(field_name: str, raw: Any) -> int:
    if isinstance(raw, bool):
        raise ConfigParseFault(field_name, raw, "a positive integer")
    try:
        value = int(raw.strip()) if isinstance(raw, str) else int(raw)
    except (TypeError, ValueError):
        raise ConfigParseFault(field_name, raw, "a positive integer") from None
    if isinstance(raw, float) and raw != value:
        raise ConfigParseFault(field_name, raw, "a positive integer")
    if value < 1:
        raise ConfigParseFault(field_name, raw, "a positive integer")
    return value


_FIELD_PARSERS = {
    "show_add_to_cart": parse_bool,
    "button_text": parse_text,
    "show_card_hover_shadow": parse_bool,
    "show_card_hover_jump": parse_bool,
    "hover_media_tag": parse_text,
    "translations": parse_translations,
}


# ---------- Tolerant entry points ----------

def parse_shared_config(raw: Mapping[str, Any], base: Optional[SharedConfig] = None) -> SharedConfig:
    """
    Build a SharedConfig from loosely typed attributes.

    Keys may use snake_case or the editor's camelCase names. Unknown keys
    are ignored. A field that fails to parse falls back to its value in
    base (or the default) and a warning is logged.

    Args:
        raw: Attribute mapping, e.g. {"buttonText": "Buy", "showAddToCart": "false"}
        base: Config supplying values for missing or malformed fields

    Returns:
        Parsed SharedConfig
    """
    base = base or SharedConfig()
    changes: Dict[str, Any] = {}

    for key, value in raw.items():
        name = _ATTRIBUTE_ALIASES.get(key, key)
        parser = _FIELD_PARSERS.get(name)
        if parser is None:
            continue
        if value is None:
            continue  # unset
        try:
            changes[name] = parser(name, value)
        except ConfigParseFault as fault:
            logger.warning(f"Ignoring malformed config field, using default: {fault}")

    # An empty button text means "use the default label"
    if changes.get("button_text") == "":
        changes["button_text"] = DEFAULT_BUTTON_TEXT

    return base.replace(**changes)


def parse_limit(raw: Any, default: int) -> int:
    """Parse an item limit; anything but a positive integer yields default."""
    try:
        return parse_positive_int("max_items", raw)
    except ConfigParseFault as fault:
        logger.warning(f"Ignoring malformed item limit, using {default}: {fault}")
        return default


# ---------- Translations ----------

def resolve_button_text(
    config: SharedConfig,
    current_lang: Optional[str],
    default_lang: Optional[str],
) -> str:
    """
    Button text for the editor's current language.

    Looks up {"buttonText": {lang: text}} first, then the legacy {lang: text}
    form. An empty translation is returned as-is; only a missing one falls
    back to the base text.
    """
    translations = config.translations or {}
    if not current_lang or current_lang == default_lang:
        return config.button_text

    per_field = translations.get("buttonText")
    if isinstance(per_field, Mapping) and current_lang in per_field:
        return per_field[current_lang]

    legacy = translations.get(current_lang)
    if isinstance(legacy, str):
        return legacy

    return config.button_text


def with_button_text(
    config: SharedConfig,
    text: str,
    current_lang: Optional[str],
    default_lang: Optional[str],
) -> SharedConfig:
    """Return config with text stored for the current language."""
    if not current_lang or current_lang == default_lang:
        return config.replace(button_text=text)

    translations = copy.deepcopy(dict(config.translations or {}))
    per_field = dict(translations.get("buttonText") or {})
    per_field[current_lang] = text  # empty strings are valid translations
    translations["buttonText"] = per_field
    return config.replace(translations=translations)
