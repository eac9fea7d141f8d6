import re
from dataclasses import dataclass, replace

from loguru import logger

from cell_classifier import TypeTag
from errors import ConfigError

RGB = tuple[int, int, int]

_HEX_RE = re.compile(r"#?([0-9a-fA-F]{6})")


@dataclass(frozen=True)
class Palette:
    text: RGB = (186, 206, 223)
    integer: RGB = (166, 227, 161)
    float: RGB = (137, 180, 250)
    boolean: RGB = (249, 226, 175)
    date: RGB = (250, 179, 135)
    empty: RGB = (88, 91, 112)
    header: RGB = (203, 182, 247)
    row_index: RGB = (148, 226, 213)
    row_background_even: RGB = (30, 30, 46)
    row_background_odd: RGB = (49, 50, 68)

    def for_tag(self, tag: TypeTag) -> RGB:
        return getattr(self, tag_field(tag))


DEFAULT_PALETTE = Palette()

_TAG_FIELDS = {
    TypeTag.TEXT: "text",
    TypeTag.INTEGER: "integer",
    TypeTag.FLOAT: "float",
    TypeTag.BOOLEAN: "boolean",
    TypeTag.DATE: "date",
    TypeTag.EMPTY: "empty",
}


def tag_field(tag: TypeTag) -> str:
    return _TAG_FIELDS.get(tag, "text")


# config spellings -> Palette field
_DATA_TYPE_KEYS = {
    "text": "text",
    "date": "date",
    "float_number": "float",
    "float": "float",
    "int_number": "integer",
    "integer": "integer",
    "boolean": "boolean",
    "empty": "empty",
}
_BACKGROUND_KEYS = {
    "even": "row_background_even",
    "odd": "row_background_odd",
}
_ROLE_KEYS = {
    "header": "header",
    "row_index": "row_index",
    "row_background_even": "row_background_even",
    "row_background_odd": "row_background_odd",
}
def parse_color(value, key: str = "color") -> RGB:
    """Accept "#RRGGBB", "RRGGBB", [r, g, b] or {r, g, b}."""
    if isinstance(value, str):
        m = _HEX_RE.fullmatch(value.strip())
        if not m:
            raise ConfigError(f"{key}: expected a hex colour like '#A6E3A1', got {value!r}")
        digits = m.group(1)
        return tuple(int(digits[i : i + 2], 16) for i in (0, 2, 4))

    if isinstance(value, dict):
        try:
            value = [value["r"], value["g"], value["b"]]
        except KeyError:
            raise ConfigError(f"{key}: colour tables need r, g and b keys") from None

    if isinstance(value, (list, tuple)) and len(value) == 3:
        parts = []
        for part in value:
            if isinstance(part, bool) or not isinstance(part, int) or not 0 <= part <= 255:
                raise ConfigError(f"{key}: colour components must be integers 0-255, got {value!r}")
            parts.append(part)
        return tuple(parts)

    raise ConfigError(f"{key}: unsupported colour value {value!r}")


def palette_from_mapping(data, base: Palette = DEFAULT_PALETTE) -> Palette:
    """Overlay configured colours on ``base``; keys not given keep their defaults."""
    if data is None:
        return base
    if not isinstance(data, dict):
        raise ConfigError("palette configuration must be a table")

    overrides = {}

    data_types = data.get("data_types", {})
    if not isinstance(data_types, dict):
        raise ConfigError("data_types must be a table")
    for key, value in data_types.items():
        name = _DATA_TYPE_KEYS.get(key)
        if name is None:
            logger.warning("Ignoring unknown data_types key {!r}", key)
            continue
        overrides[name] = parse_color(value, f"data_types.{key}")

    background = data.get("background", {})
    if not isinstance(background, dict):
        raise ConfigError("background must be a table")
    for key, value in background.items():
        name = _BACKGROUND_KEYS.get(key)
        if name is None:
            logger.warning("Ignoring unknown background key {!r}", key)
            continue
        overrides[name] = parse_color(value, f"background.{key}")

    for key, value in data.items():
        if isinstance(value, dict):
            continue
        name = _ROLE_KEYS.get(key) or _DATA_TYPE_KEYS.get(key)
        if name is None:
            continue
        overrides[name] = parse_color(value, key)

    return replace(base, **overrides)
