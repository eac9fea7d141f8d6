import os
import tomllib

from loguru import logger

from cell_classifier import DateOrder
from errors import ConfigError
from palette import DEFAULT_PALETTE, palette_from_mapping

HOME = os.path.expanduser("~")
XDG_CONFIG_HOME = os.environ.get("XDG_CONFIG_HOME")
CONFIG_HOME = XDG_CONFIG_HOME if XDG_CONFIG_HOME else os.path.join(HOME, ".config")
CONFIG_DIR = os.path.join(CONFIG_HOME, "pcsv")
CONFIG_TOML = os.path.join(CONFIG_DIR, "config.toml")
LOG_PATH = os.path.join(CONFIG_DIR, "pcsv.log")

# default settings
SCROLL_SINGLE_LINE_DEFAULT = 1
SCROLL_MULTI_LINE_DEFAULT = 10
DATE_ORDER_DEFAULT = DateOrder.MDY


def ensure_config_dirs():
    os.makedirs(CONFIG_DIR, exist_ok=True)


def default_config():
    return {
        "PALETTE": DEFAULT_PALETTE,
        "SCROLL_SINGLE_LINE": SCROLL_SINGLE_LINE_DEFAULT,
        "SCROLL_MULTI_LINE": SCROLL_MULTI_LINE_DEFAULT,
        "ZEBRA": False,
        "DATE_ORDER": DATE_ORDER_DEFAULT,
        "WIDTH": None,
        "ROW_NUMBERS": None,
    }


def _positive_int(value, key):
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigError(f"{key}: expected a positive integer, got {value!r}")
    return value


def _table(data, key):
    value = data.get(key, {})
    if not isinstance(value, dict):
        raise ConfigError(f"{key} must be a table")
    return value


def parse_config(data):
    """Turn a decoded TOML document into a settings dict; raises ConfigError."""
    cfg = default_config()
    cfg["PALETTE"] = palette_from_mapping(data)

    pager = _table(data, "pager")
    if "scroll_single_line" in pager:
        cfg["SCROLL_SINGLE_LINE"] = _positive_int(pager["scroll_single_line"], "pager.scroll_single_line")
    if "scroll_multi_line" in pager:
        cfg["SCROLL_MULTI_LINE"] = _positive_int(pager["scroll_multi_line"], "pager.scroll_multi_line")

    display = _table(data, "display")
    if "zebra" in display:
        if not isinstance(display["zebra"], bool):
            raise ConfigError(f"display.zebra: expected true or false, got {display['zebra']!r}")
        cfg["ZEBRA"] = display["zebra"]
    if "date_order" in display:
        try:
            cfg["DATE_ORDER"] = DateOrder(str(display["date_order"]).lower())
        except ValueError:
            raise ConfigError(
                f"display.date_order: expected 'mdy' or 'dmy', got {display['date_order']!r}"
            ) from None
    if "width" in display:
        width = display["width"]
        if isinstance(width, bool) or not isinstance(width, int) or width < 0:
            raise ConfigError(f"display.width: expected a non-negative integer, got {width!r}")
        cfg["WIDTH"] = width
    if "row_numbers" in display:
        if not isinstance(display["row_numbers"], bool):
            raise ConfigError(f"display.row_numbers: expected true or false, got {display['row_numbers']!r}")
        cfg["ROW_NUMBERS"] = display["row_numbers"]

    return cfg


def load_config(path=None):
    """Load settings from ``path`` or the default location.

    An explicitly requested file must exist and parse; problems with the
    default file only fall back to built-in settings.
    """
    explicit = path is not None
    target = os.path.expanduser(path) if explicit else CONFIG_TOML

    if not os.path.exists(target):
        if explicit:
            raise ConfigError(f"Config file not found: {target}")
        return default_config()

    try:
        with open(target, "rb") as f:
            data = tomllib.load(f)
        return parse_config(data)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        err = ConfigError(f"Cannot parse config {target}: {exc}")
    except ConfigError as exc:
        err = ConfigError(f"{target}: {exc}")

    if explicit:
        raise err
    logger.warning("{}; using built-in defaults", err)
    return default_config()
