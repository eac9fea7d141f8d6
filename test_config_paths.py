import tempfile
from pathlib import Path

import pytest

import config_paths
from cell_classifier import DateOrder
from errors import ConfigError
from palette import DEFAULT_PALETTE


def _with_config_dir(tmp):
    cfg_dir = Path(tmp) / "pcsv"
    cfg_dir.mkdir(parents=True, exist_ok=True)
    return cfg_dir


def test_load_config_defaults_without_toml():
    with tempfile.TemporaryDirectory() as tmp:
        cfg_dir = _with_config_dir(tmp)
        orig_toml = config_paths.CONFIG_TOML
        try:
            config_paths.CONFIG_TOML = str(cfg_dir / "config.toml")
            cfg = config_paths.load_config()
            assert cfg["PALETTE"] == DEFAULT_PALETTE
            assert cfg["SCROLL_SINGLE_LINE"] == 1
            assert cfg["SCROLL_MULTI_LINE"] == 10
            assert cfg["ZEBRA"] is False
            assert cfg["DATE_ORDER"] is DateOrder.MDY
        finally:
            config_paths.CONFIG_TOML = orig_toml


def test_load_config_reads_toml_overrides():
    with tempfile.TemporaryDirectory() as tmp:
        cfg_dir = _with_config_dir(tmp)
        cfg_path = cfg_dir / "config.toml"
        cfg_path.write_text(
            "\n".join(
                [
                    'header = "#FF0000"',
                    "",
                    "[data_types]",
                    'int_number = "#00FF00"',
                    "",
                    "[pager]",
                    "scroll_single_line = 2",
                    "scroll_multi_line = 25",
                    "",
                    "[display]",
                    "zebra = true",
                    'date_order = "dmy"',
                    "width = 30",
                ]
            )
        )
        orig_toml = config_paths.CONFIG_TOML
        try:
            config_paths.CONFIG_TOML = str(cfg_path)
            cfg = config_paths.load_config()
            assert cfg["PALETTE"].header == (255, 0, 0)
            assert cfg["PALETTE"].integer == (0, 255, 0)
            assert cfg["PALETTE"].float == DEFAULT_PALETTE.float
            assert cfg["SCROLL_SINGLE_LINE"] == 2
            assert cfg["SCROLL_MULTI_LINE"] == 25
            assert cfg["ZEBRA"] is True
            assert cfg["DATE_ORDER"] is DateOrder.DMY
            assert cfg["WIDTH"] == 30
        finally:
            config_paths.CONFIG_TOML = orig_toml


def test_malformed_default_config_falls_back():
    with tempfile.TemporaryDirectory() as tmp:
        cfg_dir = _with_config_dir(tmp)
        cfg_path = cfg_dir / "config.toml"
        cfg_path.write_text("header = [not toml")
        orig_toml = config_paths.CONFIG_TOML
        try:
            config_paths.CONFIG_TOML = str(cfg_path)
            cfg = config_paths.load_config()
            assert cfg["PALETTE"] == DEFAULT_PALETTE
        finally:
            config_paths.CONFIG_TOML = orig_toml


def test_explicit_malformed_config_raises(tmp_path):
    cfg_path = tmp_path / "bad.toml"
    cfg_path.write_text("header = [not toml")
    with pytest.raises(ConfigError):
        config_paths.load_config(str(cfg_path))


def test_explicit_bad_value_raises(tmp_path):
    cfg_path = tmp_path / "bad.toml"
    cfg_path.write_text('[data_types]\ntext = "light blue"\n')
    with pytest.raises(ConfigError, match="data_types.text"):
        config_paths.load_config(str(cfg_path))


def test_explicit_missing_config_raises(tmp_path):
    with pytest.raises(ConfigError):
        config_paths.load_config(str(tmp_path / "missing.toml"))


@pytest.mark.parametrize(
    "text",
    [
        "[pager]\nscroll_single_line = 0\n",
        "[pager]\nscroll_multi_line = \"ten\"\n",
        "[display]\nzebra = \"yes\"\n",
        "[display]\ndate_order = \"ymd\"\n",
        "[display]\nwidth = -1\n",
        "pager = 3\n",
    ],
)
def test_invalid_settings_raise(tmp_path, text):
    cfg_path = tmp_path / "c.toml"
    cfg_path.write_text(text)
    with pytest.raises(ConfigError):
        config_paths.load_config(str(cfg_path))
