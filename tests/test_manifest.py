import json

import pytest

from axevent.manifest import AppSetup, load_app_setup
from tools.config_loader import load_config


def test_app_setup_from_manifest_dict():
    """✅ 清单字段映射 + 去空白"""
    setup = AppSetup.from_dict({"appName": " MyApp ", "friendlyName": "My Application",
                                "vendor": "", "runMode": "never"}, strict=True)
    assert setup.app_name == "MyApp"
    assert setup.friendly_name == "My Application"
    assert setup.vendor is None
    assert setup.to_dict(drop_none=True) == {"app_name": "MyApp", "friendly_name": "My Application"}


def test_friendly_name_defaults_to_app_name():
    setup = AppSetup.from_dict({"appName": "MyApp"})
    assert setup.friendly_name == "MyApp"


def test_missing_app_name_rejected():
    """❌ 缺少 appName 应直接报错"""
    with pytest.raises(ValueError):
        AppSetup.from_dict({"friendlyName": "x"})


def test_load_app_setup_from_file(tmp_path):
    manifest = tmp_path / "manifest.json"
    manifest.write_text(json.dumps({"acapPackageConf": {"setup": {
        "appName": "PortWatch", "friendlyName": "Port Watch", "version": "1.2.0"}}}), encoding="utf-8")
    setup = load_app_setup(str(manifest))
    assert (setup.app_name, setup.friendly_name, setup.version) == ("PortWatch", "Port Watch", "1.2.0")


def test_bundled_config_and_manifest():
    assert load_config("logging")["level"] == "INFO"
    setup = load_app_setup(load_config("manifest"))
    assert setup.app_name == "MyApp"
    assert setup.friendly_name == "My Application"


def test_load_config_missing_section(tmp_path):
    cfg = tmp_path / "c.yaml"
    cfg.write_text("a: 1\n", encoding="utf-8")
    assert load_config(file_path=str(cfg)) == {"a": 1}
    with pytest.raises(KeyError):
        load_config("b", str(cfg))
