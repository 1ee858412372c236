# axevent/manifest.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Dict, List, Optional

from commons.base_dataclasses import BaseDataClass
from commons.normalizers import strip_or_none
from tools.config_loader import load_config


def ensure_app_name(row: dict) -> None:
    """appName 是 topic1，不能为空。"""
    if not row.get("app_name"):
        raise ValueError("manifest setup requires a non-empty appName")


def default_friendly_name(row: dict) -> None:
    """清单未写 friendlyName 时沿用 appName（就地补全）。"""
    if not row.get("friendly_name"):
        row["friendly_name"] = row.get("app_name")


@dataclass(slots=True)
class AppSetup(BaseDataClass):
    """
    应用清单 acapPackageConf.setup 中与事件相关的部分。
    约定：
      - app_name 作为平台事件的 topic1；
      - friendly_name 用于合成 topic2 的 nice name："<friendly name>: <event>"。
    """

    app_name: str
    friendly_name: Optional[str] = None
    vendor: Optional[str] = None
    version: Optional[str] = None

    FIELD_MAPPING: ClassVar[Dict[str, str]] = {
        "appName": "app_name",
        "friendlyName": "friendly_name",
        "vendor": "vendor",
        "version": "version",
    }

    CONVERTERS: ClassVar[Dict[str, Any]] = {
        "app_name": strip_or_none,
        "friendly_name": strip_or_none,
        "vendor": strip_or_none,
        "version": strip_or_none,
    }

    VALIDATORS: ClassVar[List] = [
        ensure_app_name,
        default_friendly_name,  # 有副作用：补全 friendly_name
    ]


def load_app_setup(file_path: str = "config/manifest.json") -> AppSetup:
    """读取 manifest（JSON 同样能被 yaml.safe_load 解析）并构造 AppSetup。"""
    package_conf = load_config("acapPackageConf", file_path)
    return AppSetup.from_dict(package_conf["setup"], strict=True)
