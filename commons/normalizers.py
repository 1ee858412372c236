# -*- coding: utf-8 -*-
# commons/normalizers.py
from __future__ import annotations

"""
normalizers
-----------
字段级转换函数库，供 BaseDataClass.CONVERTERS 与环境变量解析使用。
签名约定：func(value) -> new_value，不抛异常，无法识别时返回 None。
"""

from typing import Any, Optional


def strip_or_none(x: Any) -> Optional[str]:
    """
    去掉首尾空白，空字符串返回 None；非字符串先 str()。
    - "  MyApp " -> "MyApp"
    - "" / None -> None
    """
    if x is None:
        return None
    if not isinstance(x, str):
        return str(x)
    s = x.strip()
    return s if s != "" else None


def to_bool_or_none(x: Any) -> Optional[bool]:
    """
    将值转换为 bool；常见真值：True/1/"1"/"true"/"yes"/"y"/"on"
    常见假值：False/0/"0"/"false"/"no"/"n"/"off"
    其它或空返回 None。
    """
    if x is None:
        return None
    if isinstance(x, bool):
        return x
    s = str(x).strip().lower()
    if s in {"1", "true", "yes", "y", "on"}:
        return True
    if s in {"0", "false", "no", "n", "off"}:
        return False
    return None
