# acap/parameters.py
from __future__ import annotations

import threading
from collections import defaultdict
from typing import Any, Dict, List, Mapping, Optional, Tuple

from acap.protocols import ParameterCallback, ParameterNotFoundError
from axevent.setting import CONFIG_PATH, LOG_LEVEL, LOG_TO_FILE
from commons.base_logger import BaseLogger
from tools.config_loader import load_config

_LOGGER = BaseLogger(name="axevent.parameters", level=LOG_LEVEL, to_file=LOG_TO_FILE).logger


class LocalParameterStore:
    """
    进程内参数存储（ParameterStore 的参考实现）。
    - 名字用 "Group.Sub.Name" 形式；不带分组的名字归属应用自身分组（"<AppName>.Name"）；
    - set() 改变值后同步调用该参数的所有回调 (name, new_value, userdata)，
      userdata 原样转交；某个回调抛异常只记日志，不影响其它回调；
    - 值一律为字符串。
    """

    def __init__(self, app_name: str, initial: Optional[Mapping[str, Any]] = None):
        self.app_name = app_name
        self._values: Dict[str, str] = {}
        self._callbacks: Dict[str, List[Tuple[ParameterCallback, Any]]] = defaultdict(list)
        self._lock = threading.RLock()
        for name, value in (initial or {}).items():
            self._values[self.qualify(name)] = str(value)

    @classmethod
    def from_config(cls, app_name: str, file_path: str = CONFIG_PATH) -> "LocalParameterStore":
        """用配置文件的 parameters 段初始化。"""
        return cls(app_name, load_config("parameters", file_path) or {})

    def qualify(self, name: str) -> str:
        return name if "." in name else f"{self.app_name}.{name}"

    def get(self, name: str) -> str:
        qualified = self.qualify(name)
        with self._lock:
            try:
                return self._values[qualified]
            except KeyError:
                raise ParameterNotFoundError(qualified) from None

    def set(self, name: str, value: str) -> None:
        qualified = self.qualify(name)
        with self._lock:
            changed = self._values.get(qualified) != value
            self._values[qualified] = value
            callbacks = list(self._callbacks.get(qualified, ()))
        if not changed:
            return
        for callback, userdata in callbacks:
            try:
                callback(qualified, value, userdata)
            except Exception as e:
                _LOGGER.error("parameter callback for %s failed: %r", qualified, e, exc_info=True)

    def register_callback(self, name: str, callback: ParameterCallback, userdata: Any = None) -> None:
        """参数必须已存在，否则抛 ParameterNotFoundError。"""
        qualified = self.qualify(name)
        with self._lock:
            if qualified not in self._values:
                raise ParameterNotFoundError(qualified)
            self._callbacks[qualified].append((callback, userdata))
        _LOGGER.debug("registered callback for %s", qualified)
