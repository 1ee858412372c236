# axevent/key_value_set.py
from __future__ import annotations

"""
KeyValueSet
-----------
事件负载容器：按插入顺序保存 (key, namespace) -> TypedValue，
并附带标记（source/data/用户自定义）与 nice name 两张旁表。

约定：
- (key, namespace) 唯一，重复插入抛 DuplicateKeyError，不覆盖；
- namespace=None 表示无限定（默认命名空间）；
- 标记与 nice name 只能挂在已存在的条目上，否则抛 KeyNotFoundError；
- 同一标记重复挂载是幂等的；nice name 重复设置抛 DuplicateNiceNameError；
- 遍历顺序即插入顺序（topic0 必须在 topic1 之前上线）。

单个实例只由一个构建者/读取者持有，不加锁；跨线程传递请先 copy()。
"""

import json
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple

from axevent.errors import (
    ConformanceError,
    DuplicateKeyError,
    DuplicateNiceNameError,
    KeyNotFoundError,
    TypeMismatchError,
)
from axevent.markers import DATA, SOURCE, Marker, NiceNameLabels, trigger_conformance, user_defined
from axevent.setting import LOG_LEVEL, LOG_TO_FILE
from axevent.typed_value import Payload, TypedValue, ValueType
from commons.base_logger import BaseLogger

_LOGGER = BaseLogger(name="axevent.kvs", level=LOG_LEVEL, to_file=LOG_TO_FILE).logger

EntryKey = Tuple[str, Optional[str]]


@dataclass
class _Binding:
    value: TypedValue
    markers: List[Marker] = field(default_factory=list)
    nice_names: Optional[NiceNameLabels] = None


@dataclass(frozen=True)
class KeyValueItem:
    """遍历 KeyValueSet 时产出的一项（只读快照）。"""

    key: str
    namespace: Optional[str]
    value: TypedValue
    markers: Tuple[Marker, ...] = ()
    nice_names: Optional[NiceNameLabels] = None

    @property
    def value_type(self) -> ValueType:
        return self.value.value_type

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "key": self.key,
            "namespace": self.namespace,
            "type": self.value.value_type.value,
            "value": self.value.value,
            "markers": [
                {"kind": m.kind.value, "tag": m.tag} if m.tag is not None else {"kind": m.kind.value}
                for m in self.markers
            ],
        }
        if self.nice_names is not None:
            d["key_nice_name"] = self.nice_names.key_nice_name
            d["value_nice_name"] = self.nice_names.value_nice_name
        return d


class KeyValueSet:
    """有序、带类型、带命名空间的事件键值集合。"""

    def __init__(self) -> None:
        self._bindings: "OrderedDict[EntryKey, _Binding]" = OrderedDict()

    # ---------------- 写入 ----------------
    def add_key_value(self, key: str, namespace: Optional[str], value: Payload, value_type: ValueType) -> None:
        """
        插入一个新条目。
        :raises DuplicateKeyError: (key, namespace) 已存在
        :raises TypeMismatchError: value 与 value_type 不一致
        """
        if not isinstance(key, str) or key == "":
            raise TypeMismatchError(str(key), namespace, "non-empty string key", type(key).__name__)
        if (key, namespace) in self._bindings:
            raise DuplicateKeyError(key, namespace)
        typed = TypedValue.of(value, value_type, key, namespace)
        self._bindings[(key, namespace)] = _Binding(typed)
        _LOGGER.debug("add %s ns=%s %s=%r", key, namespace, value_type.value, value)

    # ---------------- 读取 ----------------
    def _binding(self, key: str, namespace: Optional[str]) -> _Binding:
        try:
            return self._bindings[(key, namespace)]
        except KeyError:
            raise KeyNotFoundError(key, namespace) from None

    def get_value(self, key: str, namespace: Optional[str] = None) -> TypedValue:
        return self._binding(key, namespace).value

    def _get(self, key: str, namespace: Optional[str], value_type: ValueType) -> Payload:
        typed = self._binding(key, namespace).value
        if typed.value_type is not value_type:
            raise TypeMismatchError(key, namespace, value_type.value, typed.value_type.value)
        return typed.value

    def get_integer(self, key: str, namespace: Optional[str] = None) -> int:
        return self._get(key, namespace, ValueType.INTEGER)

    def get_double(self, key: str, namespace: Optional[str] = None) -> float:
        return self._get(key, namespace, ValueType.DOUBLE)

    def get_string(self, key: str, namespace: Optional[str] = None) -> str:
        return self._get(key, namespace, ValueType.STRING)

    def get_boolean(self, key: str, namespace: Optional[str] = None) -> bool:
        return self._get(key, namespace, ValueType.BOOLEAN)

    # ---------------- 标记 / nice name ----------------
    def _mark(self, key: str, namespace: Optional[str], marker: Marker) -> None:
        binding = self._binding(key, namespace)
        if marker not in binding.markers:
            binding.markers.append(marker)

    def mark_as_source(self, key: str, namespace: Optional[str] = None) -> None:
        self._mark(key, namespace, SOURCE)

    def mark_as_data(self, key: str, namespace: Optional[str] = None) -> None:
        self._mark(key, namespace, DATA)

    def mark_as_user_defined(self, key: str, namespace: Optional[str], tag: str) -> None:
        self._mark(key, namespace, user_defined(tag))

    def add_nice_names(
        self,
        key: str,
        namespace: Optional[str] = None,
        key_nice_name: Optional[str] = None,
        value_nice_name: Optional[str] = None,
    ) -> None:
        binding = self._binding(key, namespace)
        if binding.nice_names is not None:
            raise DuplicateNiceNameError(key, namespace)
        binding.nice_names = NiceNameLabels(key_nice_name, value_nice_name)

    def markers(self, key: str, namespace: Optional[str] = None) -> Tuple[Marker, ...]:
        return tuple(self._binding(key, namespace).markers)

    def nice_names(self, key: str, namespace: Optional[str] = None) -> Optional[NiceNameLabels]:
        return self._binding(key, namespace).nice_names

    # ---------------- 触发条件 ----------------
    def trigger_conformance(self) -> List[str]:
        return trigger_conformance(self)

    def is_trigger_eligible(self) -> bool:
        return not self.trigger_conformance()

    def ensure_trigger_eligible(self) -> None:
        problems = self.trigger_conformance()
        if problems:
            raise ConformanceError(problems)

    # ---------------- 容器协议 ----------------
    def __iter__(self) -> Iterator[KeyValueItem]:
        for (key, namespace), binding in self._bindings.items():
            yield KeyValueItem(key, namespace, binding.value, tuple(binding.markers), binding.nice_names)

    def __len__(self) -> int:
        return len(self._bindings)

    def __contains__(self, entry: object) -> bool:
        """支持 "key"（无命名空间）或 ("key", "namespace")。"""
        if isinstance(entry, str):
            entry = (entry, None)
        return entry in self._bindings

    def copy(self) -> "KeyValueSet":
        """深拷贝绑定与旁表（TypedValue / Marker 本身不可变，可共享）。"""
        other = KeyValueSet()
        for entry, binding in self._bindings.items():
            other._bindings[entry] = _Binding(binding.value, list(binding.markers), binding.nice_names)
        return other

    # ---------------- 序列化 ----------------
    def to_list(self) -> List[Dict[str, Any]]:
        """按插入顺序导出，供发布声明的线上负载使用。"""
        return [item.to_dict() for item in self]

    def to_json(self, *, ensure_ascii: bool = False) -> str:
        return json.dumps(self.to_list(), ensure_ascii=ensure_ascii)

    def __repr__(self) -> str:
        inner = ", ".join(
            f"{ns + ':' if ns else ''}{k}={b.value.value!r}" for (k, ns), b in self._bindings.items()
        )
        return f"KeyValueSet({inner})"
