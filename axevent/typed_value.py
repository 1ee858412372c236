# axevent/typed_value.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union

from axevent.errors import TypeMismatchError

Payload = Union[int, float, str, bool]


class ValueType(str, Enum):
    """事件值的类型标签（封闭集合）。"""

    INTEGER = "int"
    DOUBLE = "double"
    STRING = "string"
    BOOLEAN = "bool"

    def accepts(self, value: Any) -> bool:
        """值的 Python 类型是否与标签一致；不做任何隐式转换（bool 不算 INTEGER，int 不算 DOUBLE）。"""
        if self is ValueType.INTEGER:
            return isinstance(value, int) and not isinstance(value, bool)
        if self is ValueType.DOUBLE:
            return isinstance(value, float)
        if self is ValueType.STRING:
            return isinstance(value, str)
        return isinstance(value, bool)


@dataclass(frozen=True, slots=True)
class TypedValue:
    """
    带类型标签的事件值：tag 与 payload 始终一致。
    构造时校验，之后不可变。
    """

    value_type: ValueType
    value: Payload

    def __post_init__(self):
        if not isinstance(self.value_type, ValueType):
            raise TypeMismatchError("<value>", None, "ValueType", type(self.value_type).__name__)
        if not self.value_type.accepts(self.value):
            raise TypeMismatchError("<value>", None, self.value_type.value, type(self.value).__name__)

    @classmethod
    def of(cls, value: Payload, value_type: ValueType, key: str = "<value>",
           namespace: Optional[str] = None) -> "TypedValue":
        """按给定标签构造；不一致时抛带 key/namespace 的 TypeMismatchError。"""
        if not isinstance(value_type, ValueType) or not value_type.accepts(value):
            expected = value_type.value if isinstance(value_type, ValueType) else repr(value_type)
            raise TypeMismatchError(key, namespace, expected, type(value).__name__)
        return cls(value_type, value)

    @classmethod
    def integer(cls, value: int) -> "TypedValue":
        return cls(ValueType.INTEGER, value)

    @classmethod
    def double(cls, value: float) -> "TypedValue":
        return cls(ValueType.DOUBLE, value)

    @classmethod
    def string(cls, value: str) -> "TypedValue":
        return cls(ValueType.STRING, value)

    @classmethod
    def boolean(cls, value: bool) -> "TypedValue":
        return cls(ValueType.BOOLEAN, value)
