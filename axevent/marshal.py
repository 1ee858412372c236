# axevent/marshal.py
from __future__ import annotations

"""
RecordMarshaller：dataclass 记录 <-> KeyValueSet 的双向映射。

字段 -> key 的规则：
  1) 记录类在 FIELD_MAPPING（外部 key -> 字段名）里声明了的，用声明的 key；
  2) 否则用字段名的小写形式。
按字段声明的类型分派：int -> INTEGER，float -> DOUBLE，str -> STRING，bool -> BOOLEAN
（Optional[X] 视同 X）；其它类型的字段直接跳过，方便记录携带派生/辅助字段。
以下划线开头的字段视为私有，不参与映射。

每个记录类的字段表只构建一次并缓存。
"""

import dataclasses
import sys
import threading
import types
import typing
from typing import Any, Callable, ClassVar, Dict, Optional, Tuple, Type, TypeVar, Union

from axevent.errors import CompositionError, EventKvsError, InvalidTargetError
from axevent.key_value_set import KeyValueSet
from axevent.models import Event
from axevent.setting import LOG_LEVEL, LOG_TO_FILE
from axevent.typed_value import ValueType
from commons.base_dataclasses import BaseDataClass
from commons.base_logger import BaseLogger

_LOGGER = BaseLogger(name="axevent.marshal", level=LOG_LEVEL, to_file=LOG_TO_FILE).logger

R = TypeVar("R", bound="EventRecord")

_KIND_BY_TYPE: Dict[type, ValueType] = {
    int: ValueType.INTEGER,
    float: ValueType.DOUBLE,
    str: ValueType.STRING,
    bool: ValueType.BOOLEAN,
}

_GETTERS: Dict[ValueType, Callable[[KeyValueSet, str, Optional[str]], Any]] = {
    ValueType.INTEGER: KeyValueSet.get_integer,
    ValueType.DOUBLE: KeyValueSet.get_double,
    ValueType.STRING: KeyValueSet.get_string,
    ValueType.BOOLEAN: KeyValueSet.get_boolean,
}


@dataclasses.dataclass(frozen=True)
class FieldBinding:
    """字段表中的一行：字段名 -> 事件 key + 类型。"""

    field_name: str
    key: str
    value_type: ValueType


_TABLES: Dict[type, Tuple[FieldBinding, ...]] = {}
_TABLES_LOCK = threading.Lock()


def _kind_of(annotation: Any) -> Optional[ValueType]:
    origin = typing.get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        args = [a for a in typing.get_args(annotation) if a is not type(None)]
        if len(args) != 1:
            return None
        annotation = args[0]
    return _KIND_BY_TYPE.get(annotation)


def _resolve(annotation: Any, module_globals: Dict[str, Any], record_type: type) -> Any:
    """
    逐字段解析注解。字符串注解（from __future__ import annotations）在记录类所在模块里求值；
    解析不了的（例如函数内局部定义的类型）返回 None，按不支持的类型跳过。
    """
    if not isinstance(annotation, str):
        return annotation
    try:
        return eval(annotation, dict(module_globals), dict(vars(record_type)))
    except (NameError, AttributeError, SyntaxError, TypeError):
        return None


def field_table(record_type: type) -> Tuple[FieldBinding, ...]:
    """返回（并缓存）记录类的字段表。"""
    table = _TABLES.get(record_type)
    if table is not None:
        return table

    if not dataclasses.is_dataclass(record_type):
        raise InvalidTargetError(record_type)

    overrides: Dict[str, str] = {}
    for ext_key, field_name in getattr(record_type, "FIELD_MAPPING", {}).items():
        if field_name in overrides:
            raise ValueError(
                f"{record_type.__name__}.FIELD_MAPPING maps both {overrides[field_name]!r} "
                f"and {ext_key!r} to field {field_name!r}"
            )
        overrides[field_name] = ext_key

    module_globals = vars(sys.modules[record_type.__module__]) if record_type.__module__ in sys.modules else {}
    bindings = []
    for f in dataclasses.fields(record_type):
        if f.name.startswith("_"):
            continue
        kind = _kind_of(_resolve(f.type, module_globals, record_type))
        if kind is None:
            continue
        bindings.append(FieldBinding(f.name, overrides.get(f.name, f.name.lower()), kind))

    table = tuple(bindings)
    with _TABLES_LOCK:
        _TABLES.setdefault(record_type, table)
    _LOGGER.debug("field table for %s: %s", record_type.__name__, [(b.field_name, b.key) for b in table])
    return table


def _kvs_of(event: Union[Event, KeyValueSet]) -> KeyValueSet:
    return event if isinstance(event, KeyValueSet) else event.kvs


def _read(kvs: KeyValueSet, binding: FieldBinding) -> Any:
    try:
        return _GETTERS[binding.value_type](kvs, binding.key, None)
    except EventKvsError as e:
        raise CompositionError.wrap(binding.key, e) from e


def to_record(event: Union[Event, KeyValueSet], target: Any) -> Any:
    """
    把事件里的值写入 target 的字段，返回 target 本身。
    :raises InvalidTargetError: target 不是可写的 dataclass 实例（None / 类对象 / frozen）
    :raises CompositionError: 第一个读取失败的 key（同时也是 KeyNotFoundError / TypeMismatchError）
    """
    if (
        target is None
        or isinstance(target, type)
        or not dataclasses.is_dataclass(target)
        or type(target).__dataclass_params__.frozen
    ):
        raise InvalidTargetError(target)

    kvs = _kvs_of(event)
    for binding in field_table(type(target)):
        setattr(target, binding.field_name, _read(kvs, binding))
    return target


def from_record(record: Any) -> KeyValueSet:
    """
    按同样的字段表把记录导出为 KeyValueSet（无命名空间）。
    :raises CompositionError: 重复 key 或值与字段类型不一致（同时也是 DuplicateKeyError / TypeMismatchError）
    """
    if record is None or isinstance(record, type) or not dataclasses.is_dataclass(record):
        raise InvalidTargetError(record)

    kvs = KeyValueSet()
    for binding in field_table(type(record)):
        try:
            kvs.add_key_value(binding.key, None, getattr(record, binding.field_name), binding.value_type)
        except EventKvsError as e:
            raise CompositionError.wrap(binding.key, e) from e
    return kvs


class EventRecord(BaseDataClass):
    """
    事件记录基类：子类用 @dataclass 装饰，用 FIELD_MAPPING 声明 key 覆盖。

        @dataclass
        class PortState(EventRecord):
            port: int
            state: bool
            label: str = ""

            FIELD_MAPPING: ClassVar[Dict[str, str]] = {"PortName": "label"}
    """

    FIELD_MAPPING: ClassVar[Dict[str, str]] = {}

    @classmethod
    def from_event(cls: Type[R], event: Union[Event, KeyValueSet]) -> R:
        """直接从事件构造实例；不参与映射的必填字段需有默认值。"""
        kvs = _kvs_of(event)
        values = {b.field_name: _read(kvs, b) for b in field_table(cls)}
        return cls(**values)  # type: ignore[arg-type]

    def fill_from_event(self: R, event: Union[Event, KeyValueSet]) -> R:
        return to_record(event, self)

    def to_key_value_set(self) -> KeyValueSet:
        return from_record(self)
