from __future__ import annotations

from dataclasses import dataclass

from axevent.key_value_set import KeyValueSet
from axevent.marshal import field_table, to_record
from axevent.typed_value import ValueType


def test_unresolvable_field_type_is_skipped():
    """✅ 局部定义的类型在字符串注解下解析不了，按不支持的字段跳过"""
    class Aux:
        pass

    @dataclass
    class Rec:
        age: int = 0
        aux: Aux = None
        extra: Mapping[str, int] = None   # 本模块未导入 Mapping，同样跳过

    kvs = KeyValueSet()
    kvs.add_key_value("age", None, 42, ValueType.INTEGER)
    rec = to_record(kvs, Rec())
    assert rec.age == 42
    assert rec.aux is None
    assert [b.field_name for b in field_table(Rec)] == ["age"]


@dataclass
class Reading:
    level: float = 0.0
    label: str | None = None


def test_string_annotations_resolve_in_module():
    kvs = KeyValueSet()
    kvs.add_key_value("level", None, 0.5, ValueType.DOUBLE)
    kvs.add_key_value("label", None, "north", ValueType.STRING)
    reading = to_record(kvs, Reading())
    assert (reading.level, reading.label) == (0.5, "north")
