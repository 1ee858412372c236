import pytest

from axevent.errors import (
    ConformanceError,
    DuplicateKeyError,
    DuplicateNiceNameError,
    KeyNotFoundError,
    TypeMismatchError,
)
from axevent.key_value_set import KeyValueSet
from axevent.markers import DATA, SOURCE, NiceNameLabels, user_defined
from axevent.typed_value import TypedValue, ValueType


@pytest.mark.parametrize("value,value_type,getter", [
    (42, ValueType.INTEGER, "get_integer"),
    (-7, ValueType.INTEGER, "get_integer"),
    (3.5, ValueType.DOUBLE, "get_double"),
    ("high", ValueType.STRING, "get_string"),
    ("", ValueType.STRING, "get_string"),
    (True, ValueType.BOOLEAN, "get_boolean"),
    (False, ValueType.BOOLEAN, "get_boolean"),
])
def test_add_then_get_returns_value(value, value_type, getter):
    kvs = KeyValueSet()
    kvs.add_key_value("k", "tnsaxis", value, value_type)
    got = getattr(kvs, getter)("k", "tnsaxis")
    assert got == value
    assert type(got) is type(value)


@pytest.mark.parametrize("second_value,second_type", [
    (1, ValueType.INTEGER),
    ("other", ValueType.STRING),
    (False, ValueType.BOOLEAN),
])
def test_duplicate_key_fails_regardless_of_value(second_value, second_type):
    kvs = KeyValueSet()
    kvs.add_key_value("port", None, 1, ValueType.INTEGER)
    with pytest.raises(DuplicateKeyError) as ei:
        kvs.add_key_value("port", None, second_value, second_type)
    assert ei.value.key == "port"
    assert ei.value.namespace is None
    assert len(kvs) == 1


def test_same_key_different_namespace_is_distinct():
    kvs = KeyValueSet()
    kvs.add_key_value("topic0", "tns1", "Device", ValueType.STRING)
    kvs.add_key_value("topic0", "tnsaxis", "Device", ValueType.STRING)
    kvs.add_key_value("topic0", None, "Device", ValueType.STRING)
    assert len(kvs) == 3
    assert ("topic0", "tns1") in kvs
    assert "topic0" in kvs


@pytest.mark.parametrize("value,value_type", [
    ("1", ValueType.INTEGER),
    (True, ValueType.INTEGER),       # bool 不是 INTEGER
    (1, ValueType.DOUBLE),           # 不做 int -> double 隐式转换
    (1.0, ValueType.INTEGER),
    (1, ValueType.STRING),
    (1, ValueType.BOOLEAN),
    (None, ValueType.STRING),
])
def test_add_with_mismatched_type_fails(value, value_type):
    kvs = KeyValueSet()
    with pytest.raises(TypeMismatchError) as ei:
        kvs.add_key_value("k", None, value, value_type)
    assert ei.value.key == "k"
    assert ei.value.expected == value_type.value
    assert "k" not in kvs


@pytest.mark.parametrize("getter", ["get_double", "get_string", "get_boolean"])
def test_get_with_wrong_kind_fails(getter):
    kvs = KeyValueSet()
    kvs.add_key_value("count", None, 3, ValueType.INTEGER)
    with pytest.raises(TypeMismatchError) as ei:
        getattr(kvs, getter)("count")
    assert ei.value.actual == "int"


@pytest.mark.parametrize("getter", ["get_integer", "get_double", "get_string", "get_boolean"])
def test_get_absent_key_fails(getter):
    kvs = KeyValueSet()
    kvs.add_key_value("count", "tnsaxis", 3, ValueType.INTEGER)
    with pytest.raises(KeyNotFoundError) as ei:
        getattr(kvs, getter)("count")  # 命名空间不同，视为不存在
    assert ei.value.key == "count"


def test_get_value_returns_typed_value():
    kvs = KeyValueSet()
    kvs.add_key_value("level", None, 0.25, ValueType.DOUBLE)
    assert kvs.get_value("level") == TypedValue.double(0.25)


@pytest.mark.parametrize("key", ["", None, 3])
def test_invalid_key_rejected(key):
    kvs = KeyValueSet()
    with pytest.raises(TypeMismatchError) as ei:
        kvs.add_key_value(key, None, 1, ValueType.INTEGER)
    assert ei.value.expected == "non-empty string key"
    assert len(kvs) == 0


@pytest.mark.parametrize("mark", [
    lambda kvs: kvs.mark_as_source("port"),
    lambda kvs: kvs.mark_as_data("port"),
    lambda kvs: kvs.mark_as_user_defined("port", None, "wired"),
    lambda kvs: kvs.add_nice_names("port", None, "Port", None),
])
def test_annotating_absent_key_fails(mark):
    kvs = KeyValueSet()
    with pytest.raises(KeyNotFoundError):
        mark(kvs)
    assert len(kvs) == 0  # 标记不会隐式创建条目


def test_markers_are_idempotent_and_ordered():
    kvs = KeyValueSet()
    kvs.add_key_value("port", None, 1, ValueType.INTEGER)
    kvs.mark_as_source("port")
    kvs.mark_as_source("port")
    kvs.mark_as_user_defined("port", None, "wired")
    kvs.mark_as_user_defined("port", None, "wired")
    kvs.mark_as_user_defined("port", None, "front")
    assert kvs.markers("port") == (SOURCE, user_defined("wired"), user_defined("front"))


def test_nice_names_error_on_duplicate():
    """✅ 策略：nice name 第二次设置直接报错，第一次的值保留"""
    kvs = KeyValueSet()
    kvs.add_key_value("state", None, True, ValueType.BOOLEAN)
    kvs.add_nice_names("state", None, "State", "Active")
    with pytest.raises(DuplicateNiceNameError):
        kvs.add_nice_names("state", None, "Other", None)
    assert kvs.nice_names("state") == NiceNameLabels("State", "Active")


def test_duplicate_nice_name_is_a_duplicate_key_error():
    kvs = KeyValueSet()
    kvs.add_key_value("state", None, True, ValueType.BOOLEAN)
    kvs.add_nice_names("state", value_nice_name="On")
    with pytest.raises(DuplicateKeyError):
        kvs.add_nice_names("state", value_nice_name="Off")


def test_iteration_is_ordered_and_restartable():
    kvs = KeyValueSet()
    kvs.add_key_value("topic0", "tnsaxis", "Device", ValueType.STRING)
    kvs.add_key_value("topic1", "tnsaxis", "IO", ValueType.STRING)
    kvs.add_key_value("port", None, 3, ValueType.INTEGER)
    kvs.mark_as_source("port")

    first = [(i.key, i.namespace) for i in kvs]
    second = [(i.key, i.namespace) for i in kvs]
    assert first == second == [("topic0", "tnsaxis"), ("topic1", "tnsaxis"), ("port", None)]

    port = list(kvs)[2]
    assert port.value_type is ValueType.INTEGER
    assert port.markers == (SOURCE,)


def test_trigger_conformance():
    kvs = KeyValueSet()
    kvs.add_key_value("port", None, 1, ValueType.INTEGER)
    kvs.add_key_value("state", None, True, ValueType.BOOLEAN)
    kvs.add_key_value("level", None, 0.5, ValueType.DOUBLE)

    assert kvs.trigger_conformance() == ["no data key"]
    assert not kvs.is_trigger_eligible()

    kvs.mark_as_data("state")
    assert kvs.is_trigger_eligible()      # 0 个 source 也可以

    kvs.mark_as_source("port")
    kvs.ensure_trigger_eligible()

    kvs.mark_as_data("level")
    kvs.mark_as_source("level")
    with pytest.raises(ConformanceError) as ei:
        kvs.ensure_trigger_eligible()
    assert len(ei.value.problems) == 2


def test_copy_is_independent():
    kvs = KeyValueSet()
    kvs.add_key_value("port", None, 1, ValueType.INTEGER)
    clone = kvs.copy()
    clone.mark_as_data("port")
    clone.add_key_value("extra", None, "x", ValueType.STRING)
    assert kvs.markers("port") == ()
    assert "extra" not in kvs
    assert clone.markers("port") == (DATA,)


def test_to_list_carries_markers_and_nice_names():
    kvs = KeyValueSet()
    kvs.add_key_value("topic0", "tnsaxis", "Device", ValueType.STRING)
    kvs.add_key_value("state", None, False, ValueType.BOOLEAN)
    kvs.mark_as_data("state")
    kvs.add_nice_names("state", None, "State", None)

    rows = kvs.to_list()
    assert rows[0] == {"key": "topic0", "namespace": "tnsaxis", "type": "string",
                       "value": "Device", "markers": []}
    assert rows[1]["markers"] == [{"kind": "data"}]
    assert rows[1]["key_nice_name"] == "State"
    assert '"value": false' in kvs.to_json()
