# axevent/topics.py
from __future__ import annotations

"""
主题事件构建器 TopicEventBuilder

事件的主题是 2~4 级字符串（topic0..topic3），本身就是 KeyValueSet 里的条目：
  - new_tns1_axis_event：topic0 在 ONVIF 命名空间（tns1），其余在厂商命名空间（tnsaxis）
  - new_tns_axis_event ：所有 topic 都在厂商命名空间
先按顺序写入 topic，再按调用方给出的顺序写入负载；
任一步失败立即停止，抛 CompositionError 并注明是哪个字段（topic0 / topic2 / 负载 key）。
"""

from typing import Iterable, List, Optional, Sequence

from axevent.errors import CompositionError, EventKvsError
from axevent.key_value_set import KeyValueSet
from axevent.manifest import AppSetup
from axevent.markers import DataMark, NiceNames, SourceMark, UserDefinedMark
from axevent.models import KeyValueEntry
from axevent.setting import (
    LOG_LEVEL,
    LOG_TO_FILE,
    ONVIF_NAMESPACE_TNS1,
    ONVIF_NAMESPACE_TNSAXIS,
    PLATFORM_TOPIC0,
)
from axevent.typed_value import ValueType
from commons.base_logger import BaseLogger

_LOGGER = BaseLogger(name="axevent.topics", level=LOG_LEVEL, to_file=LOG_TO_FILE).logger

TOPIC_KEYS = ("topic0", "topic1", "topic2", "topic3")


def _build_topic_event(
    topic0_namespace: str,
    topics: Sequence[Optional[str]],
    key_values: Optional[Iterable[KeyValueEntry]],
) -> KeyValueSet:
    kvs = KeyValueSet()
    for slot, topic in zip(TOPIC_KEYS, topics):
        if topic is None and slot in ("topic2", "topic3"):
            continue
        namespace = topic0_namespace if slot == "topic0" else ONVIF_NAMESPACE_TNSAXIS
        try:
            kvs.add_key_value(slot, namespace, topic, ValueType.STRING)
        except EventKvsError as e:
            raise CompositionError.wrap(slot, e) from e

    for kv in key_values or ():
        try:
            kvs.add_key_value(kv.key, kv.namespace, kv.value, kv.value_type)
        except EventKvsError as e:
            raise CompositionError.wrap(kv.key, e) from e

    _LOGGER.debug("built topic event %r", kvs)
    return kvs


def new_tns1_axis_event(
    topic0: str,
    topic1: str,
    topic2: Optional[str] = None,
    topic3: Optional[str] = None,
    key_values: Optional[Iterable[KeyValueEntry]] = None,
) -> KeyValueSet:
    """topic0 取 ONVIF 标准命名空间（tns1），用于符合标准的事件声明。"""
    return _build_topic_event(ONVIF_NAMESPACE_TNS1, (topic0, topic1, topic2, topic3), key_values)


def new_tns_axis_event(
    topic0: str,
    topic1: str,
    topic2: Optional[str] = None,
    topic3: Optional[str] = None,
    key_values: Optional[Iterable[KeyValueEntry]] = None,
) -> KeyValueSet:
    """所有 topic 都在厂商命名空间（tnsaxis），用于厂商自定义的事件声明。"""
    return _build_topic_event(ONVIF_NAMESPACE_TNSAXIS, (topic0, topic1, topic2, topic3), key_values)


def platform_nice_name(app_setup: AppSetup, event_name: str, event_nice_name: Optional[str] = None) -> str:
    """topic2 的展示名："<friendly name>: <event nice name 或 event name>"。"""
    return f"{app_setup.friendly_name}: {event_nice_name if event_nice_name is not None else event_name}"


def new_camera_application_platform_event(
    app_setup: AppSetup,
    event_name: str,
    event_nice_name: Optional[str] = None,
    key_values: Optional[Iterable[KeyValueEntry]] = None,
    source_markers: Optional[Iterable[SourceMark]] = None,
    data_markers: Optional[Iterable[DataMark]] = None,
    user_defined_markers: Optional[Iterable[UserDefinedMark]] = None,
    nice_names: Optional[Iterable[NiceNames]] = None,
    topic3: Optional[str] = None,
) -> KeyValueSet:
    """
    平台级自定义事件：
      topic0 = "CameraApplicationPlatform"
      topic1 = 应用名（app_setup.app_name）
      topic2 = 事件名
      topic3 = 可选
    负载写完后依次挂 source / data / 用户自定义标记与调用方的 nice name，
    最后附上自动合成的 topic2 nice name。调用方不要自己给 topic2 设 nice name，
    否则按重复 nice name 报错。
    """
    kvs = new_tns_axis_event(PLATFORM_TOPIC0, app_setup.app_name, event_name, topic3, key_values)

    try:
        for mark in source_markers or ():
            field = mark.key
            kvs.mark_as_source(mark.key, mark.namespace)
        for mark in data_markers or ():
            field = mark.key
            kvs.mark_as_data(mark.key, mark.namespace)
        for mark in user_defined_markers or ():
            field = mark.key
            kvs.mark_as_user_defined(mark.key, mark.namespace, mark.tag)

        # 不改动调用方的列表
        all_nice_names: List[NiceNames] = list(nice_names or ())
        all_nice_names.append(NiceNames(
            key="topic2",
            namespace=ONVIF_NAMESPACE_TNSAXIS,
            value_nice_name=platform_nice_name(app_setup, event_name, event_nice_name),
        ))
        for nice in all_nice_names:
            field = nice.key
            kvs.add_nice_names(nice.key, nice.namespace, nice.key_nice_name, nice.value_nice_name)
    except EventKvsError as e:
        raise CompositionError.wrap(field, e) from e

    if not kvs.is_trigger_eligible():
        _LOGGER.debug("platform event %r is declaration-only: %s", event_name, kvs.trigger_conformance())
    return kvs
