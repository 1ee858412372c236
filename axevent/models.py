# 数据模型
from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Optional

from axevent.key_value_set import KeyValueSet
from axevent.typed_value import Payload, ValueType


@dataclass(frozen=True)
class KeyValueEntry:
    """事件声明里的一条负载：key / 值 / 类型 / 可选命名空间。"""

    key: str
    value: Payload
    value_type: ValueType
    namespace: Optional[str] = None


@dataclass
class Event:
    """
    入站事件（下游回调只依赖此模型，不关心总线细节）
    """
    kvs: KeyValueSet
    timestamp: float = field(default_factory=time.time)   # 秒级 UNIX 时间戳
    subscription_id: Optional[int] = None                   # 命中的订阅 ID
