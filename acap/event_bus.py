# 事件总线 LocalEventBus

from __future__ import annotations

import asyncio
import itertools
from dataclasses import dataclass
from typing import Dict, List

from acap.protocols import EventHandler
from axevent.errors import TypeMismatchError
from axevent.key_value_set import KeyValueSet
from axevent.models import Event
from axevent.setting import LOG_LEVEL, LOG_TO_FILE
from commons.base_logger import BaseLogger

_LOGGER = BaseLogger(name="axevent.bus", level=LOG_LEVEL, to_file=LOG_TO_FILE).logger


class UnknownDeclarationError(KeyError):
    """send() 使用了未声明（或已撤销）的声明 ID。"""


@dataclass
class _Declaration:
    kvs: KeyValueSet
    stateless: bool


@dataclass
class _Subscription:
    template: KeyValueSet
    handler: EventHandler


def _matches(kvs: KeyValueSet, template: KeyValueSet) -> bool:
    """template 中的每个条目都要在 kvs 里出现且类型、值都相同。"""
    for item in template:
        if (item.key, item.namespace) not in kvs:
            return False
        if kvs.get_value(item.key, item.namespace) != item.value:
            return False
    return True


class LocalEventBus:
    """
    进程内事件总线（EventPublisher + EventSubscriber 的参考实现）：
    - declare() 保存声明的快照；
    - send() 把声明中的 topic 条目与本次负载合并成事件，并发 fan-out 给命中的订阅；
    - 每次投递拿到独立的 KeyValueSet 副本，handler 之间不共享可变状态；
    - handler 异常被隔离：记录一条错误日志，不影响其它 handler。
    """

    def __init__(self) -> None:
        self._ids = itertools.count(1)
        self._declarations: Dict[int, _Declaration] = {}
        self._subscriptions: Dict[int, _Subscription] = {}

    # ---------------- 发布侧 ----------------
    def declare(self, kvs: KeyValueSet, stateless: bool = True) -> int:
        declaration_id = next(self._ids)
        self._declarations[declaration_id] = _Declaration(kvs.copy(), stateless)
        _LOGGER.info("declared #%d %r (stateless=%s)", declaration_id, kvs, stateless)
        return declaration_id

    def undeclare(self, declaration_id: int) -> bool:
        return self._declarations.pop(declaration_id, None) is not None

    def _payload(self, declaration: _Declaration, kvs: KeyValueSet) -> KeyValueSet:
        """声明中的 topic 条目在前，本次负载在后；负载类型必须与声明一致。"""
        payload = KeyValueSet()
        for item in declaration.kvs:
            if item.key.startswith("topic") and (item.key, item.namespace) not in kvs:
                payload.add_key_value(item.key, item.namespace, item.value.value, item.value_type)
        for item in kvs:
            entry = (item.key, item.namespace)
            if entry in declaration.kvs:
                declared = declaration.kvs.get_value(item.key, item.namespace)
                if declared.value_type is not item.value_type:
                    raise TypeMismatchError(item.key, item.namespace,
                                            declared.value_type.value, item.value_type.value)
            payload.add_key_value(item.key, item.namespace, item.value.value, item.value_type)
        return payload

    async def send(self, declaration_id: int, kvs: KeyValueSet) -> int:
        """发送一次事件，返回命中的订阅数。"""
        declaration = self._declarations.get(declaration_id)
        if declaration is None:
            raise UnknownDeclarationError(declaration_id)

        payload = self._payload(declaration, kvs)
        targets = [(sid, sub) for sid, sub in list(self._subscriptions.items())
                   if _matches(payload, sub.template)]
        if not targets:
            return 0

        results = await asyncio.gather(
            *(sub.handler(Event(kvs=payload.copy(), subscription_id=sid)) for sid, sub in targets),
            return_exceptions=True,
        )
        for (sid, _), r in zip(targets, results):
            if isinstance(r, Exception):
                _LOGGER.error("handler for subscription #%d failed: %r", sid, r, exc_info=r)
        return len(targets)

    # ---------------- 订阅侧 ----------------
    def subscribe(self, template: KeyValueSet, handler: EventHandler) -> int:
        subscription_id = next(self._ids)
        self._subscriptions[subscription_id] = _Subscription(template.copy(), handler)
        _LOGGER.info("subscribed #%d to %r", subscription_id, template)
        return subscription_id

    def unsubscribe(self, subscription_id: int) -> bool:
        return self._subscriptions.pop(subscription_id, None) is not None

    def subscription_ids(self) -> List[int]:
        return list(self._subscriptions)
