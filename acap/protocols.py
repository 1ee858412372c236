# ──────────────────────────────────────────────────────────────────────────────
# 模块用途：声明外部协作方的“接口（协议）”，用于静态检查与解耦实现。
# 说明：
#   - 事件总线的发布/订阅运行时、参数存储都在本库之外；
#   - 这里只约定方法签名，acap.event_bus / acap.parameters 给出进程内参考实现。
# ──────────────────────────────────────────────────────────────────────────────
from __future__ import annotations

from typing import Any, Awaitable, Callable, Protocol

from axevent.key_value_set import KeyValueSet
from axevent.models import Event

EventHandler = Callable[[Event], Awaitable[None]]
ParameterCallback = Callable[[str, str, Any], None]


class ParameterNotFoundError(KeyError):
    """参数路径不存在。"""


class EventPublisher(Protocol):
    """发布侧：先声明（带标记/nice name 的完整 KeyValueSet），再按声明 ID 发送。"""
    def declare(self, kvs: KeyValueSet, stateless: bool = True) -> int: ...
    async def send(self, declaration_id: int, kvs: KeyValueSet) -> int: ...


class EventSubscriber(Protocol):
    """订阅侧：template 中的每个条目都要在事件里出现且值相等才算命中。"""
    def subscribe(self, template: KeyValueSet, handler: EventHandler) -> int: ...
    def unsubscribe(self, subscription_id: int) -> bool: ...


class ParameterStore(Protocol):
    """参数存储：按 "Group.Sub.Name" 取字符串值；回调签名 (name, new_value, userdata)。"""
    def get(self, name: str) -> str: ...
    def set(self, name: str, value: str) -> None: ...
    def register_callback(self, name: str, callback: ParameterCallback, userdata: Any = None) -> None: ...
