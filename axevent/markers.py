# axevent/markers.py
from __future__ import annotations

"""
标记（source / data / 用户自定义）与 nice name 的类型定义。

- source key：区分同一事件声明的多个实例（例如“哪个 I/O 端口”）。
- data key：事件所表示的状态值（例如端口高/低）。
  只有 0~1 个 source key 且恰好 1 个 data key 的事件才能用来触发动作。
- 用户自定义标记：附带任意 tag 字符串。
- nice name：给 key / value 的可读名称，只用于展示，不影响查找与类型。

容器本身不强制上述触发条件（允许声明不合规的事件），
需要时用 trigger_conformance() 检查。
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional


class MarkerKind(str, Enum):
    SOURCE = "source"
    DATA = "data"
    USER_DEFINED = "user_defined"


@dataclass(frozen=True, slots=True)
class Marker:
    """挂在某个条目上的标记；USER_DEFINED 必须带 tag。"""

    kind: MarkerKind
    tag: Optional[str] = None

    def __post_init__(self):
        if self.kind is MarkerKind.USER_DEFINED and not isinstance(self.tag, str):
            raise ValueError("user defined marker requires a string tag")
        if self.kind is not MarkerKind.USER_DEFINED and self.tag is not None:
            raise ValueError(f"{self.kind.value} marker does not take a tag")


SOURCE = Marker(MarkerKind.SOURCE)
DATA = Marker(MarkerKind.DATA)


def user_defined(tag: str) -> Marker:
    return Marker(MarkerKind.USER_DEFINED, tag)


@dataclass(frozen=True, slots=True)
class NiceNameLabels:
    """条目上的可读名称（key 名 / value 名均可选）。"""

    key_nice_name: Optional[str] = None
    value_nice_name: Optional[str] = None


# —— 声明用的请求对象：指明要给哪个 (key, namespace) 打标记 ——

@dataclass(frozen=True)
class SourceMark:
    key: str
    namespace: Optional[str] = None


@dataclass(frozen=True)
class DataMark:
    key: str
    namespace: Optional[str] = None


@dataclass(frozen=True)
class UserDefinedMark:
    key: str
    tag: str
    namespace: Optional[str] = None


@dataclass(frozen=True)
class NiceNames:
    key: str
    namespace: Optional[str] = None
    key_nice_name: Optional[str] = None
    value_nice_name: Optional[str] = None


def trigger_conformance(items: Iterable) -> List[str]:
    """
    检查能否用于触发动作，返回问题列表（空列表表示合规）。
    items: KeyValueSet 的遍历结果（每项带 key / namespace / markers）。
    """
    sources, datas = [], []
    for item in items:
        label = f"{item.namespace}:{item.key}" if item.namespace else item.key
        if SOURCE in item.markers:
            sources.append(label)
        if DATA in item.markers:
            datas.append(label)

    problems: List[str] = []
    if len(sources) > 1:
        problems.append(f"more than one source key: {', '.join(sources)}")
    if not datas:
        problems.append("no data key")
    elif len(datas) > 1:
        problems.append(f"more than one data key: {', '.join(datas)}")
    return problems
