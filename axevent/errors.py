# axevent/errors.py
from __future__ import annotations

"""
事件键值集合的异常体系。
所有异常都携带 key / namespace（以及类型相关信息），足以拼出给用户看的报错。
"""

from typing import Any, Dict, Optional, Type


def _qualified(key: str, namespace: Optional[str]) -> str:
    return f"{namespace}:{key}" if namespace else key


class EventKvsError(Exception):
    """axevent 所有异常的基类。"""


class DuplicateKeyError(EventKvsError):
    """(key, namespace) 已存在，重复插入。"""

    def __init__(self, key: str, namespace: Optional[str] = None):
        self.key = key
        self.namespace = namespace
        super().__init__(f"key {_qualified(key, namespace)!r} already exists")


class DuplicateNiceNameError(DuplicateKeyError):
    """同一条目重复设置 nice name（策略：报错，不覆盖）。"""

    def __init__(self, key: str, namespace: Optional[str] = None):
        self.key = key
        self.namespace = namespace
        EventKvsError.__init__(self, f"nice names for {_qualified(key, namespace)!r} already set")


class KeyNotFoundError(EventKvsError):
    """(key, namespace) 不存在。"""

    def __init__(self, key: str, namespace: Optional[str] = None):
        self.key = key
        self.namespace = namespace
        super().__init__(f"key {_qualified(key, namespace)!r} not found")


class TypeMismatchError(EventKvsError):
    """值与类型标签不一致，或按错误的类型读取。"""

    def __init__(self, key: str, namespace: Optional[str], expected: Any, actual: Any):
        self.key = key
        self.namespace = namespace
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"key {_qualified(key, namespace)!r}: expected {expected}, got {actual}"
        )


class InvalidTargetError(EventKvsError):
    """to_record 的目标不是可写的 dataclass 实例。"""

    def __init__(self, target: Any):
        self.target_type = type(target).__name__
        super().__init__(f"target must be a mutable dataclass instance, got {self.target_type}")


class ConformanceError(EventKvsError):
    """事件不满足触发动作的条件（0~1 个 source key，恰好 1 个 data key）。"""

    def __init__(self, problems):
        self.problems = list(problems)
        super().__init__("event is not trigger eligible: " + "; ".join(self.problems))


class CompositionError(EventKvsError):
    """
    组装失败：包装底层异常，并记下是哪个逻辑字段出错（topic0 / payload key / 记录字段）。
    用 CompositionError.wrap() 构造，得到的实例同时也是底层异常的类型，
    因此 except KeyNotFoundError 与 except CompositionError 都能捕获。
    """

    def __init__(self, field: str, cause: Exception):
        # 保留底层异常上的 key / namespace / expected 等上下文
        self.__dict__.update(vars(cause))
        self.field = field
        self.cause = cause
        EventKvsError.__init__(self, f"failed to add {field}: {cause}")

    @classmethod
    def wrap(cls, field: str, cause: Exception) -> "CompositionError":
        for kind in type(cause).__mro__:
            composed = _COMPOSED.get(kind)
            if composed is not None:
                return composed(field, cause)
        return cls(field, cause)


class _ComposedDuplicateNiceNameError(CompositionError, DuplicateNiceNameError):
    pass


class _ComposedDuplicateKeyError(CompositionError, DuplicateKeyError):
    pass


class _ComposedKeyNotFoundError(CompositionError, KeyNotFoundError):
    pass


class _ComposedTypeMismatchError(CompositionError, TypeMismatchError):
    pass


_COMPOSED: Dict[Type[Exception], Type[CompositionError]] = {
    DuplicateNiceNameError: _ComposedDuplicateNiceNameError,
    DuplicateKeyError: _ComposedDuplicateKeyError,
    KeyNotFoundError: _ComposedKeyNotFoundError,
    TypeMismatchError: _ComposedTypeMismatchError,
}
