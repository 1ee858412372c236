# -*- coding: utf-8 -*-
"""
BaseDataClass
-------------
为 dataclass 子类提供统一的构造/清洗/校验与导出能力。
流程：字段映射 -> 默认值合并 -> 字段转换 -> 行级校验 -> 构造实例。

FIELD_MAPPING 的方向是“外部名 -> 内部字段名”，
应用清单（appName -> app_name）与事件记录（事件 key -> 字段名）共用同一约定。

使用建议：
- 子类必须使用 @dataclass 装饰。
- DEFAULTS 中的可变对象请使用 lambda 返回，或依赖本类的 deepcopy 保护。
- CONVERTERS 建议为纯函数。
- VALIDATORS 只抛错不改值。
"""
from __future__ import annotations

import copy
import dataclasses
import logging
from typing import Any, Callable, ClassVar, Dict, List, Mapping, Type, TypeVar

from axevent.setting import LOG_LEVEL, LOG_TO_FILE
from commons.base_logger import BaseLogger

_DEFAULT_LOGGER = BaseLogger(name="axevent.dataclass", level=LOG_LEVEL, to_file=LOG_TO_FILE).logger

T = TypeVar("T", bound="BaseDataClass")
Converter = Callable[[Any], Any]
RowValidator = Callable[[Dict[str, Any]], None]


class BaseDataClass:
    """dataclass 子类的通用基类：构造、清洗、校验、导出。

    子类可配置以下类变量：
    - DEFAULTS: 字段默认值；callable 每次构造时调用，非 callable 做 deepcopy。
    - FIELD_MAPPING: 外部字段名 -> 内部字段名；未声明则按原名匹配。
    - CONVERTERS: 字段级转换器；在默认值合并后、校验前执行。
    - VALIDATORS: 行级校验器；接收合并/转换后的 dict，抛出异常即视为校验失败。
    - LOGGER: 日志器；可由子类覆盖。

    典型用法：
        @dataclasses.dataclass
        class AppSetup(BaseDataClass):
            app_name: str
            friendly_name: str | None = None

        AppSetup.FIELD_MAPPING = {"appName": "app_name", "friendlyName": "friendly_name"}
        setup = AppSetup.from_dict({"appName": "MyApp"}, strict=True)
    """

    DEFAULTS: ClassVar[Dict[str, Any]] = {}
    FIELD_MAPPING: ClassVar[Dict[str, str]] = {}
    CONVERTERS: ClassVar[Dict[str, Converter]] = {}
    VALIDATORS: ClassVar[List[RowValidator]] = []

    LOGGER: ClassVar[logging.Logger] = _DEFAULT_LOGGER

    @classmethod
    def _logger(cls) -> logging.Logger:
        return getattr(cls, "LOGGER", _DEFAULT_LOGGER) or _DEFAULT_LOGGER

    @classmethod
    def from_dict(
        cls: Type[T],
        data: Mapping[str, Any],
        *,
        strict: bool = False,
        log_errors: bool = True,
    ) -> T:
        """从单个字典构造实例：映射 -> 默认 -> 转换 -> 校验 -> 构造。

        参数：
            data: 外部输入（Mapping）。非 Mapping 时 strict=True 抛 TypeError，否则降级为空 dict。
            strict: True 则转换异常直接抛出；False 则记录日志并保留原值。
            log_errors: 是否记录警告日志。
        """
        logger = cls._logger()

        if not isinstance(data, Mapping):
            msg = f"from_dict 需要 Mapping，实际得到: {type(data).__name__}"
            if strict:
                raise TypeError(msg)
            if log_errors:
                logger.warning(msg)
            data = {}

        try:
            dc_names = {f.name for f in dataclasses.fields(cls)}
        except TypeError:
            raise TypeError(f"{cls.__name__} 必须使用 @dataclass 装饰")

        # 1) 字段映射（外键 -> 内部字段名），并检测冲突
        mapped: Dict[str, Any] = {}
        _seen_src: Dict[str, str] = {}
        for ext_key, val in data.items():
            internal = cls.FIELD_MAPPING.get(ext_key, ext_key)
            if internal in dc_names:
                if internal in mapped and log_errors:
                    logger.warning(
                        "字段映射冲突: %r 与 %r 都映射到 %r，后者覆盖前者",
                        _seen_src[internal], ext_key, internal,
                    )
                mapped[internal] = val
                _seen_src[internal] = ext_key

        # 2) 默认值展开
        defaults_expanded: Dict[str, Any] = {}
        for k, v in cls.DEFAULTS.items():
            defaults_expanded[k] = v() if callable(v) else copy.deepcopy(v)

        combined: Dict[str, Any] = {**defaults_expanded, **mapped}

        # 3) 字段级转换
        for key, fn in cls.CONVERTERS.items():
            if key in combined:
                try:
                    combined[key] = fn(combined[key])
                except Exception as e:
                    if strict:
                        raise
                    if log_errors:
                        logger.warning(
                            "字段转换失败 %s (%s): %s; 值片段=%r",
                            key, type(e).__name__, e, str(combined.get(key))[:120],
                        )

        # 4) 行级校验（异常即失败，交给上层处理）
        for validate in cls.VALIDATORS:
            try:
                validate(combined)
            except Exception as e:
                if log_errors:
                    vname = getattr(validate, "__name__", repr(validate))
                    logger.warning("行级校验失败 (%s): %s; 数据片段=%r", vname, e, str(combined)[:200])
                raise

        # 5) 构造 dataclass 实例（仅使用声明字段）
        slim = {k: v for k, v in combined.items() if k in dc_names}
        try:
            return cls(**slim)  # type: ignore[arg-type]
        except TypeError as e:
            if log_errors:
                missing = [f.name for f in dataclasses.fields(cls) if f.name not in slim]
                logger.warning("构造实例失败: %s; 缺失=%r", e, missing)
            raise

    def to_dict(self, *, drop_none: bool = False) -> Dict[str, Any]:
        """导出为 dict；drop_none=True 时剔除值为 None 的顶层字段。"""
        if not dataclasses.is_dataclass(self):
            raise TypeError(f"{type(self).__name__} 不是 dataclass，无法 asdict")
        d = dataclasses.asdict(self)
        if not drop_none:
            return d
        return {k: v for k, v in d.items() if v is not None}
