import logging
import os
from logging.handlers import TimedRotatingFileHandler

# 统一格式：时间 | logger 名 | 级别 | [文件:行 函数] | 线程 | 消息
LOG_FORMAT = (
    "%(asctime)s | %(name)s | %(levelname)s | "
    "[%(filename)s:%(lineno)d %(funcName)s] | %(threadName)s | %(message)s"
)


class BaseLogger:
    """
    基础日志类：
    - 控制台 + 按天轮转文件输出
    - logger 名默认取 "axevent"，各模块用 "axevent.xxx" 各自命名
    - 同名 logger 只配置一次 handler，避免重复输出
    """

    def __init__(
        self,
        name: str | None = None,
        level: int | str = logging.INFO,
        to_file: bool = False,
        file_path: str | None = None,
        file_level: int | str = logging.ERROR,
    ):
        """
        :param name: logger 名称（默认 "axevent"）
        :param level: 控制台日志级别，可传 int 或 "DEBUG" 这类字符串
        :param to_file: 是否启用文件日志
        :param file_path: 日志文件路径（可选，默认 <项目根>/logs/<name>.log）
        :param file_level: 文件日志的最低级别（默认 ERROR）
        """
        self.logger = logging.getLogger(name or "axevent")
        self.logger.setLevel(self._to_level(level))
        self.logger.propagate = False

        if not self.logger.handlers:
            formatter = logging.Formatter(LOG_FORMAT)

            ch = logging.StreamHandler()
            ch.setLevel(self._to_level(level))
            ch.setFormatter(formatter)
            self.logger.addHandler(ch)

            if to_file:
                if file_path is None:
                    project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
                    log_dir = os.path.join(project_root, "logs")
                    os.makedirs(log_dir, exist_ok=True)
                    file_path = os.path.join(log_dir, f"{self.logger.name}.log")

                fh = TimedRotatingFileHandler(
                    filename=file_path,
                    when="midnight",
                    interval=1,
                    backupCount=7,
                    encoding="utf-8",
                )
                fh.setLevel(self._to_level(file_level))
                fh.setFormatter(formatter)
                self.logger.addHandler(fh)

    @staticmethod
    def _to_level(level: int | str) -> int:
        """把 "debug"/"INFO" 等字符串转成 logging 常量；未知字符串回落为 INFO。"""
        if isinstance(level, int):
            return level
        value = logging.getLevelName(str(level).upper())
        return value if isinstance(value, int) else logging.INFO

