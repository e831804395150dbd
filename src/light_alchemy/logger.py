"""
测光日志
引擎、批处理与 CLI 共用同一个 Logger，输出可以是 print、回调函数或队列
"""
from typing import Optional, Any


class Logger:
    """带来源标识的分级日志"""

    LEVELS = ("DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR")

    def __init__(self, log_target: Optional[Any] = None, source_id: Optional[str] = None, verbose: bool = False):
        """
        Args:
            log_target: 输出目标
                       - None: print 到控制台
                       - 带 put() 的队列: 放入 {'id', 'msg', 'level'} 字典
                       - 可调用对象: 以格式化后的文本调用（CLI 传入 click.echo）
            source_id: 来源标识（帧文件名、相机名等），作为消息前缀
            verbose: 是否输出 DEBUG 级别的逐帧细节
        """
        self.log_target = log_target
        self.source_id = source_id
        self.verbose = verbose

    def log(self, message: str, level: str = "INFO"):
        if level not in self.LEVELS:
            raise ValueError(f"Unknown log level: {level}")
        if level == "DEBUG" and not self.verbose:
            return

        target = self.log_target
        if hasattr(target, 'put'):
            # 队列消费方自行决定展示方式，不加前缀
            target.put({'id': self.source_id, 'msg': message, 'level': level})
        elif callable(target):
            target(self._prefixed(message))
        else:
            print(self._prefixed(message))

    def _prefixed(self, message: str) -> str:
        if self.source_id:
            return f"[{self.source_id}] {message}"
        return message

    def bind(self, source_id: Optional[str]) -> "Logger":
        """同一输出目标、不同来源标识的子日志"""
        return Logger(self.log_target, source_id, self.verbose)

    def debug(self, message: str):
        self.log(message, "DEBUG")

    def info(self, message: str):
        self.log(message, "INFO")

    def success(self, message: str):
        self.log(message, "SUCCESS")

    def warning(self, message: str):
        self.log(message, "WARNING")

    def error(self, message: str):
        self.log(message, "ERROR")


def create_logger(log_target: Optional[Any] = None, source_id: Optional[str] = None, verbose: bool = False) -> Logger:
    """按输出目标创建 Logger"""
    return Logger(log_target, source_id, verbose)
