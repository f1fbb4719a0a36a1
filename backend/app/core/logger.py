"""
全局日志配置
backend/app/core/logger.py
从main.py拆分：request_id上下文、RequestIDFilter、init_global_logger
- 开发环境（local）：控制台+文件输出（可通过LOG_TO_FILE_FLAG关闭），按日期+级别拆分文件
- 其他环境：仅控制台输出
- 日志格式包含request_id、时区、模块、级别
"""
import logging
from contextvars import ContextVar
from datetime import datetime
from pathlib import Path
from typing import Optional

from app.core.config import settings, DEFAULT_TZ

# 请求ID上下文变量（HTTP中间件注入，日志过滤器读取）
request_id_ctx: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

LOG_FORMAT = "%(asctime)s | %(request_id)s | %(name)s | %(levelname)s | %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S %z"

LEVEL_FILE_NAMES = {
    logging.DEBUG: "debug",
    logging.INFO: "info",
    logging.WARNING: "warning",
    logging.ERROR: "error",
    logging.CRITICAL: "critical",
}


class RequestIDFilter(logging.Filter):
    """注入request_id到日志记录，调用方通过extra传入时保持原值"""

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "request_id", None):
            record.request_id = request_id_ctx.get() or "unknown"
        return True


def _build_formatter() -> logging.Formatter:
    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT)
    # 日志时间使用全局时区
    formatter.converter = lambda *args: datetime.now(DEFAULT_TZ).timetuple()
    return formatter


def init_global_logger() -> logging.Logger:
    """初始化根logger（重复调用直接返回）"""
    logger = logging.getLogger()
    if logger.handlers:
        return logger

    log_level = logging.DEBUG if settings.ENVIRONMENT == "local" else logging.INFO
    formatter = _build_formatter()

    # 第三方库日志统一走根处理器
    for logger_name in ["passlib", "uvicorn", "uvicorn.access", "uvicorn.error"]:
        third_logger = logging.getLogger(logger_name)
        third_logger.setLevel(log_level)
        third_logger.handlers.clear()
        third_logger.propagate = True

    # 1. 控制台处理器（始终保留）
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    stream_handler.setLevel(log_level)
    stream_handler.addFilter(RequestIDFilter())
    logger.addHandler(stream_handler)

    # 2. 文件处理器（仅local环境+开关开启）
    if settings.LOG_TO_FILE_FLAG and settings.ENVIRONMENT == "local":
        log_base_dir = Path(settings.LOG_DIR)
        log_base_dir.mkdir(parents=True, exist_ok=True)
        current_date = datetime.now(DEFAULT_TZ).strftime("%Y-%m-%d")
        for level, level_name in LEVEL_FILE_NAMES.items():
            file_handler = logging.FileHandler(
                filename=str(log_base_dir / f"app-{current_date}.{level_name}.log"),
                mode="a",
                encoding="utf-8"
            )
            # 只处理对应级别及以上日志
            file_handler.setLevel(level)
            file_handler.setFormatter(formatter)
            file_handler.addFilter(RequestIDFilter())
            logger.addHandler(file_handler)

    logger.setLevel(log_level)

    # SQLAlchemy日志仅ERROR级别
    logging.getLogger("sqlalchemy.engine").setLevel(logging.ERROR)

    return logger
