"""
核心响应格式配置文件
backend/app/core/responses.py
"""
from typing import Any, Optional
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """标准化错误响应模型（异常处理器统一返回）"""
    code: int
    message: str
    error_code: Optional[str] = None
    details: Optional[Any] = None
    request_id: Optional[str] = None
    timestamp: Optional[str] = None
