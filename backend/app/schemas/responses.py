"""
统一API响应模型
backend/app/schemas/responses.py
"""
import math
from typing import TypeVar, Generic, Optional, List
from pydantic import BaseModel, Field, computed_field
from datetime import datetime

T = TypeVar('T')


class ApiResponse(BaseModel, Generic[T]):
    """API统一响应格式"""
    code: str = Field(default="00000", description="响应代码")
    data: Optional[T] = Field(default=None, description="响应数据")
    msg: str = Field(default="操作成功", description="响应消息")
    timestamp: datetime = Field(default_factory=datetime.now, description="响应时间戳")

    class Config:
        json_encoders = {
            datetime: lambda v: v.strftime('%Y-%m-%d %H:%M:%S')
        }

    @classmethod
    def success(cls, data: T = None, msg: str = "操作成功") -> 'ApiResponse[T]':
        """成功响应快捷方法"""
        return cls(code=ResponseCode.SUCCESS, data=data, msg=msg)


class PageResult(BaseModel, Generic[T]):
    """分页结果：records + total + 当前页/页大小/总页数"""
    records: List[T] = Field(default_factory=list, description="当前页数据")
    total: int = Field(0, description="总记录数")
    current: int = Field(1, description="当前页码")
    size: int = Field(10, description="每页大小")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def pages(self) -> int:
        if self.size <= 0:
            return 0
        return math.ceil(self.total / self.size)

    @classmethod
    def empty(cls, current: int, size: int) -> 'PageResult[T]':
        return cls(records=[], total=0, current=current, size=size)


# 常用响应代码
class ResponseCode:
    SUCCESS = "00000"
    VALIDATION_ERROR = "10001"
    AUTH_ERROR = "20001"
    PERMISSION_DENIED = "20003"
    NOT_FOUND = "30001"
    INTERNAL_ERROR = "50000"
