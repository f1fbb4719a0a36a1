"""
base类
backend/app/schemas/base.py
接口字段统一camelCase输出，入参兼容camelCase/snake_case
"""
import uuid
from datetime import datetime
from typing import Annotated, Any, List, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict
from pydantic.alias_generators import to_camel

from app.models.base import split_comma_list


def _to_str_list(value: Any) -> Any:
    """逗号分隔字符串或列表 → 规范化列表"""
    if value is None:
        return []
    if isinstance(value, str):
        return split_comma_list(value)
    if isinstance(value, (list, tuple, set)):
        return [str(item).strip() for item in value if item is not None and str(item).strip()]
    return value


# 多值字段（角色名、部门名、数据范围）：兼容 "a,b" 与 ["a", "b"] 两种入参
CommaList = Annotated[List[str], BeforeValidator(_to_str_list)]


class BaseSchema(BaseModel):
    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )


class TimestampSchema(BaseSchema):
    create_time: Optional[datetime] = None
    update_time: Optional[datetime] = None


class IDSchema(BaseSchema):
    id: uuid.UUID
