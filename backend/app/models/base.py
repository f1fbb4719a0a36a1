"""
SQLAlchemy Declarative Base
backend/app/models/base.py
"""
import uuid
from typing import Iterable, List, Optional

from sqlalchemy import Column, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import declarative_base
from sqlalchemy.types import TypeDecorator

# 创建DeclarativeBase实例
Base = declarative_base()


# PostgreSQL UUID类型配置
def uuid_pk_column():
    """生成UUID主键列的辅助函数"""
    return Column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        unique=True,
        nullable=False
    )


def split_comma_list(value: Optional[str]) -> List[str]:
    """逗号分隔字符串 → 列表（去空白、去空项，保持原顺序）"""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def join_comma_list(values: Optional[Iterable[str]]) -> Optional[str]:
    """列表 → 逗号分隔字符串，规范化后为空则返回None"""
    if values is None:
        return None
    if isinstance(values, str):
        values = split_comma_list(values)
    items = [str(item).strip() for item in values if item and str(item).strip()]
    return ",".join(items) if items else None


class CommaSeparatedList(TypeDecorator):
    """
    多值字段类型：库中存逗号拼接字符串，模型层统一为List[str]
    用于 sys_user.role_name / sys_user.department_name / sys_role.data_scope
    """
    impl = String
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return join_comma_list(value)

    def process_result_value(self, value, dialect):
        return split_comma_list(value)

    def coerce_compared_value(self, op, value):
        # LIKE等字符串比较按原始字符串绑定
        if isinstance(value, str):
            return String()
        return self


__all__ = ['Base', 'uuid_pk_column', 'CommaSeparatedList', 'split_comma_list', 'join_comma_list']
