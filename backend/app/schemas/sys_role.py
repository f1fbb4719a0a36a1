"""
角色相关的Pydantic Schemas
backend/app/schemas/sys_role.py
data_scope：项目编码列表或["ALL"]，入参兼容逗号分隔字符串
"""
from pydantic import Field
from typing import Optional, List

from app.schemas.base import BaseSchema, TimestampSchema, IDSchema, CommaList


class RoleBase(BaseSchema):
    name: str = Field(..., description="角色名称", examples=["项目经理"])
    description: Optional[str] = Field(None, description="角色描述")
    data_scope: CommaList = Field(default_factory=list, description="数据范围（项目编码列表，ALL表示全部项目）")


class RoleCreate(RoleBase):
    permission_codes: Optional[List[str]] = Field(None, description="权限编码列表")


class RoleUpdate(BaseSchema):
    name: Optional[str] = None
    description: Optional[str] = None
    data_scope: Optional[CommaList] = None
    # 传入则整体替换角色权限，不传则保持不变
    permission_codes: Optional[List[str]] = None


class RoleOut(RoleBase, TimestampSchema, IDSchema):
    permission_codes: List[str] = Field(default_factory=list, description="角色拥有的权限编码")
