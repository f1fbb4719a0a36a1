"""
权限相关的Pydantic Schemas
backend/app/schemas/sys_permission.py
PermissionTreeNode.children 仅在非空时出现在序列化结果中（叶子节点无children键）
"""
from typing import Optional, List

from pydantic import Field, model_serializer

from app.schemas.base import BaseSchema, TimestampSchema, IDSchema


class PermissionBase(BaseSchema):
    name: str = Field(..., description="权限名称", examples=["用户管理"])
    menu_name: Optional[str] = Field(None, description="菜单显示名称")
    code: str = Field(..., description="权限编码", examples=["system:user"])
    module: Optional[str] = Field("", description="所属模块", examples=["system"])
    parent_code: Optional[str] = Field(None, description="父级权限编码，空表示根节点")
    type: Optional[str] = Field("menu", description="权限类型(menu-菜单 button-按钮)")
    path: Optional[str] = Field(None, description="路由地址")
    icon: Optional[str] = Field(None, description="菜单图标")
    component: Optional[str] = Field(None, description="前端组件路径")
    sort: Optional[int] = Field(0, description="显示顺序")
    description: Optional[str] = Field("", description="权限描述")
    status: Optional[int] = Field(1, description="权限状态(1-正常 0-停用)")


class PermissionCreate(PermissionBase):
    pass


class PermissionUpdate(BaseSchema):
    name: Optional[str] = None
    menu_name: Optional[str] = None
    module: Optional[str] = None
    parent_code: Optional[str] = None
    type: Optional[str] = None
    path: Optional[str] = None
    icon: Optional[str] = None
    component: Optional[str] = None
    sort: Optional[int] = None
    description: Optional[str] = None
    status: Optional[int] = None


class PermissionOut(PermissionBase, TimestampSchema, IDSchema):
    pass


class PermissionTreeNode(PermissionOut):
    children: Optional[List["PermissionTreeNode"]] = None

    @model_serializer(mode="wrap")
    def _omit_empty_children(self, handler):
        data = handler(self)
        if not self.children:
            data.pop("children", None)
        return data


class PermissionPushData(BaseSchema):
    """权限变更推送内容"""
    permissions: List[PermissionTreeNode] = Field(default_factory=list, description="用户菜单权限树")
    button_permissions: List[str] = Field(default_factory=list, description="按钮权限编码")
    timestamp: int = Field(..., description="推送时间（毫秒）")


class PermissionPushMessage(BaseSchema):
    """WebSocket推送消息"""
    event: str = Field("permission:updated", description="事件名")
    data: PermissionPushData


PermissionTreeNode.model_rebuild()
