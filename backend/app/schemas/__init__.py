# 功能：统一导出所有Schema模型，对外提供一致的导入入口
# 文件相对项目根目录路径：backend/app/schemas/__init__.py
from app.schemas.base import BaseSchema, TimestampSchema, IDSchema, CommaList
from app.schemas.responses import ApiResponse, PageResult, ResponseCode
from app.schemas.sys_permission import (
    PermissionBase, PermissionCreate, PermissionUpdate, PermissionOut,
    PermissionTreeNode, PermissionPushData, PermissionPushMessage
)
from app.schemas.sys_role import RoleBase, RoleCreate, RoleUpdate, RoleOut
from app.schemas.sys_user import (
    UserBase, UserCreate, UserUpdate, UserOut, UserResetPassword, UserChangePassword,
    UserPermissions, Message, LoginRequest, RefreshTokenRequest, Token, LoginResult
)
from app.schemas.project import (
    ProjectBase, ProjectCreate, ProjectUpdate, ProjectOut, ProjectScopeOut, ProjectMemberCreate, ProjectMemberOut
)

__all__ = [
    # Base
    'BaseSchema', 'TimestampSchema', 'IDSchema', 'CommaList',

    # Responses
    'ApiResponse', 'PageResult', 'ResponseCode',

    # Permission
    'PermissionBase', 'PermissionCreate', 'PermissionUpdate', 'PermissionOut',
    'PermissionTreeNode', 'PermissionPushData', 'PermissionPushMessage',

    # Role
    'RoleBase', 'RoleCreate', 'RoleUpdate', 'RoleOut',

    # User
    'UserBase', 'UserCreate', 'UserUpdate', 'UserOut', 'UserResetPassword',
    'UserChangePassword', 'UserPermissions', 'Message',
    'LoginRequest', 'RefreshTokenRequest', 'Token', 'LoginResult',

    # Project
    'ProjectBase', 'ProjectCreate', 'ProjectUpdate', 'ProjectOut', 'ProjectScopeOut',
    'ProjectMemberCreate', 'ProjectMemberOut',
]
