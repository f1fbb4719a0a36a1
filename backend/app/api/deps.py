"""
API 依赖项配置文件
backend/app/api/deps.py
"""
from typing import Annotated

from fastapi import Depends
from dependency_injector.wiring import inject, Provide

from app.di.container import Container
from app.core.security import reusable_oauth2
from app.models import SysUser
from app.services.sys_auth_service import AuthService
from app.services.sys_permission_service import PermissionService
from app.services.sys_role_service import RoleService
from app.services.sys_user_service import UserService
from app.services.project_service import ProjectService
from app.services.permission_push_service import PermissionPushService


# ------------------------------
# 认证依赖：获取当前用户（OAuth2 Bearer）
# ------------------------------
@inject
async def get_current_user(
    token: str = Depends(reusable_oauth2),
    auth_service: AuthService = Depends(Provide[Container.auth_service])
) -> SysUser:
    """从访问令牌中解析用户，令牌无效/用户禁用时抛出401"""
    return await auth_service.get_current_user(token)


# ------------------------------
# 类型别名（简化API层代码）
# ------------------------------
CurrentUser = Annotated[SysUser, Depends(get_current_user)]

AuthServiceDep = Annotated[AuthService, Depends(Provide[Container.auth_service])]
UserServiceDep = Annotated[UserService, Depends(Provide[Container.user_service])]
RoleServiceDep = Annotated[RoleService, Depends(Provide[Container.role_service])]
PermissionServiceDep = Annotated[PermissionService, Depends(Provide[Container.permission_service])]
ProjectServiceDep = Annotated[ProjectService, Depends(Provide[Container.project_service])]
PermissionPushServiceDep = Annotated[PermissionPushService, Depends(Provide[Container.permission_push_service])]
