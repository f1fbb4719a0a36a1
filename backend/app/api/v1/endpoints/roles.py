"""
角色API端点
backend/app/api/v1/endpoints/roles.py
角色权限变更后，后台推送最新权限给持有该角色的在线用户
"""
import uuid
from typing import Any, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Path, Query
from dependency_injector.wiring import inject

from app.api.deps import CurrentUser, PermissionPushServiceDep, RoleServiceDep
from app.enums.sys_permissions import PermissionCode
from app.schemas.responses import ApiResponse
from app.schemas.sys_role import RoleCreate, RoleUpdate
from app.utils.permission_checker import permission_checker
from app.utils.permission_decorators import permission

router = APIRouter(prefix="/roles", tags=["roles"])


@router.get("/list", response_model=ApiResponse, summary="角色分页列表")
@permission(code=PermissionCode.SYSTEM_ROLE.value, name="角色查询权限")
@inject
async def list_roles(
        role_service: RoleServiceDep,
        current: int = Query(1, ge=1, description="页码"),
        size: int = Query(10, ge=1, le=500, description="每页数量"),
        search_key: Optional[str] = Query(None, alias="searchKey", description="角色名称模糊搜索"),
        _=Depends(permission_checker(PermissionCode.SYSTEM_ROLE.value))
) -> Any:
    page = await role_service.list_roles(current=current, size=size, search_key=search_key)
    return ApiResponse.success(data=page)


@router.get("/permissions/{role_name}", response_model=ApiResponse, summary="角色权限编码列表")
@permission(code=PermissionCode.SYSTEM_ROLE.value, name="角色查询权限")
@inject
async def get_role_permissions(
        role_service: RoleServiceDep,
        role_name: str = Path(..., description="角色名称"),
        _=Depends(permission_checker(PermissionCode.SYSTEM_ROLE.value))
) -> Any:
    return ApiResponse.success(data=await role_service.get_permissions_by_role_name(role_name))


@router.get("/{id}", response_model=ApiResponse, summary="角色详情")
@permission(code=PermissionCode.SYSTEM_ROLE.value, name="角色查询权限")
@inject
async def get_role(
        role_service: RoleServiceDep,
        id: uuid.UUID = Path(..., description="角色ID"),
        _=Depends(permission_checker(PermissionCode.SYSTEM_ROLE.value))
) -> Any:
    return ApiResponse.success(data=await role_service.get_role_detail(id))


@router.post("", response_model=ApiResponse, summary="创建角色")
@permission(code=PermissionCode.ROLE_CREATE.value, name="角色创建权限")
@inject
async def create_role(
        role_in: RoleCreate,
        current_user: CurrentUser,
        role_service: RoleServiceDep,
        _=Depends(permission_checker(PermissionCode.ROLE_CREATE.value))
) -> Any:
    role = await role_service.create_role(role_in, operator=current_user.user_code)
    return ApiResponse.success(data=role, msg="创建成功")


@router.put("/{id}", response_model=ApiResponse, summary="更新角色")
@permission(code=PermissionCode.ROLE_EDIT.value, name="角色编辑权限")
@inject
async def update_role(
        role_update: RoleUpdate,
        current_user: CurrentUser,
        background_tasks: BackgroundTasks,
        role_service: RoleServiceDep,
        push_service: PermissionPushServiceDep,
        id: uuid.UUID = Path(..., description="角色ID"),
        _=Depends(permission_checker(PermissionCode.ROLE_EDIT.value))
) -> Any:
    role = await role_service.update_role(id, role_update, operator=current_user.user_code)

    # 权限替换或改名后推送（改名时用户角色名已同步为新名称）
    if role_update.permission_codes is not None or role_update.name is not None:
        user_codes = await role_service.get_affected_user_codes(role.name)
        background_tasks.add_task(push_service.push_permissions_to_users, user_codes)

    return ApiResponse.success(data=role, msg="更新成功")


@router.delete("/{id}", response_model=ApiResponse, summary="删除角色")
@permission(code=PermissionCode.ROLE_DELETE.value, name="角色删除权限")
@inject
async def delete_role(
        background_tasks: BackgroundTasks,
        role_service: RoleServiceDep,
        push_service: PermissionPushServiceDep,
        id: uuid.UUID = Path(..., description="角色ID"),
        _=Depends(permission_checker(PermissionCode.ROLE_DELETE.value))
) -> Any:
    role = await role_service.delete_role(id)

    user_codes = await role_service.get_affected_user_codes(role.name)
    background_tasks.add_task(push_service.push_permissions_to_users, user_codes)

    return ApiResponse.success(msg="删除成功")
