"""
权限API端点
backend/app/api/v1/endpoints/permissions.py
"""
import uuid
from typing import Any, Optional

from fastapi import APIRouter, Depends, Path, Query
from dependency_injector.wiring import inject

from app.api.deps import CurrentUser, PermissionServiceDep
from app.enums.sys_permissions import PermissionCode
from app.schemas.responses import ApiResponse
from app.schemas.sys_permission import PermissionCreate, PermissionOut, PermissionUpdate
from app.utils.permission_checker import get_current_user_permissions, permission_checker
from app.utils.permission_decorators import permission

router = APIRouter(prefix="/permissions", tags=["permissions"])


# ============ 当前用户权限 ============
@router.get(
    "/user-menu",
    response_model=ApiResponse,
    summary="当前用户菜单树",
    description="授权菜单 + 祖先补齐后的树，叶子节点不含children字段"
)
@inject
async def get_user_menu(
        permission_service: PermissionServiceDep,
        permission_codes: list = Depends(get_current_user_permissions)
) -> Any:
    tree = await permission_service.get_user_permission_tree(permission_codes)
    return ApiResponse.success(data=tree)


@router.get("/user-buttons", response_model=ApiResponse, summary="当前用户按钮权限")
@inject
async def get_user_buttons(
        permission_service: PermissionServiceDep,
        permission_codes: list = Depends(get_current_user_permissions)
) -> Any:
    buttons = await permission_service.get_user_button_permissions(permission_codes)
    return ApiResponse.success(data=buttons)


# ============ 权限树 ============
@router.get("/tree", response_model=ApiResponse, summary="完整权限树")
@permission(code=PermissionCode.SYSTEM_PERMISSION.value, name="权限查询权限")
@inject
async def get_permission_tree(
        permission_service: PermissionServiceDep,
        _=Depends(permission_checker(PermissionCode.SYSTEM_PERMISSION.value))
) -> Any:
    return ApiResponse.success(data=await permission_service.get_permission_tree())


@router.get("/subtree", response_model=ApiResponse, summary="指定节点下的权限子树")
@permission(code=PermissionCode.SYSTEM_PERMISSION.value, name="权限查询权限")
@inject
async def get_permission_sub_tree(
        permission_service: PermissionServiceDep,
        parent_code: str = Query(..., alias="parentCode", description="父节点权限编码"),
        _=Depends(permission_checker(PermissionCode.SYSTEM_PERMISSION.value))
) -> Any:
    return ApiResponse.success(data=await permission_service.get_permission_sub_tree(parent_code))


# ============ 基础CRUD ============
@router.get("/list", response_model=ApiResponse, summary="权限分页列表")
@permission(code=PermissionCode.SYSTEM_PERMISSION.value, name="权限查询权限")
@inject
async def list_permissions(
        permission_service: PermissionServiceDep,
        current: int = Query(1, ge=1, description="页码"),
        size: int = Query(10, ge=1, le=500, description="每页数量"),
        search_key: Optional[str] = Query(None, alias="searchKey", description="名称/编码模糊搜索"),
        _=Depends(permission_checker(PermissionCode.SYSTEM_PERMISSION.value))
) -> Any:
    page = await permission_service.list_permissions(current=current, size=size, search_key=search_key)
    return ApiResponse.success(data=page)


@router.post("", response_model=ApiResponse, summary="创建权限")
@permission(code=PermissionCode.PERMISSION_CREATE.value, name="权限创建权限")
@inject
async def create_permission(
        perm_in: PermissionCreate,
        current_user: CurrentUser,
        permission_service: PermissionServiceDep,
        _=Depends(permission_checker(PermissionCode.PERMISSION_CREATE.value))
) -> Any:
    perm = await permission_service.create_permission(perm_in, operator=current_user.user_code)
    return ApiResponse.success(data=PermissionOut.model_validate(perm), msg="创建成功")


@router.get("/{id}", response_model=ApiResponse, summary="权限详情")
@permission(code=PermissionCode.SYSTEM_PERMISSION.value, name="权限查询权限")
@inject
async def get_permission(
        permission_service: PermissionServiceDep,
        id: uuid.UUID = Path(..., description="权限ID"),
        _=Depends(permission_checker(PermissionCode.SYSTEM_PERMISSION.value))
) -> Any:
    perm = await permission_service.get_permission_by_id(id)
    return ApiResponse.success(data=PermissionOut.model_validate(perm))


@router.put("/{id}", response_model=ApiResponse, summary="更新权限")
@permission(code=PermissionCode.PERMISSION_EDIT.value, name="权限编辑权限")
@inject
async def update_permission(
        perm_update: PermissionUpdate,
        current_user: CurrentUser,
        permission_service: PermissionServiceDep,
        id: uuid.UUID = Path(..., description="权限ID"),
        _=Depends(permission_checker(PermissionCode.PERMISSION_EDIT.value))
) -> Any:
    perm = await permission_service.update_permission(id, perm_update, operator=current_user.user_code)
    return ApiResponse.success(data=PermissionOut.model_validate(perm), msg="更新成功")


@router.delete("/{id}", response_model=ApiResponse, summary="删除权限")
@permission(code=PermissionCode.PERMISSION_DELETE.value, name="权限删除权限")
@inject
async def delete_permission(
        permission_service: PermissionServiceDep,
        id: uuid.UUID = Path(..., description="权限ID"),
        _=Depends(permission_checker(PermissionCode.PERMISSION_DELETE.value))
) -> Any:
    await permission_service.delete_permission(id)
    return ApiResponse.success(msg="删除成功")
