"""
用户API端点
backend/app/api/v1/endpoints/users.py

设计原则：
1. 最小API逻辑：只处理HTTP相关逻辑
2. 依赖注入：通过依赖获取服务实例
3. 统一响应：所有接口返回ApiResponse
4. 错误处理：业务异常由全局处理器统一转换
"""
import uuid
from typing import Any, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Path, Query
from dependency_injector.wiring import inject

from app.api.deps import CurrentUser, PermissionPushServiceDep, UserServiceDep
from app.enums.sys_permissions import PermissionCode
from app.schemas.responses import ApiResponse
from app.schemas.sys_user import UserChangePassword, UserCreate, UserOut, UserResetPassword, UserUpdate
from app.utils.permission_checker import permission_checker
from app.utils.permission_decorators import permission

router = APIRouter(prefix="/users", tags=["users"])


# ============ 个人相关接口 ============
@router.get("/me", response_model=ApiResponse, summary="获取当前用户信息")
async def read_me(current_user: CurrentUser) -> Any:
    return ApiResponse.success(data=UserOut.model_validate(current_user))


@router.get(
    "/me/permissions",
    response_model=ApiResponse,
    summary="当前用户权限",
    description="返回当前用户的角色列表及聚合后的权限编码"
)
@inject
async def read_my_permissions(
        current_user: CurrentUser,
        user_service: UserServiceDep
) -> Any:
    return ApiResponse.success(data=await user_service.get_user_permissions(current_user))


@router.put("/me/password", response_model=ApiResponse, summary="修改个人密码")
@inject
async def change_my_password(
        password_in: UserChangePassword,
        current_user: CurrentUser,
        user_service: UserServiceDep
) -> Any:
    await user_service.change_password(current_user, password_in)
    return ApiResponse.success(msg="密码修改成功")


# ============ 基础CRUD操作 ============
@router.get("/list", response_model=ApiResponse, summary="用户分页列表")
@permission(code=PermissionCode.SYSTEM_USER.value, name="用户查询权限")
@inject
async def list_users(
        user_service: UserServiceDep,
        current: int = Query(1, ge=1, description="页码"),
        size: int = Query(10, ge=1, le=500, description="每页数量"),
        search_key: Optional[str] = Query(None, alias="searchKey", description="用户编码/姓名模糊搜索"),
        status: Optional[int] = Query(None, description="用户状态"),
        _=Depends(permission_checker(PermissionCode.SYSTEM_USER.value))
) -> Any:
    page = await user_service.list_users(current=current, size=size, search_key=search_key, status=status)
    return ApiResponse.success(data=page)


@router.get("/{id}", response_model=ApiResponse, summary="用户详情")
@permission(code=PermissionCode.SYSTEM_USER.value, name="用户查询权限")
@inject
async def get_user(
        user_service: UserServiceDep,
        id: uuid.UUID = Path(..., description="用户ID"),
        _=Depends(permission_checker(PermissionCode.SYSTEM_USER.value))
) -> Any:
    user = await user_service.get_user_by_id(id)
    return ApiResponse.success(data=UserOut.model_validate(user))


@router.post("", response_model=ApiResponse, summary="创建用户")
@permission(code=PermissionCode.USER_CREATE.value, name="用户创建权限")
@inject
async def create_user(
        user_in: UserCreate,
        current_user: CurrentUser,
        user_service: UserServiceDep,
        _=Depends(permission_checker(PermissionCode.USER_CREATE.value))
) -> Any:
    user = await user_service.create_user(user_in, operator=current_user.user_code)
    return ApiResponse.success(data=UserOut.model_validate(user), msg="创建成功")


@router.put("/{id}", response_model=ApiResponse, summary="更新用户")
@permission(code=PermissionCode.USER_EDIT.value, name="用户编辑权限")
@inject
async def update_user(
        user_update: UserUpdate,
        current_user: CurrentUser,
        background_tasks: BackgroundTasks,
        user_service: UserServiceDep,
        push_service: PermissionPushServiceDep,
        id: uuid.UUID = Path(..., description="用户ID"),
        _=Depends(permission_checker(PermissionCode.USER_EDIT.value))
) -> Any:
    user = await user_service.update_user(id, user_update, operator=current_user.user_code)

    # 角色变更后推送最新权限
    if user_update.role_name is not None:
        background_tasks.add_task(push_service.push_permissions_to_users, [user.user_code])

    return ApiResponse.success(data=UserOut.model_validate(user), msg="更新成功")


@router.put("/{id}/password", response_model=ApiResponse, summary="重置用户密码")
@permission(code=PermissionCode.USER_RESET_PASSWORD.value, name="重置密码权限")
@inject
async def reset_user_password(
        password_in: UserResetPassword,
        current_user: CurrentUser,
        user_service: UserServiceDep,
        id: uuid.UUID = Path(..., description="用户ID"),
        _=Depends(permission_checker(PermissionCode.USER_RESET_PASSWORD.value))
) -> Any:
    await user_service.reset_password(id, password_in, operator=current_user.user_code)
    return ApiResponse.success(msg="密码重置成功")


@router.delete("/{id}", response_model=ApiResponse, summary="删除用户")
@permission(code=PermissionCode.USER_DELETE.value, name="用户删除权限")
@inject
async def delete_user(
        user_service: UserServiceDep,
        id: uuid.UUID = Path(..., description="用户ID"),
        _=Depends(permission_checker(PermissionCode.USER_DELETE.value))
) -> Any:
    await user_service.delete_user(id)
    return ApiResponse.success(msg="删除成功")
