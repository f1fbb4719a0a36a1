"""
登录接口文件
backend/app/api/v1/endpoints/login.py
登录返回令牌 + 用户信息 + 菜单权限树 + 按钮权限，刷新令牌存Redis并轮换
"""
from typing import Any

from fastapi import APIRouter
from dependency_injector.wiring import inject

from app.api.deps import AuthServiceDep, CurrentUser
from app.schemas.responses import ApiResponse
from app.schemas.sys_user import LoginRequest, RefreshTokenRequest, UserOut

router = APIRouter(prefix="/login", tags=["login"])


@router.post(
    "/access-token",
    response_model=ApiResponse,
    summary="用户登录",
    description="用户编码+密码登录，返回访问令牌、刷新令牌、用户信息及权限"
)
@inject
async def login_access_token(
        login_request: LoginRequest,
        auth_service: AuthServiceDep
) -> Any:
    result = await auth_service.login(login_request.user_code, login_request.password)
    return ApiResponse.success(data=result, msg="登录成功")


@router.post(
    "/refresh-token",
    response_model=ApiResponse,
    summary="刷新访问令牌",
    description="刷新令牌需与服务端保存的一致，成功后轮换刷新令牌"
)
@inject
async def refresh_token(
        refresh_request: RefreshTokenRequest,
        auth_service: AuthServiceDep
) -> Any:
    token = await auth_service.refresh(refresh_request.refresh_token)
    return ApiResponse.success(data=token)


@router.post("/logout", response_model=ApiResponse, summary="用户登出")
@inject
async def logout(
        current_user: CurrentUser,
        auth_service: AuthServiceDep
) -> Any:
    await auth_service.logout(current_user.user_code)
    return ApiResponse.success(msg="登出成功")


@router.post("/test-token", response_model=ApiResponse, summary="测试Token有效性")
async def test_token(current_user: CurrentUser) -> Any:
    return ApiResponse.success(data=UserOut.model_validate(current_user))
