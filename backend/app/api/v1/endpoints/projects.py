"""
项目API端点
backend/app/api/v1/endpoints/projects.py
列表按当前用户的数据范围过滤：ALL → 全部；指定项目编码 → IN；未配置 → 本人为经理/总监的项目
详情与成员列表同样校验数据范围，范围外按不存在处理
"""
import uuid
from typing import Any, Optional

from fastapi import APIRouter, Depends, Path, Query
from dependency_injector.wiring import inject

from app.api.deps import CurrentUser, ProjectServiceDep
from app.enums.sys_permissions import PermissionCode
from app.schemas.project import ProjectCreate, ProjectMemberCreate, ProjectUpdate
from app.schemas.responses import ApiResponse
from app.utils.permission_checker import permission_checker
from app.utils.permission_decorators import permission

router = APIRouter(prefix="/projects", tags=["projects"])


@router.get("/list", response_model=ApiResponse, summary="项目分页列表（按数据范围）")
@inject
async def list_projects(
        current_user: CurrentUser,
        project_service: ProjectServiceDep,
        current: int = Query(1, ge=1, description="页码"),
        size: int = Query(10, ge=1, le=500, description="每页数量"),
        search_key: Optional[str] = Query(None, alias="searchKey", description="项目编码/名称模糊搜索")
) -> Any:
    page = await project_service.list_projects(
        current_user.user_code, current=current, size=size, search_key=search_key
    )
    return ApiResponse.success(data=page)


@router.get("/data-scope", response_model=ApiResponse, summary="当前用户的项目数据范围")
@inject
async def get_data_scope(
        current_user: CurrentUser,
        project_service: ProjectServiceDep
) -> Any:
    return ApiResponse.success(data=await project_service.get_data_scope(current_user.user_code))


@router.post("", response_model=ApiResponse, summary="创建项目")
@permission(code=PermissionCode.PROJECT_CREATE.value, name="项目创建权限")
@inject
async def create_project(
        project_in: ProjectCreate,
        current_user: CurrentUser,
        project_service: ProjectServiceDep,
        _=Depends(permission_checker(PermissionCode.PROJECT_CREATE.value))
) -> Any:
    project = await project_service.create_project(project_in, operator=current_user.user_code)
    return ApiResponse.success(data=project, msg="创建成功")




@router.get("/my-projects", response_model=ApiResponse, summary="我参与的项目（成员或项目经理）")
@inject
async def get_my_projects(
        current_user: CurrentUser,
        project_service: ProjectServiceDep
) -> Any:
    return ApiResponse.success(data=await project_service.get_my_projects(current_user.user_code))


@router.get("/members", response_model=ApiResponse, summary="项目成员列表")
@inject
async def list_members(
        current_user: CurrentUser,
        project_service: ProjectServiceDep,
        project_code: str = Query(..., alias="projectCode", description="项目编码")
) -> Any:
    members = await project_service.list_members(project_code, user_code=current_user.user_code)
    return ApiResponse.success(data=members)


@router.post("/members", response_model=ApiResponse, summary="添加项目成员")
@permission(code=PermissionCode.PROJECT_MEMBER.value, name="项目成员管理权限")
@inject
async def add_member(
        member_in: ProjectMemberCreate,
        current_user: CurrentUser,
        project_service: ProjectServiceDep,
        _=Depends(permission_checker(PermissionCode.PROJECT_MEMBER.value))
) -> Any:
    member = await project_service.add_member(member_in, operator=current_user.user_code)
    return ApiResponse.success(data=member, msg="添加成功")


@router.delete("/members/{member_id}", response_model=ApiResponse, summary="移除项目成员")
@permission(code=PermissionCode.PROJECT_MEMBER.value, name="项目成员管理权限")
@inject
async def remove_member(
        project_service: ProjectServiceDep,
        member_id: uuid.UUID = Path(..., description="项目成员ID"),
        _=Depends(permission_checker(PermissionCode.PROJECT_MEMBER.value))
) -> Any:
    await project_service.remove_member(member_id)
    return ApiResponse.success(msg="移除成功")


@router.get("/{id}", response_model=ApiResponse, summary="项目详情（按数据范围）")
@inject
async def get_project(
        current_user: CurrentUser,
        project_service: ProjectServiceDep,
        id: uuid.UUID = Path(..., description="项目ID")
) -> Any:
    return ApiResponse.success(data=await project_service.get_project(id, user_code=current_user.user_code))


@router.put("/{id}", response_model=ApiResponse, summary="更新项目")
@permission(code=PermissionCode.PROJECT_EDIT.value, name="项目编辑权限")
@inject
async def update_project(
        project_update: ProjectUpdate,
        current_user: CurrentUser,
        project_service: ProjectServiceDep,
        id: uuid.UUID = Path(..., description="项目ID"),
        _=Depends(permission_checker(PermissionCode.PROJECT_EDIT.value))
) -> Any:
    project = await project_service.update_project(id, project_update, operator=current_user.user_code)
    return ApiResponse.success(data=project, msg="更新成功")


@router.delete("/{id}", response_model=ApiResponse, summary="删除项目（级联删除成员）")
@permission(code=PermissionCode.PROJECT_DELETE.value, name="项目删除权限")
@inject
async def delete_project(
        project_service: ProjectServiceDep,
        id: uuid.UUID = Path(..., description="项目ID"),
        _=Depends(permission_checker(PermissionCode.PROJECT_DELETE.value))
) -> Any:
    await project_service.delete_project(id)
    return ApiResponse.success(msg="删除成功")
