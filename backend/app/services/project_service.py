"""
项目模块业务层
backend/app/services/project_service.py
项目列表、详情、成员列表均按当前用户的数据范围过滤
"""
import logging
from typing import Any, Dict, List, Optional

from app.core.exceptions import BadRequest, ErrorCode, ResourceNotFound
from app.models import Project
from app.repositories.project_repository import ProjectRepository
from app.repositories.sys_user_repository import UserRepository
from app.schemas.project import (
    ProjectCreate, ProjectMemberCreate, ProjectMemberOut, ProjectOut, ProjectScopeOut, ProjectUpdate
)
from app.schemas.responses import PageResult
from app.services.sys_data_scope_service import DataScopeService

logger = logging.getLogger(__name__)


class ProjectService:
    def __init__(self, project_repository: ProjectRepository,
                 user_repository: UserRepository,
                 data_scope_service: DataScopeService):
        self.project_repository = project_repository
        self.user_repository = user_repository
        self.data_scope_service = data_scope_service

    async def _fill_user_names(self, projects: List[Project]) -> List[ProjectOut]:
        """回填项目经理/总监姓名与成员数量"""
        user_codes = []
        for project in projects:
            user_codes.extend([project.manager_user_code, project.director_user_code])
        users = await self.user_repository.get_by_user_codes(user_codes)
        names: Dict[str, str] = {user.user_code: user.user_name for user in users}
        member_counts = await self.project_repository.count_members([p.project_code for p in projects])

        result = []
        for project in projects:
            project_out = ProjectOut.model_validate(project)
            project_out.manager_user_name = names.get(project.manager_user_code)
            project_out.director_user_name = names.get(project.director_user_code)
            project_out.member_count = member_counts.get(project.project_code, 0)
            result.append(project_out)
        return result

    async def _check_manager(self, manager_user_code: str) -> None:
        manager = await self.user_repository.get_by_user_code(manager_user_code)
        if not manager:
            raise ResourceNotFound(
                detail=f"Manager '{manager_user_code}' not found",
                error_code=ErrorCode.MANAGER_NOT_FOUND
            )

    async def _get_visible_project(self, project: Optional[Project], user_code: Optional[str],
                                   lookup: Any) -> Project:
        """项目不存在或不在当前用户数据范围内，统一按不存在处理"""
        if project is not None and user_code is not None:
            scope = await self.data_scope_service.resolve_project_filter(user_code)
            if not scope.permits(project.project_code, project.manager_user_code,
                                 project.director_user_code, user_code):
                project = None
        if project is None:
            raise ResourceNotFound(
                detail=f"Project '{lookup}' not found",
                error_code=ErrorCode.PROJECT_NOT_FOUND
            )
        return project

    # ------------------------------
    # 查询
    # ------------------------------
    async def list_projects(self, user_code: Optional[str], current: int = 1, size: int = 10,
                            search_key: Optional[str] = None) -> PageResult[ProjectOut]:
        """
        数据范围内的项目分页列表
        无当前用户时返回空页
        """
        if not user_code:
            return PageResult[ProjectOut].empty(current, size)

        scope = await self.data_scope_service.resolve_project_filter(user_code)
        records, total = await self.project_repository.page(
            scope=scope,
            user_code=user_code,
            search_key=search_key,
            offset=(current - 1) * size,
            limit=size
        )
        return PageResult[ProjectOut](
            records=await self._fill_user_names(records),
            total=total,
            current=current,
            size=size
        )

    async def get_data_scope(self, user_code: str) -> ProjectScopeOut:
        scope = await self.data_scope_service.resolve_project_filter(user_code)
        return ProjectScopeOut(kind=scope.kind.value, project_codes=list(scope.project_codes))

    async def get_project(self, project_id: Any, user_code: Optional[str] = None) -> ProjectOut:
        """项目详情；传入user_code时校验数据范围"""
        project = await self.project_repository.get_by_id(project_id)
        project = await self._get_visible_project(project, user_code, project_id)
        return (await self._fill_user_names([project]))[0]

    async def get_my_projects(self, user_code: Optional[str]) -> List[ProjectOut]:
        """当前用户参与的项目（成员或项目经理），不受数据范围限制"""
        if not user_code:
            return []
        projects = await self.project_repository.list_participated(user_code)
        return await self._fill_user_names(projects)

    # ------------------------------
    # 写操作
    # ------------------------------
    async def create_project(self, project_in: ProjectCreate, operator: Optional[str] = None) -> ProjectOut:
        """创建项目：编码唯一，项目经理必须存在"""
        existing = await self.project_repository.get_by_code(project_in.project_code)
        if existing:
            raise BadRequest(
                detail=f"Project code '{project_in.project_code}' already exists",
                error_code=ErrorCode.PROJECT_CODE_EXISTS
            )

        await self._check_manager(project_in.manager_user_code)

        data = project_in.model_dump()
        data.update(create_by=operator, update_by=operator)
        async with self.project_repository.transaction() as session:
            project = await self.project_repository.create(data=data, session=session)

        logger.info(f"Project created: {project.project_code}")
        return (await self._fill_user_names([project]))[0]

    async def update_project(self, project_id: Any, project_update: ProjectUpdate,
                             operator: Optional[str] = None) -> ProjectOut:
        """更新项目（更换项目经理时校验经理存在）"""
        update_data = project_update.model_dump(exclude_unset=True)
        if update_data.get("manager_user_code"):
            await self._check_manager(update_data["manager_user_code"])

        update_data["update_by"] = operator
        async with self.project_repository.transaction() as session:
            project = await self.project_repository.update(project_id=project_id, data=update_data, session=session)
        if project is None:
            raise ResourceNotFound(
                detail=f"Project '{project_id}' not found",
                error_code=ErrorCode.PROJECT_NOT_FOUND
            )

        logger.info(f"Project updated: {project.project_code}")
        return (await self._fill_user_names([project]))[0]

    async def delete_project(self, project_id: Any) -> Project:
        """删除项目（同一事务内级联删除项目成员）"""
        async with self.project_repository.transaction() as session:
            project = await self.project_repository.delete(project_id=project_id, session=session)
        if project is None:
            raise ResourceNotFound(
                detail=f"Project '{project_id}' not found",
                error_code=ErrorCode.PROJECT_NOT_FOUND
            )
        logger.info(f"Project deleted: {project.project_code}")
        return project

    # ------------------------------
    # 项目成员
    # ------------------------------
    async def list_members(self, project_code: str, user_code: Optional[str] = None) -> List[ProjectMemberOut]:
        """项目成员列表（按加入日期升序），回填成员姓名与邮箱"""
        project = await self.project_repository.get_by_code(project_code)
        await self._get_visible_project(project, user_code, project_code)

        members = await self.project_repository.list_members(project_code)
        users = await self.user_repository.get_by_user_codes([member.user_code for member in members])
        user_map = {user.user_code: user for user in users}

        result = []
        for member in members:
            member_out = ProjectMemberOut.model_validate(member)
            user = user_map.get(member.user_code)
            if user:
                member_out.user_name = user.user_name
                member_out.email = user.email
            result.append(member_out)
        return result

    async def add_member(self, member_in: ProjectMemberCreate, operator: Optional[str] = None) -> ProjectMemberOut:
        """添加项目成员：项目与用户必须存在，同一项目内不可重复"""
        project = await self.project_repository.get_by_code(member_in.project_code)
        if not project:
            raise ResourceNotFound(
                detail=f"Project '{member_in.project_code}' not found",
                error_code=ErrorCode.PROJECT_NOT_FOUND
            )

        user = await self.user_repository.get_by_user_code(member_in.user_code)
        if not user:
            raise ResourceNotFound(
                detail=f"User '{member_in.user_code}' not found",
                error_code=ErrorCode.USER_NOT_FOUND
            )

        existing = await self.project_repository.get_member(member_in.project_code, member_in.user_code)
        if existing:
            raise BadRequest(
                detail=f"User '{member_in.user_code}' is already a member of '{member_in.project_code}'",
                error_code=ErrorCode.MEMBER_EXISTS
            )

        data = member_in.model_dump()
        data.update(create_by=operator, update_by=operator)
        async with self.project_repository.transaction() as session:
            member = await self.project_repository.add_member(data=data, session=session)

        logger.info(f"Member {member.user_code} added to project {member.project_code}")
        member_out = ProjectMemberOut.model_validate(member)
        member_out.user_name = user.user_name
        member_out.email = user.email
        return member_out

    async def remove_member(self, member_id: Any) -> None:
        async with self.project_repository.transaction() as session:
            success = await self.project_repository.delete_member(member_id=member_id, session=session)
        if not success:
            raise ResourceNotFound(
                detail=f"Project member '{member_id}' not found",
                error_code=ErrorCode.MEMBER_NOT_FOUND
            )
