"""
项目模块数据访问层
backend/app/repositories/project_repository.py
列表查询的数据范围条件由 ProjectScopeFilter 生成，与关键词条件AND组合
项目成员按 project_code 关联，删除项目时同一事务内级联删除
"""
from sqlmodel import select
from sqlalchemy import delete, func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import sessionmaker
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional, List, AsyncGenerator, Tuple

from app.core.query_builder import create_project_query_builder
from app.models import Project, ProjectMember
from app.utils.data_scope import ProjectScope


class ProjectRepository:
    """项目Repo层：标准事务上下文实现"""
    def __init__(self, async_session_factory: sessionmaker):
        self.async_session_factory = async_session_factory

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[AsyncSession, None]:
        session: AsyncSession = self.async_session_factory()
        try:
            await session.begin()
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    # ------------------------------
    # 项目查询
    # ------------------------------
    async def get_by_id(self, project_id: Any) -> Optional[Project]:
        async with self.transaction() as session:
            stmt = select(Project).where(Project.id == project_id)
            result = await session.execute(stmt)
            return result.scalars().first()

    async def get_by_code(self, project_code: str) -> Optional[Project]:
        """按项目编码查询（编码唯一）"""
        async with self.transaction() as session:
            stmt = select(Project).where(Project.project_code == project_code)
            result = await session.execute(stmt)
            return result.scalars().first()

    async def page(self, scope: ProjectScope, user_code: str, search_key: Optional[str] = None,
                   offset: int = 0, limit: int = 10) -> Tuple[List[Project], int]:
        """
        按数据范围分页查询项目

        Args:
            scope: 当前用户合并后的数据范围
            user_code: 当前用户编码（owned范围下匹配经理/总监）
            search_key: 项目编码/名称模糊搜索
        """
        builder = (
            create_project_query_builder()
            .filter(data_scope=(scope, user_code), search_key=search_key)
            .paginate(offset, limit)
        )
        async with self.transaction() as session:
            records = await session.execute(builder.build_paginated(select(Project)))
            total = await session.execute(builder.build_count(select(Project)))
            return list(records.scalars().all()), total.scalar_one()

    async def list_participated(self, user_code: str) -> List[Project]:
        """用户参与的项目：作为成员或项目经理"""
        member_codes = select(ProjectMember.project_code).where(ProjectMember.user_code == user_code)
        async with self.transaction() as session:
            stmt = (
                select(Project)
                .where(or_(Project.project_code.in_(member_codes), Project.manager_user_code == user_code))
                .order_by(Project.create_time.desc())
            )
            result = await session.execute(stmt)
            return list(result.scalars().all())

    # ------------------------------
    # 项目写操作（需在事务内执行）
    # ------------------------------
    async def create(self, data: Dict[str, Any], session: AsyncSession) -> Project:
        db_project = Project(**data)
        session.add(db_project)
        await session.flush()
        await session.refresh(db_project)
        return db_project

    async def update(self, project_id: Any, data: Dict[str, Any], session: AsyncSession) -> Optional[Project]:
        stmt = select(Project).where(Project.id == project_id)
        project = (await session.execute(stmt)).scalars().first()
        if not project:
            return None
        for key, value in data.items():
            setattr(project, key, value)
        await session.flush()
        await session.refresh(project)
        return project

    async def delete(self, project_id: Any, session: AsyncSession) -> Optional[Project]:
        """删除项目及其成员，返回被删除的项目（不存在返回None）"""
        stmt = select(Project).where(Project.id == project_id)
        project = (await session.execute(stmt)).scalars().first()
        if not project:
            return None

        await session.execute(
            delete(ProjectMember).where(ProjectMember.project_code == project.project_code)
        )
        await session.delete(project)
        return project

    # ------------------------------
    # 项目成员
    # ------------------------------
    async def list_members(self, project_code: str) -> List[ProjectMember]:
        async with self.transaction() as session:
            stmt = (
                select(ProjectMember)
                .where(ProjectMember.project_code == project_code)
                .order_by(ProjectMember.join_date.asc(), ProjectMember.create_time.asc())
            )
            result = await session.execute(stmt)
            return list(result.scalars().all())

    async def get_member(self, project_code: str, user_code: str) -> Optional[ProjectMember]:
        async with self.transaction() as session:
            stmt = select(ProjectMember).where(
                ProjectMember.project_code == project_code,
                ProjectMember.user_code == user_code
            )
            result = await session.execute(stmt)
            return result.scalars().first()

    async def count_members(self, project_codes: List[str]) -> Dict[str, int]:
        """各项目成员数量（无成员的项目不出现在结果中）"""
        codes = [code for code in dict.fromkeys(project_codes) if code]
        if not codes:
            return {}
        async with self.transaction() as session:
            stmt = (
                select(ProjectMember.project_code, func.count())
                .where(ProjectMember.project_code.in_(codes))
                .group_by(ProjectMember.project_code)
            )
            result = await session.execute(stmt)
            return {code: count for code, count in result.all()}

    async def add_member(self, data: Dict[str, Any], session: AsyncSession) -> ProjectMember:
        db_member = ProjectMember(**data)
        session.add(db_member)
        await session.flush()
        await session.refresh(db_member)
        return db_member

    async def delete_member(self, member_id: Any, session: AsyncSession) -> bool:
        result = await session.execute(delete(ProjectMember).where(ProjectMember.id == member_id))
        return result.rowcount > 0
