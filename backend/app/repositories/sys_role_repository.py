"""
角色模块数据访问层
backend/app/repositories/sys_role_repository.py
角色权限通过 sys_role_permission(role_name, permission_code) 关联
"""
from sqlmodel import select
from sqlalchemy import delete, insert, update
from sqlalchemy.orm import sessionmaker
from sqlalchemy.ext.asyncio import AsyncSession
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional, List, AsyncGenerator, Tuple

from app.core.query_builder import create_role_query_builder
from app.models import SysRole, sys_role_permission


class RoleRepository:
    """角色Repo层：标准事务上下文实现"""
    def __init__(self, async_session_factory: sessionmaker):
        self.async_session_factory = async_session_factory

    # ------------------------------
    # 标准异步事务上下文
    # ------------------------------
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
    # 查询类方法
    # ------------------------------
    async def get_by_name(self, name: str) -> Optional[SysRole]:
        """按角色名称查询（名称唯一，用于创建校验）"""
        async with self.transaction() as session:
            stmt = select(SysRole).where(SysRole.name == name)
            result = await session.execute(stmt)
            return result.scalars().first()

    async def get_by_id(self, role_id: Any) -> Optional[SysRole]:
        async with self.transaction() as session:
            stmt = select(SysRole).where(SysRole.id == role_id)
            result = await session.execute(stmt)
            return result.scalars().first()

    async def page(self, search_key: Optional[str] = None,
                   offset: int = 0, limit: int = 10) -> Tuple[List[SysRole], int]:
        """分页查询角色列表（名称模糊搜索）"""
        builder = create_role_query_builder().filter(search_key=search_key).paginate(offset, limit)
        async with self.transaction() as session:
            records = await session.execute(builder.build_paginated(select(SysRole)))
            total = await session.execute(builder.build_count(select(SysRole)))
            return list(records.scalars().all()), total.scalar_one()

    async def get_permission_codes(self, role_name: str) -> List[str]:
        """角色已分配的权限编码"""
        async with self.transaction() as session:
            stmt = (
                select(sys_role_permission.c.permission_code)
                .where(sys_role_permission.c.role_name == role_name)
                .order_by(sys_role_permission.c.permission_code)
            )
            result = await session.execute(stmt)
            return list(result.scalars().all())

    # ------------------------------
    # 写操作类方法（需在事务内执行）
    # ------------------------------
    async def create(self, data: Dict[str, Any], permission_codes: Optional[List[str]],
                     session: AsyncSession) -> SysRole:
        """创建角色（含权限分配）"""
        db_role = SysRole(**data)
        session.add(db_role)
        await session.flush()

        if permission_codes:
            await self.assign_permissions(db_role.name, permission_codes, session)

        await session.refresh(db_role)
        return db_role

    async def assign_permissions(self, role_name: str, permission_codes: List[str], session: AsyncSession):
        """为角色分配权限（先清空再新增）"""
        # 1. 清空现有权限关联
        delete_stmt = delete(sys_role_permission).where(sys_role_permission.c.role_name == role_name)
        await session.execute(delete_stmt)

        # 2. 批量插入新权限关联（去重，保持顺序）
        codes = list(dict.fromkeys(code for code in permission_codes if code))
        if codes:
            insert_stmt = insert(sys_role_permission).values(
                [{"role_name": role_name, "permission_code": code} for code in codes]
            )
            await session.execute(insert_stmt)

    async def update(self, role_id: Any, data: Dict[str, Any], session: AsyncSession) -> Optional[SysRole]:
        """
        更新角色基础字段
        角色改名时，原名称下的权限关联同步迁移到新名称
        """
        stmt = select(SysRole).where(SysRole.id == role_id)
        role = (await session.execute(stmt)).scalars().first()
        if not role:
            return None

        old_name = role.name
        for key, value in data.items():
            setattr(role, key, value)
        await session.flush()

        if role.name != old_name:
            await session.execute(
                update(sys_role_permission)
                .where(sys_role_permission.c.role_name == old_name)
                .values(role_name=role.name)
            )

        await session.refresh(role)
        return role

    async def delete(self, role_id: Any, session: AsyncSession) -> Optional[SysRole]:
        """删除角色及其权限关联，返回被删除的角色（不存在返回None）"""
        stmt = select(SysRole).where(SysRole.id == role_id)
        role = (await session.execute(stmt)).scalars().first()
        if not role:
            return None

        await session.execute(
            delete(sys_role_permission).where(sys_role_permission.c.role_name == role.name)
        )
        await session.delete(role)
        return role
