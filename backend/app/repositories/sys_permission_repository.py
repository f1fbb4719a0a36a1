"""
权限模块数据访问层
backend/app/repositories/sys_permission_repository.py
树相关查询统一按 (sort ASC, create_time ASC) 排序
"""
import logging
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import sessionmaker
from sqlalchemy import select, delete, or_
from contextlib import asynccontextmanager
from typing import Any, Dict, Set, List, Optional, AsyncGenerator, Tuple

from app.core.query_builder import create_permission_query_builder
from app.models import SysPermission
from app.models.sys_permission import PERMISSION_TYPE_MENU, PERMISSION_STATUS_ENABLED

logger = logging.getLogger(__name__)

TREE_ORDER = (SysPermission.sort.asc(), SysPermission.create_time.asc())


class PermissionRepository:
    """权限Repo层：标准事务上下文实现"""
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
    async def get_by_id(self, perm_id: Any) -> Optional[SysPermission]:
        """按ID查询权限"""
        async with self.transaction() as session:
            stmt = select(SysPermission).where(SysPermission.id == perm_id)
            result = await session.execute(stmt)
            return result.scalars().first()

    async def get_by_code(self, code: str) -> Optional[SysPermission]:
        """按权限编码查询（编码唯一）"""
        async with self.transaction() as session:
            stmt = select(SysPermission).where(SysPermission.code == code)
            result = await session.execute(stmt)
            return result.scalars().first()

    async def get_existing_codes(self, codes: List[str]) -> Set[str]:
        """校验权限编码有效性，返回存在的编码集合"""
        if not codes:
            return set()

        async with self.transaction() as session:
            stmt = select(SysPermission.code).where(SysPermission.code.in_(codes))
            result = await session.execute(stmt)
            existing_codes = set(result.scalars().all())

        invalid_codes = set(codes) - existing_codes
        if invalid_codes:
            logger.warning(f"Invalid permission codes: {invalid_codes}")
        return existing_codes

    async def list_all(self) -> List[SysPermission]:
        """全部权限（不区分状态/类型），用于管理端权限树"""
        async with self.transaction() as session:
            stmt = select(SysPermission).order_by(*TREE_ORDER)
            result = await session.execute(stmt)
            return list(result.scalars().all())

    async def list_enabled_menus(self) -> List[SysPermission]:
        """启用的菜单权限，用于用户菜单树"""
        async with self.transaction() as session:
            stmt = (
                select(SysPermission)
                .where(
                    SysPermission.status == PERMISSION_STATUS_ENABLED,
                    SysPermission.type == PERMISSION_TYPE_MENU
                )
                .order_by(*TREE_ORDER)
            )
            result = await session.execute(stmt)
            return list(result.scalars().all())

    async def list_enabled_buttons(self) -> List[SysPermission]:
        """启用的非菜单权限（type不为menu或未设置），用于按钮权限"""
        async with self.transaction() as session:
            stmt = (
                select(SysPermission)
                .where(
                    SysPermission.status == PERMISSION_STATUS_ENABLED,
                    or_(SysPermission.type.is_(None), SysPermission.type != PERMISSION_TYPE_MENU)
                )
                .order_by(*TREE_ORDER)
            )
            result = await session.execute(stmt)
            return list(result.scalars().all())

    async def page(self, search_key: Optional[str] = None,
                   offset: int = 0, limit: int = 10) -> Tuple[List[SysPermission], int]:
        """分页查询（名称/编码模糊搜索，按创建时间倒序）"""
        builder = create_permission_query_builder().filter(search_key=search_key).paginate(offset, limit)
        async with self.transaction() as session:
            records = await session.execute(builder.build_paginated(select(SysPermission)))
            total = await session.execute(builder.build_count(select(SysPermission)))
            return list(records.scalars().all()), total.scalar_one()

    # ------------------------------
    # 写操作类方法（需在事务内执行）
    # ------------------------------
    async def create(self, data: Dict[str, Any], session: AsyncSession) -> SysPermission:
        db_perm = SysPermission(**data)
        session.add(db_perm)
        await session.flush()
        await session.refresh(db_perm)
        return db_perm

    async def update(self, perm_id: Any, data: Dict[str, Any], session: AsyncSession) -> Optional[SysPermission]:
        stmt = select(SysPermission).where(SysPermission.id == perm_id)
        perm = (await session.execute(stmt)).scalars().first()
        if not perm:
            return None
        for key, value in data.items():
            setattr(perm, key, value)
        await session.flush()
        await session.refresh(perm)
        return perm

    async def delete(self, perm_id: Any, session: AsyncSession) -> bool:
        result = await session.execute(delete(SysPermission).where(SysPermission.id == perm_id))
        return result.rowcount > 0
