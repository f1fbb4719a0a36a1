"""
用户模块数据访问层
backend/app/repositories/sys_user_repository.py
"""
from sqlmodel import select
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import sessionmaker
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional, List, AsyncGenerator, Tuple

from app.core.query_builder import create_user_query_builder
from app.models import SysUser


class UserRepository:
    """
    标准Repo层实现：
    1. 注入会话工厂，自主创建事务会话
    2. 事务上下文统一管理会话生命周期（创建→提交/回滚→关闭）
    3. 纯DB操作，无业务逻辑
    """
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
    # 查询类方法
    # ------------------------------
    async def get_by_user_code(self, user_code: str) -> Optional[SysUser]:
        """按用户编码查询（登录、鉴权、数据范围均以user_code为准）"""
        async with self.transaction() as session:
            stmt = select(SysUser).where(SysUser.user_code == user_code)
            result = await session.execute(stmt)
            return result.scalars().first()

    async def get_by_id(self, user_id: Any) -> Optional[SysUser]:
        async with self.transaction() as session:
            stmt = select(SysUser).where(SysUser.id == user_id)
            result = await session.execute(stmt)
            return result.scalars().first()

    async def get_by_user_codes(self, user_codes: List[str]) -> List[SysUser]:
        """批量按编码查询（用于回填项目经理/总监姓名）"""
        codes = [code for code in dict.fromkeys(user_codes) if code]
        if not codes:
            return []
        async with self.transaction() as session:
            stmt = select(SysUser).where(SysUser.user_code.in_(codes))
            result = await session.execute(stmt)
            return list(result.scalars().all())

    async def list_user_codes_by_role(self, role_name: str) -> List[str]:
        """持有某角色的用户编码（role_name为逗号分隔字段，在内存中精确匹配）"""
        async with self.transaction() as session:
            stmt = select(SysUser).where(SysUser.role_name.ilike(f"%{role_name}%"))
            result = await session.execute(stmt)
            users = result.scalars().all()
        return [user.user_code for user in users if role_name in (user.role_name or [])]

    async def page(self, search_key: Optional[str] = None, status: Optional[int] = None,
                   offset: int = 0, limit: int = 10) -> Tuple[List[SysUser], int]:
        builder = (
            create_user_query_builder()
            .filter(search_key=search_key, status__eq=status)
            .paginate(offset, limit)
        )
        async with self.transaction() as session:
            records = await session.execute(builder.build_paginated(select(SysUser)))
            total = await session.execute(builder.build_count(select(SysUser)))
            return list(records.scalars().all()), total.scalar_one()

    # ------------------------------
    # 写操作类方法（需在事务内执行）
    # ------------------------------
    async def create(self, data: Dict[str, Any], session: AsyncSession) -> SysUser:
        db_user = SysUser(**data)
        session.add(db_user)
        await session.flush()
        await session.refresh(db_user)
        return db_user

    async def update(self, user_id: Any, data: Dict[str, Any], session: AsyncSession) -> Optional[SysUser]:
        stmt = select(SysUser).where(SysUser.id == user_id)
        user = (await session.execute(stmt)).scalars().first()
        if not user:
            return None
        for key, value in data.items():
            setattr(user, key, value)
        await session.flush()
        await session.refresh(user)
        return user

    async def replace_role_name(self, old_name: str, new_name: str, session: AsyncSession) -> List[str]:
        """角色改名：同步替换用户role_name中的旧名称，返回受影响的用户编码"""
        stmt = select(SysUser).where(SysUser.role_name.ilike(f"%{old_name}%"))
        users = (await session.execute(stmt)).scalars().all()

        user_codes = []
        for user in users:
            role_names = list(user.role_name or [])
            if old_name not in role_names:
                continue
            user.role_name = list(dict.fromkeys(new_name if name == old_name else name for name in role_names))
            user_codes.append(user.user_code)
        await session.flush()
        return user_codes

    async def delete(self, user_id: Any, session: AsyncSession) -> bool:
        result = await session.execute(delete(SysUser).where(SysUser.id == user_id))
        return result.rowcount > 0
