"""
权限推送服务
backend/app/services/permission_push_service.py
维护 user_code → WebSocket 连接映射（进程内单例），角色/权限变更后推送最新菜单树和按钮权限
"""
import asyncio
import logging
import time
from typing import Dict, Iterable

from fastapi import WebSocket

from app.schemas.sys_permission import PermissionPushData, PermissionPushMessage
from app.services.sys_permission_service import PermissionService
from app.services.sys_user_service import UserService

logger = logging.getLogger(__name__)


class PermissionPushService:
    """WebSocket连接管理 + 权限推送"""

    def __init__(self, user_service: UserService, permission_service: PermissionService):
        self.user_service = user_service
        self.permission_service = permission_service
        self.active_connections: Dict[str, WebSocket] = {}

    async def connect(self, websocket: WebSocket, user_code: str):
        """接受连接并登记，同一用户重复连接时以最新连接为准"""
        await websocket.accept()
        self.active_connections[user_code] = websocket
        logger.info(f"User {user_code} connected, online: {self.online_count()}")

    def disconnect(self, websocket: WebSocket, user_code: str):
        if self.active_connections.get(user_code) is websocket:
            del self.active_connections[user_code]
            logger.info(f"User {user_code} disconnected, online: {self.online_count()}")

    def online_count(self) -> int:
        return len(self.active_connections)

    def is_online(self, user_code: str) -> bool:
        return user_code in self.active_connections

    async def build_push_message(self, user_code: str) -> PermissionPushMessage:
        permission_codes = await self.user_service.get_user_all_permissions(user_code)
        return PermissionPushMessage(
            data=PermissionPushData(
                permissions=await self.permission_service.get_user_permission_tree(permission_codes),
                button_permissions=await self.permission_service.get_user_button_permissions(permission_codes),
                timestamp=int(time.time() * 1000)
            )
        )

    async def push_permissions(self, user_code: str) -> bool:
        """
        推送权限给指定用户

        Returns:
            是否实际发送（用户不在线或不存在时跳过并返回False）
        """
        websocket = self.active_connections.get(user_code)
        if websocket is None:
            logger.debug(f"User {user_code} offline, skip push")
            return False

        user = await self.user_service.get_user_by_code(user_code)
        if user is None:
            logger.warning(f"User {user_code} not found, skip push")
            return False

        message = await self.build_push_message(user_code)
        await websocket.send_json(message.model_dump(mode="json", by_alias=True))
        logger.info(f"Permissions pushed to {user_code}")
        return True

    async def push_permissions_to_users(self, user_codes: Iterable[str]) -> None:
        """批量推送，单个用户失败只记录日志，不中断其余用户"""
        codes = list(dict.fromkeys(user_codes))
        logger.info(f"Pushing permissions to {len(codes)} users")

        results = await asyncio.gather(
            *(self.push_permissions(code) for code in codes),
            return_exceptions=True
        )
        for code, result in zip(codes, results):
            if isinstance(result, Exception):
                logger.error(f"Push permissions to {code} failed: {result}")
