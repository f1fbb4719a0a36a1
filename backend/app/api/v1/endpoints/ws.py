"""
权限推送WebSocket端点
backend/app/api/v1/endpoints/ws.py
连接地址：/ws/permissions?token=<访问令牌>
客户端发送 ping 返回 pong；服务端推送 permission:updated 事件
"""
import logging

from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect, status
from dependency_injector.wiring import inject, Provide

from app.core.exceptions import Unauthorized
from app.di.container import Container
from app.services.permission_push_service import PermissionPushService
from app.services.sys_auth_service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ws", tags=["websocket"])


@router.websocket("/permissions")
@inject
async def permissions_socket(
        websocket: WebSocket,
        token: str = Query(..., description="访问令牌"),
        auth_service: AuthService = Depends(Provide[Container.auth_service]),
        push_service: PermissionPushService = Depends(Provide[Container.permission_push_service])
):
    try:
        user = await auth_service.get_current_user(token)
    except Unauthorized as e:
        logger.warning(f"WebSocket auth failed: {e.detail}")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await push_service.connect(websocket, user.user_code)
    try:
        while True:
            data = await websocket.receive_text()
            if data == "ping":
                await websocket.send_text("pong")
    except WebSocketDisconnect:
        logger.debug(f"WebSocket closed by client: {user.user_code}")
    finally:
        # 非正常退出（如收到二进制帧）同样注销
        push_service.disconnect(websocket, user.user_code)
