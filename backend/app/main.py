"""
项目主入口文件
backend/app/main.py
1. 全局日志（core/logger.py）与Sentry初始化
2. DI容器创建与装配
3. request_id中间件、CORS、全局异常处理器
4. 挂载HTTP路由（API_V1_STR前缀）与WebSocket路由
"""
import uuid
import logging
from datetime import datetime

import sentry_sdk
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute
from sqlalchemy.exc import IntegrityError
from starlette.middleware.cors import CORSMiddleware

from app.api.main import api_router
from app.api.v1.endpoints import ws
from app.core.config import settings, DEFAULT_TZ
from app.core.exceptions import AppException
from app.core.logger import init_global_logger, request_id_ctx
from app.core.responses import ErrorResponse
from app.di.container import Container

init_global_logger()
logger = logging.getLogger(__name__)


def custom_generate_unique_id(route: APIRoute) -> str:
    """路由ID生成函数，处理无tags情况"""
    if not route.tags:
        return f"untagged-{route.name}"
    return f"{route.tags[0]}-{route.name}"


# Sentry初始化（非local环境且配置了DSN）
if settings.SENTRY_DSN and settings.ENVIRONMENT != "local":
    sentry_sdk.init(
        dsn=str(settings.SENTRY_DSN),
        enable_tracing=True,
        environment=settings.ENVIRONMENT
    )


def _error_response(status_code: int, message: str, request_id: str,
                    error_code=None, details=None, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(ErrorResponse(
            code=status_code,
            message=message,
            error_code=error_code,
            details=details,
            request_id=request_id,
            timestamp=datetime.now(DEFAULT_TZ).isoformat()
        )),
        headers=headers
    )


def create_app(container: Container = None) -> FastAPI:
    # 1. 初始化DI容器（按wiring_config自动装配）
    container = container or Container()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        openapi_url=f"{settings.API_V1_STR}/openapi.json",
        generate_unique_id_function=custom_generate_unique_id,
    )

    # 2. request_id中间件
    @app.middleware("http")
    async def add_request_id_middleware(request: Request, call_next):
        """
        注入请求ID到上下文
        - 生成UUID作为request_id
        - 响应头添加X-Request-ID，便于前端/运维排查
        """
        request_id = str(uuid.uuid4())
        request_id_ctx.set(request_id)
        logger.debug(f"开始处理请求 | 路径：{request.url.path} | 方法：{request.method}")

        response = await call_next(request)

        response.headers["X-Request-ID"] = request_id
        logger.debug(f"请求处理完成 | 状态码：{response.status_code}")
        return response

    # 3. CORS
    if settings.all_cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.all_cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
            expose_headers=["*"],
        )

    # 4. 全局异常处理器
    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException):
        request_id = request_id_ctx.get() or "unknown"
        logger.warning(
            f"应用异常 | 路径：{request.url.path} | 状态码：{exc.status_code} | 错误码：{exc.error_code} | 详情：{exc.detail}",
            extra={"request_id": request_id}
        )
        return _error_response(
            exc.status_code, str(exc.detail), request_id,
            error_code=exc.error_code, headers=getattr(exc, "headers", None)
        )

    @app.exception_handler(IntegrityError)
    async def sqlalchemy_exception_handler(request: Request, exc: IntegrityError):
        request_id = request_id_ctx.get() or "unknown"
        logger.error(
            f"数据库完整性异常 | 路径：{request.url.path} | 详情：{str(exc)}",
            extra={"request_id": request_id},
            exc_info=True
        )
        return _error_response(400, "Database integrity error", request_id, details=str(exc.orig))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """422请求参数校验错误，返回具体字段错误"""
        request_id = request_id_ctx.get() or "unknown"
        logger.warning(
            f"请求参数校验失败 | 路径：{request.url.path} | 错误详情：{exc.errors()}",
            extra={"request_id": request_id}
        )
        return _error_response(422, "请求参数校验失败", request_id, details={"errors": exc.errors()})

    # 5. 挂载路由
    app.include_router(api_router, prefix=settings.API_V1_STR)
    app.include_router(ws.router)

    # 6. 附加容器到app.state（测试中用于覆盖provider）
    app.state.container = container

    return app


app = create_app()

logger.info(
    f"{settings.PROJECT_NAME} 应用启动成功 | 环境：{settings.ENVIRONMENT} | API前缀：{settings.API_V1_STR} | 时区：{settings.DEFAULT_TIMEZONE}",
    extra={"request_id": "app_startup"}
)
