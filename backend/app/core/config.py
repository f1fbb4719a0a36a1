# 项目核心配置文件，包含数据库、JWT、CORS、Redis、日志等全局配置，支持从.env文件加载环境变量
# backend/app/core/config.py
# 更新：工时系统改造
#  - 所有字段提供开发环境默认值，无.env也可导入（测试环境依赖此行为）
#  - 新增REFRESH_TOKEN_EXPIRE_DAYS、LOG_DIR配置
#  - 日志初始化迁移到app/core/logger.py

import secrets
import warnings
import os
from typing import Annotated, Any, Literal
from zoneinfo import ZoneInfo

from pydantic import (
    AnyUrl,
    BeforeValidator,
    Field,
    HttpUrl,
    PostgresDsn,
    computed_field,
    model_validator,
)
from pydantic_core import MultiHostUrl
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing_extensions import Self


def parse_cors(v: Any) -> list[str] | str:
    if isinstance(v, str) and not v.startswith("["):
        return [i.strip() for i in v.split(",")]
    elif isinstance(v, list | str):
        return v
    raise ValueError(v)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # 默认读取backend上一级的.env，Docker环境通过ENV_FILE_PATH指定
        env_file=os.getenv("ENV_FILE_PATH", "../.env"),
        env_ignore_empty=True,
        extra="ignore",
    )
    PROJECT_NAME: str = "timesheet-backend"
    API_V1_STR: str = "/api/v1"
    SECRET_KEY: str = secrets.token_urlsafe(32)
    ALGORITHM: str = "HS256"
    # 密码加密
    BCRYPT_ROUNDS: int = 12
    # 30 minutes
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30
    # 7 days
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7
    FRONTEND_HOST: str = "http://localhost"
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"

    # 日志落文件开关（True：控制台+文件输出；False：仅控制台输出）
    LOG_TO_FILE_FLAG: bool = Field(
        default=False,
        description="日志落文件开关，未配置时本地环境默认开启，其他环境默认关闭"
    )

    # 日志目录（容器内路径，需挂载到宿主机）
    LOG_DIR: str = Field(
        default="/app/logs/local",
        description="日志文件存储目录"
    )

    # 动态设置日志开关默认值（优先级：.env配置 > 环境自动判断）
    @model_validator(mode="before")
    @classmethod
    def set_default_log_flag(cls, values):
        if isinstance(values, dict) and "LOG_TO_FILE_FLAG" not in values:
            values["LOG_TO_FILE_FLAG"] = values.get("ENVIRONMENT", "local") == "local"
        return values

    BACKEND_CORS_ORIGINS: Annotated[
        list[AnyUrl] | str, BeforeValidator(parse_cors)
    ] = [
        "http://localhost",
        "http://127.0.0.1",
    ]

    @computed_field  # type: ignore[prop-decorator]
    @property
    def all_cors_origins(self) -> list[str]:
        # 开发环境：放开本地前端地址；生产/测试环境：严格匹配配置的源
        if self.ENVIRONMENT == "local":
            return [
                "http://localhost:3000",
                "http://127.0.0.1:3000",
                "http://localhost",
                "http://127.0.0.1",
            ]
        return [str(origin).rstrip("/") for origin in self.BACKEND_CORS_ORIGINS] + [
            self.FRONTEND_HOST
        ]

    SENTRY_DSN: HttpUrl | None = None
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = ""
    POSTGRES_DB: str = "timesheet"

    # 数据库连接池配置
    DB_POOL_SIZE: int = Field(20, description="数据库连接池大小")
    DB_MAX_OVERFLOW: int = Field(100, description="最大溢出连接数")
    DB_POOL_RECYCLE: int = Field(3600, description="连接回收时间(秒)")
    DB_POOL_PRE_PING: bool = Field(True, description="连接有效性检查")

    # 全局时区配置，默认北京时间（Asia/Shanghai），支持从.env覆盖
    DEFAULT_TIMEZONE: str = Field(
        "Asia/Shanghai",
        description="项目全局默认时区（如Asia/Shanghai、UTC等）"
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def SQLALCHEMY_DATABASE_URI(self) -> PostgresDsn:
        return MultiHostUrl.build(
            scheme="postgresql+psycopg",
            username=self.POSTGRES_USER,
            password=self.POSTGRES_PASSWORD,
            host=self.POSTGRES_SERVER,
            port=self.POSTGRES_PORT,
            path=self.POSTGRES_DB,
        )

    # 初始化脚本创建的管理员账号
    FIRST_SUPERUSER: str = "admin"
    FIRST_SUPERUSER_PASSWORD: str = "changethis"

    # Redis配置
    REDIS_HOST: str = Field("localhost")
    REDIS_PORT: int = Field(6379)
    REDIS_DB: int = Field(0)
    REDIS_PASSWORD: str = Field("")
    REDIS_ENCODING: str = Field("utf-8")
    REDIS_DECODE_RESPONSES: bool = Field(True)
    REDIS_MAX_CONNECTIONS: int = Field(10)
    REDIS_SOCKET_TIMEOUT: int = Field(5)
    REDIS_SOCKET_CONNECT_TIMEOUT: int = Field(5)
    REDIS_KEY_PREFIX: str = Field("timesheet:")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def REDIS_URL(self) -> str:
        """生成 Redis 连接 URL"""
        if self.REDIS_PASSWORD:
            return f"redis://:{self.REDIS_PASSWORD}@{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"
        return f"redis://{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"

    def _check_default_secret(self, var_name: str, value: str | None) -> None:
        if value == "changethis":
            message = (
                f'The value of {var_name} is "changethis", '
                "for security, please change it, at least for deployments."
            )
            if self.ENVIRONMENT == "local":
                warnings.warn(message, stacklevel=1)
            else:
                raise ValueError(message)

    @model_validator(mode="after")
    def _enforce_non_default_secrets(self) -> Self:
        self._check_default_secret("SECRET_KEY", self.SECRET_KEY)
        self._check_default_secret("POSTGRES_PASSWORD", self.POSTGRES_PASSWORD)
        self._check_default_secret(
            "FIRST_SUPERUSER_PASSWORD", self.FIRST_SUPERUSER_PASSWORD
        )

        return self


# 全局settings对象
settings = Settings()  # type: ignore

# 导出全局时区对象，供Service层统一使用
DEFAULT_TZ = ZoneInfo(settings.DEFAULT_TIMEZONE)
