"""
认证相关核心文件
backend/app/core/security.py
访问令牌/刷新令牌的签发与解析，密码加密与校验
令牌subject统一为user_code
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Optional, Union, Dict
from jose import jwt, JWTError
from passlib.context import CryptContext
from fastapi.security import OAuth2PasswordBearer

from app.core.config import settings

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"

# ------------------------------
# 密码加密上下文
# ------------------------------
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS
)

# ------------------------------
# OAuth2配置
# ------------------------------
reusable_oauth2 = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_V1_STR}/login/access-token",
    scheme_name="OAuth2PasswordBearer"
)


# ------------------------------
# 密码加密（截断到72字节）
# ------------------------------
def get_password_hash(password: str) -> str:
    """
    加密密码：
    1. 将字符串密码编码为UTF-8字节（处理中文/特殊字符）
    2. 截断到72字节（符合bcrypt限制）
    3. 哈希处理
    """
    password_bytes = password.encode("utf-8")[:72]
    return pwd_context.hash(password_bytes)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """明文密码按加密逻辑同样编码+截断后比对"""
    if not hashed_password:
        return False
    plain_password_bytes = plain_password.encode("utf-8")[:72]
    return pwd_context.verify(plain_password_bytes, hashed_password)


# ------------------------------
# Token生成/解析
# ------------------------------
def create_access_token(
    subject: Union[str, Any],
    expires_delta: Optional[timedelta] = None
) -> str:
    """创建访问令牌（Access Token），默认ACCESS_TOKEN_EXPIRE_MINUTES过期"""
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode = {"exp": expire, "sub": str(subject), "type": ACCESS_TOKEN_TYPE}
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def create_refresh_token(
    data: Dict[str, Any],
    expires_delta: Optional[timedelta] = None
) -> str:
    """
    创建刷新令牌（Refresh Token）

    Args:
        data: 要编码到token中的数据，必须包含'sub'字段
        expires_delta: 过期时间，默认REFRESH_TOKEN_EXPIRE_DAYS天

    Returns:
        str: JWT刷新令牌
    """
    if "sub" not in data:
        raise ValueError("Refresh token data must contain 'sub' field")

    if expires_delta is None:
        expires_delta = timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)

    to_encode = data.copy()
    to_encode.update({
        "exp": datetime.now(timezone.utc) + expires_delta,
        "type": REFRESH_TOKEN_TYPE
    })
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_jwt_token(token: str) -> dict[str, Any]:
    """
    解码JWT令牌

    Raises:
        JWTError: 如果token无效或已过期
    """
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])


def extract_token_subject(token: str, expected_type: str = ACCESS_TOKEN_TYPE) -> str:
    """
    校验令牌类型并提取subject（user_code）

    Raises:
        JWTError: token无效、已过期、类型不符或缺少subject
    """
    payload = decode_jwt_token(token)
    if payload.get("type") != expected_type:
        raise JWTError(f"Token type mismatch: expected {expected_type}")
    subject = payload.get("sub")
    if not subject:
        raise JWTError("Token does not contain subject")
    return subject
