"""
核心异常处理配置文件
backend/app/core/exceptions.py
error_code：业务错误码，随ErrorResponse返回前端
"""
from typing import Optional

from fastapi import HTTPException, status


class AppException(HTTPException):
    """基础异常类"""
    def __init__(self, status_code: int, detail: str, error_code: Optional[str] = None):
        super().__init__(status_code=status_code, detail=detail)
        self.error_code = error_code


class ResourceNotFound(AppException):
    """资源不存在异常（404）"""
    def __init__(self, detail: str, error_code: Optional[str] = None):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail, error_code=error_code)


class BadRequest(AppException):
    """参数错误/业务错误（400）"""
    def __init__(self, detail: str, error_code: Optional[str] = None):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail, error_code=error_code)


class Unauthorized(AppException):
    """未登录/令牌无效（401）"""
    def __init__(self, detail: str = "Could not validate credentials", error_code: Optional[str] = None):
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail, error_code=error_code)
        self.headers = {"WWW-Authenticate": "Bearer"}


class PermissionDenied(AppException):
    """权限不足（403）"""
    def __init__(self, detail: str = "Not enough privileges", error_code: Optional[str] = None):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail, error_code=error_code)


class ErrorCode:
    """业务错误码"""
    USER_NOT_FOUND = "USER_NOT_FOUND"
    USER_CODE_EXISTS = "USER_CODE_EXISTS"
    USER_DISABLED = "USER_DISABLED"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    PASSWORD_INCORRECT = "PASSWORD_INCORRECT"
    PASSWORD_UNCHANGED = "PASSWORD_UNCHANGED"
    TOKEN_INVALID = "TOKEN_INVALID"
    ROLE_NOT_FOUND = "ROLE_NOT_FOUND"
    ROLE_NAME_EXISTS = "ROLE_NAME_EXISTS"
    PERMISSION_NOT_FOUND = "PERMISSION_NOT_FOUND"
    PERMISSION_CODE_EXISTS = "PERMISSION_CODE_EXISTS"
    PROJECT_NOT_FOUND = "PROJECT_NOT_FOUND"
    PROJECT_CODE_EXISTS = "PROJECT_CODE_EXISTS"
    MANAGER_NOT_FOUND = "MANAGER_NOT_FOUND"
    MEMBER_EXISTS = "MEMBER_EXISTS"
    MEMBER_NOT_FOUND = "MEMBER_NOT_FOUND"
    FORBIDDEN = "FORBIDDEN"
