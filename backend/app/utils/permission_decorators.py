"""
权限声明装饰器
backend/app/utils/permission_decorators.py
只给端点函数附加权限元数据并登记到全局注册表，不包装函数，不影响依赖注入
实际校验由 permission_checker 依赖完成
"""
from typing import Callable, Optional, Dict, List

# 全局权限注册表：code → 元数据
_permission_registry: Dict[str, Dict] = {}


def permission(
        code: str,
        name: str,
        description: Optional[str] = None,
        category: Optional[str] = "api",
        auto_register: bool = True
):
    """权限声明装饰器"""

    def decorator(func: Callable) -> Callable:
        if not hasattr(func, '__api_permissions__'):
            func.__api_permissions__ = []

        permission_data = {
            'code': code,
            'name': name,
            'description': description,
            'category': category,
            'endpoint': f"{func.__module__}.{func.__qualname__}"
        }
        func.__api_permissions__.append(permission_data)

        if auto_register:
            _permission_registry[code] = permission_data

        return func

    return decorator


def get_permission_registry() -> Dict[str, Dict]:
    """获取全局权限注册表"""
    return _permission_registry.copy()


def get_endpoint_permissions(func: Callable) -> List[Dict]:
    """获取端点声明的权限"""
    return getattr(func, '__api_permissions__', [])
