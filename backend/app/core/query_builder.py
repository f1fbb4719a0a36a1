"""
高级查询构建器模块 - 策略模式实现
backend/app/core/query_builder.py
列表查询统一入口：关键词搜索、精确过滤、项目数据范围过滤、排序分页、计数
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Tuple
from sqlalchemy.sql import Select
from sqlalchemy.orm import InstrumentedAttribute
from sqlalchemy import func, or_, select

from app.utils.data_scope import ProjectScope, ScopeKind


# ==================== 策略基类 ====================
class BaseFilterStrategy(ABC):
    """过滤策略基类"""

    @abstractmethod
    def apply(self, query: Select, value: Any, **kwargs) -> Select:
        """应用过滤条件到查询"""
        pass

    def validate(self, value: Any) -> bool:
        """验证输入值是否有效"""
        return value is not None and value != ""


# ==================== 具体过滤策略 ====================
class EqualFilter(BaseFilterStrategy):
    """等于过滤"""

    def __init__(self, field: InstrumentedAttribute):
        self.field = field

    def apply(self, query: Select, value: Any, **kwargs) -> Select:
        return query.filter(self.field == value)


class LikeFilter(BaseFilterStrategy):
    """模糊匹配（不区分大小写）"""

    def __init__(self, field: InstrumentedAttribute):
        self.field = field

    def apply(self, query: Select, value: Any, **kwargs) -> Select:
        return query.filter(self.field.ilike(f"%{value}%"))


class MultiFieldKeywordFilter(BaseFilterStrategy):
    """多字段关键词搜索（字段间OR）"""

    def __init__(self, fields: List[InstrumentedAttribute]):
        self.fields = fields

    def apply(self, query: Select, value: Any, **kwargs) -> Select:
        conditions = [field.ilike(f"%{value}%") for field in self.fields]
        return query.filter(or_(*conditions))


class InFilter(BaseFilterStrategy):
    """IN查询过滤"""

    def __init__(self, field: InstrumentedAttribute):
        self.field = field

    def apply(self, query: Select, value: Any, **kwargs) -> Select:
        if isinstance(value, (list, tuple, set)) and value:
            return query.filter(self.field.in_(list(value)))
        return query


class ProjectScopeFilter(BaseFilterStrategy):
    """
    项目数据范围过滤，value为 (ProjectScope, user_code)
    - all：不加条件
    - codes：project_code IN (...)
    - owned：manager_user_code = user_code OR director_user_code = user_code
    """

    def __init__(self, code_field: InstrumentedAttribute,
                 manager_field: InstrumentedAttribute,
                 director_field: InstrumentedAttribute):
        self.code_field = code_field
        self.manager_field = manager_field
        self.director_field = director_field

    def validate(self, value: Any) -> bool:
        return isinstance(value, tuple) and len(value) == 2 and isinstance(value[0], ProjectScope)

    def apply(self, query: Select, value: Tuple[ProjectScope, str], **kwargs) -> Select:
        scope, user_code = value
        if scope.kind == ScopeKind.ALL:
            return query
        if scope.kind == ScopeKind.CODES:
            return query.filter(self.code_field.in_(list(scope.project_codes)))
        return query.filter(or_(self.manager_field == user_code, self.director_field == user_code))


# ==================== 查询构建器 ====================
class QueryBuilder:
    """高级查询构建器"""

    def __init__(self, model_class):
        self.model_class = model_class
        self.strategies: Dict[str, BaseFilterStrategy] = {}
        self.conditions: List[Dict[str, Any]] = []

    def register_strategy(self, name: str, strategy: BaseFilterStrategy) -> 'QueryBuilder':
        """注册过滤策略"""
        self.strategies[name] = strategy
        return self

    def filter(self, **kwargs) -> 'QueryBuilder':
        """添加过滤条件（支持链式调用，空值忽略）"""
        for key, value in kwargs.items():
            if value is not None and value != "":
                if isinstance(value, list) and not value:
                    continue
                self.conditions.append({"key": key, "value": value})
        return self

    def build(self, base_query: Select) -> Select:
        """构建查询（条件之间AND）"""
        query = base_query

        for condition in self.conditions:
            key = condition["key"]
            value = condition["value"]

            if key in self.strategies:
                strategy = self.strategies[key]
                if strategy.validate(value):
                    query = strategy.apply(query, value)

        return query

    def reset(self) -> 'QueryBuilder':
        """重置构建器状态"""
        self.conditions.clear()
        return self


# ==================== 分页查询构建器 ====================
class PaginatedQueryBuilder(QueryBuilder):
    """支持分页的查询构建器"""

    def __init__(self, model_class):
        super().__init__(model_class)
        self._offset = 0
        self._limit = 100
        self._order_by = []

    def paginate(self, offset: int = 0, limit: int = 100) -> 'PaginatedQueryBuilder':
        """设置分页参数"""
        self._offset = offset
        self._limit = limit
        return self

    def order_by(self, *fields) -> 'PaginatedQueryBuilder':
        """设置排序字段"""
        for field in fields:
            if isinstance(field, str):
                if hasattr(self.model_class, field):
                    self._order_by.append(getattr(self.model_class, field))
            else:
                self._order_by.append(field)
        return self

    def build_paginated(self, base_query: Select) -> Select:
        """构建分页查询"""
        query = self.build(base_query)

        if self._order_by:
            query = query.order_by(*self._order_by)

        if self._limit:
            query = query.limit(self._limit).offset(self._offset)

        return query

    def build_count(self, base_query: Select) -> Select:
        """构建计数查询（复用过滤条件，不含排序分页）"""
        return select(func.count()).select_from(self.build(base_query).subquery())


# ==================== 各模块查询构建器工厂 ====================
def create_permission_query_builder() -> PaginatedQueryBuilder:
    """权限列表：名称/编码关键词搜索，按创建时间倒序"""
    from app.models import SysPermission

    builder = PaginatedQueryBuilder(SysPermission)
    builder.register_strategy(
        "search_key",
        MultiFieldKeywordFilter([SysPermission.name, SysPermission.code])
    )
    builder.register_strategy("type__eq", EqualFilter(SysPermission.type))
    builder.register_strategy("status__eq", EqualFilter(SysPermission.status))
    builder.order_by(SysPermission.create_time.desc())
    return builder


def create_role_query_builder() -> PaginatedQueryBuilder:
    """角色列表：名称模糊搜索，按创建时间倒序"""
    from app.models import SysRole

    builder = PaginatedQueryBuilder(SysRole)
    builder.register_strategy("search_key", LikeFilter(SysRole.name))
    builder.order_by(SysRole.create_time.desc())
    return builder


def create_user_query_builder() -> PaginatedQueryBuilder:
    """用户列表：编码/姓名关键词搜索，状态过滤，按创建时间倒序"""
    from app.models import SysUser

    builder = PaginatedQueryBuilder(SysUser)
    builder.register_strategy(
        "search_key",
        MultiFieldKeywordFilter([SysUser.user_code, SysUser.user_name])
    )
    builder.register_strategy("status__eq", EqualFilter(SysUser.status))
    builder.register_strategy("user_code__in", InFilter(SysUser.user_code))
    builder.order_by(SysUser.create_time.desc())
    return builder


def create_project_query_builder() -> PaginatedQueryBuilder:
    """项目列表：数据范围过滤 AND 编码/名称关键词搜索，按创建时间倒序"""
    from app.models import Project

    builder = PaginatedQueryBuilder(Project)
    builder.register_strategy(
        "data_scope",
        ProjectScopeFilter(Project.project_code, Project.manager_user_code, Project.director_user_code)
    )
    builder.register_strategy(
        "search_key",
        MultiFieldKeywordFilter([Project.project_code, Project.project_name])
    )
    builder.register_strategy("status__eq", EqualFilter(Project.status))
    builder.order_by(Project.create_time.desc())
    return builder
