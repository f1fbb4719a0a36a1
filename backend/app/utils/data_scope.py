"""
项目数据范围
backend/app/utils/data_scope.py
合并用户多个角色的data_scope：
1. 任一角色包含ALL → 全部项目
2. 否则合并所有角色的项目编码（去重，保持首次出现顺序），非空 → 指定项目
3. 否则 → 本人作为项目经理/项目总监的项目
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Tuple

from app.models.sys_role import DATA_SCOPE_ALL


class ScopeKind(str, Enum):
    ALL = "all"
    CODES = "codes"
    OWNED = "owned"


@dataclass(frozen=True)
class ProjectScope:
    kind: ScopeKind
    project_codes: Tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def all(cls) -> "ProjectScope":
        return cls(ScopeKind.ALL)

    @classmethod
    def owned(cls) -> "ProjectScope":
        return cls(ScopeKind.OWNED)

    @classmethod
    def codes(cls, project_codes: Iterable[str]) -> "ProjectScope":
        return cls(ScopeKind.CODES, tuple(project_codes))

    def permits(self, project_code: str, manager_user_code: Optional[str],
                director_user_code: Optional[str], user_code: str) -> bool:
        """单个项目是否在范围内（与列表查询的过滤条件一致）"""
        if self.kind == ScopeKind.ALL:
            return True
        if self.kind == ScopeKind.CODES:
            return project_code in self.project_codes
        return user_code in (manager_user_code, director_user_code)


def merge_data_scopes(role_scopes: Iterable[Optional[List[str]]]) -> ProjectScope:
    """
    合并角色数据范围

    Args:
        role_scopes: 每个角色规范化后的data_scope列表（未配置为None或空列表）
    """
    project_codes: List[str] = []
    seen = set()

    for scope in role_scopes:
        if not scope:
            continue
        if DATA_SCOPE_ALL in scope:
            return ProjectScope.all()
        for code in scope:
            if code not in seen:
                seen.add(code)
                project_codes.append(code)

    if project_codes:
        return ProjectScope.codes(project_codes)
    return ProjectScope.owned()
