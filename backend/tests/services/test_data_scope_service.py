"""
数据范围Service测试
backend/tests/services/test_data_scope_service.py
"""
import pytest

from app.utils.data_scope import ScopeKind


class TestResolveProjectFilter:
    """用户 → 角色 → data_scope合并"""

    @pytest.mark.asyncio
    async def test_all(self, data_scope_service):
        scope = await data_scope_service.resolve_project_filter("admin")

        assert scope.kind == ScopeKind.ALL

    @pytest.mark.asyncio
    async def test_all_wins_over_other_role(self, data_scope_service, user_repository):
        user = await user_repository.get_by_user_code("zhangsan")
        user.role_name = ["pm", "admin"]

        scope = await data_scope_service.resolve_project_filter("zhangsan")

        assert scope.kind == ScopeKind.ALL

    @pytest.mark.asyncio
    async def test_codes_union(self, data_scope_service):
        scope = await data_scope_service.resolve_project_filter("zhangsan")

        assert scope.kind == ScopeKind.CODES
        assert set(scope.project_codes) == {"P001", "P002", "P003"}
        assert len(scope.project_codes) == 3

    @pytest.mark.asyncio
    async def test_unconfigured_scope_is_owned(self, data_scope_service):
        scope = await data_scope_service.resolve_project_filter("lisi")

        assert scope.kind == ScopeKind.OWNED
        assert scope.project_codes == ()

    @pytest.mark.asyncio
    async def test_missing_role_is_owned(self, data_scope_service):
        assert (await data_scope_service.resolve_project_filter("zhaoliu")).kind == ScopeKind.OWNED

    @pytest.mark.asyncio
    async def test_unknown_user_is_owned(self, data_scope_service):
        assert (await data_scope_service.resolve_project_filter("nobody")).kind == ScopeKind.OWNED

    @pytest.mark.asyncio
    async def test_missing_role_skipped_among_real_ones(self, data_scope_service, user_repository):
        user = await user_repository.get_by_user_code("zhaoliu")
        user.role_name = "ghost,pm"

        scope = await data_scope_service.resolve_project_filter("zhaoliu")

        assert scope.kind == ScopeKind.CODES
        assert scope.project_codes == ("P001", "P002")
