"""
认证Service测试：登录、刷新令牌、令牌解析
backend/tests/services/test_auth_service.py
"""
import pytest

from app.core import security
from app.core.exceptions import ErrorCode, Unauthorized

PASSWORD = "secret123"


class TestLogin:

    @pytest.mark.asyncio
    async def test_login_returns_tokens_tree_and_buttons(self, auth_service, redis_service):
        result = await auth_service.login("zhangsan", PASSWORD)

        assert security.extract_token_subject(result.access_token) == "zhangsan"
        assert redis_service.store["zhangsan"] == result.refresh_token
        assert result.user.user_code == "zhangsan"
        assert [node.code for node in result.permissions] == ["system", "project"]
        assert set(result.button_permissions) == {"button:user:create", "button:project:create"}

    @pytest.mark.asyncio
    async def test_login_result_serialization(self, auth_service):
        result = await auth_service.login("lisi", PASSWORD)

        data = result.model_dump(mode="json", by_alias=True)
        assert "accessToken" in data
        assert "password" not in data["user"]
        leaf = data["permissions"][0]["children"][0]
        assert leaf["code"] == "project:project"
        assert "children" not in leaf

    @pytest.mark.asyncio
    async def test_wrong_password(self, auth_service):
        with pytest.raises(Unauthorized) as exc_info:
            await auth_service.login("zhangsan", "bad-password")
        assert exc_info.value.error_code == ErrorCode.INVALID_CREDENTIALS

    @pytest.mark.asyncio
    async def test_unknown_user(self, auth_service):
        with pytest.raises(Unauthorized) as exc_info:
            await auth_service.login("nobody", PASSWORD)
        assert exc_info.value.error_code == ErrorCode.INVALID_CREDENTIALS

    @pytest.mark.asyncio
    async def test_disabled_user(self, auth_service):
        with pytest.raises(Unauthorized) as exc_info:
            await auth_service.login("wangwu", PASSWORD)
        assert exc_info.value.error_code == ErrorCode.USER_DISABLED


class TestRefresh:

    @pytest.mark.asyncio
    async def test_refresh_issues_new_tokens(self, auth_service, redis_service):
        login = await auth_service.login("lisi", PASSWORD)

        token = await auth_service.refresh(login.refresh_token)

        assert security.extract_token_subject(token.access_token) == "lisi"
        assert redis_service.store["lisi"] == token.refresh_token

    @pytest.mark.asyncio
    async def test_access_token_cannot_refresh(self, auth_service):
        login = await auth_service.login("lisi", PASSWORD)

        with pytest.raises(Unauthorized) as exc_info:
            await auth_service.refresh(login.access_token)
        assert exc_info.value.error_code == ErrorCode.TOKEN_INVALID

    @pytest.mark.asyncio
    async def test_refresh_after_logout(self, auth_service):
        login = await auth_service.login("lisi", PASSWORD)
        await auth_service.logout("lisi")

        with pytest.raises(Unauthorized):
            await auth_service.refresh(login.refresh_token)

    @pytest.mark.asyncio
    async def test_refresh_for_disabled_user(self, auth_service, redis_service, user_repository):
        login = await auth_service.login("lisi", PASSWORD)
        (await user_repository.get_by_user_code("lisi")).status = 0

        with pytest.raises(Unauthorized) as exc_info:
            await auth_service.refresh(login.refresh_token)
        assert exc_info.value.error_code == ErrorCode.USER_DISABLED
        assert "lisi" not in redis_service.store


class TestCurrentUser:

    @pytest.mark.asyncio
    async def test_valid_token(self, auth_service):
        user = await auth_service.get_current_user(security.create_access_token("lisi"))

        assert user.user_code == "lisi"

    @pytest.mark.asyncio
    async def test_refresh_token_rejected(self, auth_service):
        with pytest.raises(Unauthorized) as exc_info:
            await auth_service.get_current_user(security.create_refresh_token(data={"sub": "lisi"}))
        assert exc_info.value.error_code == ErrorCode.TOKEN_INVALID

    @pytest.mark.asyncio
    async def test_unknown_user(self, auth_service):
        with pytest.raises(Unauthorized) as exc_info:
            await auth_service.get_current_user(security.create_access_token("nobody"))
        assert exc_info.value.error_code == ErrorCode.USER_NOT_FOUND

    @pytest.mark.asyncio
    async def test_disabled_user(self, auth_service):
        with pytest.raises(Unauthorized) as exc_info:
            await auth_service.get_current_user(security.create_access_token("wangwu"))
        assert exc_info.value.error_code == ErrorCode.USER_DISABLED
