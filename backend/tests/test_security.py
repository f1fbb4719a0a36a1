"""
认证与权限校验工具测试
backend/tests/test_security.py
"""
from datetime import timedelta

import pytest
from jose import JWTError

from app.core import security
from app.utils.permission_checker import desensitize_user_code, generate_permission_wildcards, is_permitted


class TestPassword:

    def test_hash_and_verify(self):
        hashed = security.get_password_hash("secret123")

        assert hashed != "secret123"
        assert security.verify_password("secret123", hashed)
        assert not security.verify_password("wrong", hashed)

    def test_empty_hash_never_matches(self):
        assert not security.verify_password("secret123", "")


class TestToken:

    def test_access_token_subject(self):
        token = security.create_access_token("zhangsan")

        assert security.extract_token_subject(token) == "zhangsan"
        assert security.decode_jwt_token(token)["type"] == security.ACCESS_TOKEN_TYPE

    def test_refresh_token_subject(self):
        token = security.create_refresh_token(data={"sub": "zhangsan"})

        assert security.extract_token_subject(token, expected_type=security.REFRESH_TOKEN_TYPE) == "zhangsan"

    def test_type_mismatch_rejected(self):
        refresh = security.create_refresh_token(data={"sub": "zhangsan"})
        access = security.create_access_token("zhangsan")

        with pytest.raises(JWTError):
            security.extract_token_subject(refresh)
        with pytest.raises(JWTError):
            security.extract_token_subject(access, expected_type=security.REFRESH_TOKEN_TYPE)

    def test_expired_token_rejected(self):
        token = security.create_access_token("zhangsan", expires_delta=timedelta(seconds=-10))

        with pytest.raises(JWTError):
            security.extract_token_subject(token)

    def test_garbage_token_rejected(self):
        with pytest.raises(JWTError):
            security.extract_token_subject("not-a-token")

    def test_refresh_token_requires_sub(self):
        with pytest.raises(ValueError):
            security.create_refresh_token(data={})


class TestPermissionWildcards:

    def test_three_part_code(self):
        assert generate_permission_wildcards("button:user:create") == [
            "button:user:create", "button:user:*", "button:*:*"
        ]

    def test_two_part_code(self):
        assert generate_permission_wildcards("system:user") == ["system:user", "system:*"]

    def test_single_part_code(self):
        assert generate_permission_wildcards("system") == ["system"]

    def test_empty_code(self):
        assert generate_permission_wildcards("") == []

    @pytest.mark.parametrize("granted, expected", [
        (["button:user:create"], True),
        (["button:user:*"], True),
        (["button:*:*"], True),
        (["button:role:create"], False),
        ([], False),
    ])
    def test_is_permitted(self, granted, expected):
        assert is_permitted("button:user:create", granted) is expected


def test_desensitize_user_code():
    short = desensitize_user_code("admin")
    assert len(short) == 8
    assert "admin" not in short

    assert desensitize_user_code("E2025000012345") == "E20250...2345"
