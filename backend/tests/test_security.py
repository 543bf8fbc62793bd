"""安全模块单元测试 — 密码哈希、JWT 生成与解析、一次性令牌。"""
from jose import jwt

from app.core.config import settings
from app.core.security import (
    hash_password, verify_password,
    create_access_token, decode_token, generate_one_time_token,
)


class TestPasswordHashing:
    def test_hash_and_verify(self):
        hashed = hash_password("mypassword")
        assert verify_password("mypassword", hashed)
        assert not verify_password("wrong", hashed)

    def test_different_hashes(self):
        h1 = hash_password("same")
        h2 = hash_password("same")
        # bcrypt 每次产生不同的 hash
        assert h1 != h2
        assert verify_password("same", h1)
        assert verify_password("same", h2)


class TestJWT:
    def test_create_and_decode_access_token(self):
        token = create_access_token("42", "user")
        payload = decode_token(token)
        assert payload is not None
        assert payload["sub"] == "42"
        assert payload["role"] == "user"
        assert payload["type"] == "access"

    def test_expired_token(self):
        assert decode_token(create_access_token("42", "user", expires_minutes=-1)) is None

    def test_wrong_secret(self):
        forged = jwt.encode({"sub": "1", "role": "admin", "type": "access"}, "other-secret",
                            algorithm=settings.jwt_algorithm)
        assert decode_token(forged) is None

    def test_decode_invalid_token(self):
        assert decode_token("invalid.jwt.token") is None

    def test_decode_empty_token(self):
        assert decode_token("") is None


class TestOneTimeToken:
    def test_token_shape(self):
        token = generate_one_time_token()
        assert len(token) == 64
        int(token, 16)

    def test_tokens_unique(self):
        assert len({generate_one_time_token() for _ in range(20)}) == 20
