"""Tests for token handling and request credential extraction."""

from datetime import timedelta
from uuid import uuid4

import pytest
from jose import jwt

from src.lexora.api.dependencies.auth import extract_bearer_token
from src.lexora.core.config import get_settings
from src.lexora.core.security import (
    create_access_token,
    decode_token,
    generate_opaque_token,
    hash_token,
)
from src.lexora.core.security.headers import build_content_security_policy

pytestmark = pytest.mark.unit


class TestOpaqueTokens:
    def test_tokens_are_unique_and_url_safe(self):
        tokens = {generate_opaque_token() for _ in range(50)}

        assert len(tokens) == 50
        for token in tokens:
            assert len(token) >= 43
            assert all(c.isalnum() or c in "-_" for c in token)

    def test_hash_is_deterministic_hex_digest(self):
        digest = hash_token("abc")

        assert digest == hash_token("abc")
        assert digest != hash_token("abd")
        assert len(digest) == 64
        assert digest != "abc"


class TestAccessTokens:
    def test_round_trip_claims(self):
        user_id = uuid4()

        claims = decode_token(create_access_token(user_id))

        assert claims is not None
        assert claims["sub"] == str(user_id)
        assert claims["type"] == "access"
        assert claims["exp"] - claims["iat"] == 24 * 60 * 60

    def test_expired_token_rejected(self):
        token = create_access_token(uuid4(), expires_delta=timedelta(seconds=-1))

        assert decode_token(token) is None

    def test_foreign_signature_rejected(self):
        token = jwt.encode({"sub": str(uuid4()), "type": "access"}, "x" * 32, algorithm="HS256")

        assert decode_token(token) is None

    def test_garbage_rejected(self):
        assert decode_token("not-a-jwt") is None

    def test_signed_with_configured_secret(self):
        token = create_access_token(uuid4())

        claims = jwt.decode(token, get_settings().jwt_secret_key, algorithms=["HS256"])
        assert claims["type"] == "access"


class TestExtractBearerToken:
    @pytest.mark.parametrize(
        ("authorization", "x_access_token", "expected"),
        [
            ("Bearer abc", None, "abc"),
            ("bearer abc", None, "abc"),
            ("abc", None, "abc"),
            (None, "abc", "abc"),
            (None, "Bearer abc", "abc"),
            ("Bearer from-header", "from-x", "from-x"),
            (None, None, None),
            ("", None, None),
        ],
    )
    def test_extraction(self, authorization, x_access_token, expected):
        assert extract_bearer_token(authorization, x_access_token) == expected


class TestContentSecurityPolicy:
    def test_connect_src_allows_frontend(self):
        policy = build_content_security_policy("https://app.example.com", allow_docs_assets=False)

        assert "connect-src 'self' https://app.example.com" in policy
        assert "frame-ancestors 'none'" in policy
        assert "unsafe-inline" not in policy

    def test_docs_assets(self):
        policy = build_content_security_policy("https://app.example.com", allow_docs_assets=True)

        assert "cdn.jsdelivr.net" in policy
