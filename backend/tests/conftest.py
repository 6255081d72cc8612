from __future__ import annotations

import base64
import time

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from httpx import ASGITransport, AsyncClient
from jose import jwt
from starlette.testclient import TestClient

from roster.core.dependencies import get_current_user
from roster.main import app
from roster.models.auth import UserInfo
from roster.services.photo_service import PhotoService
from roster.services.roster_service import RosterService
from roster.storage.memory import MemoryWorkbook

TEST_CLIENT_ID = "test-client-1234.apps.googleusercontent.com"
TEST_KID = "test-kid-1"


def _int_to_base64url(value: int) -> str:
    byte_length = (value.bit_length() + 7) // 8
    return base64.urlsafe_b64encode(value.to_bytes(byte_length, byteorder="big")).rstrip(b"=").decode("ascii")


@pytest.fixture(autouse=True)
def _test_settings(tmp_path):
    from roster.core.config import settings

    overrides = {
        "STORE_BACKEND": "memory",
        "PHOTO_DIR": str(tmp_path / "photos"),
        "PHOTO_CLEANUP_ENABLED": False,
        "AUTH_ENABLED": True,
        "GOOGLE_CLIENT_ID": TEST_CLIENT_ID,
        "ALLOWED_EDITORS": [],
    }
    originals = {name: getattr(settings, name) for name in overrides}
    for name, value in overrides.items():
        setattr(settings, name, value)
    yield
    for name, value in originals.items():
        setattr(settings, name, value)


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
async def async_client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def rsa_test_keys():
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = private_key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    ).decode("utf-8")

    pub = private_key.public_key().public_numbers()
    jwk_dict = {
        "kty": "RSA",
        "kid": TEST_KID,
        "use": "sig",
        "alg": "RS256",
        "n": _int_to_base64url(pub.n),
        "e": _int_to_base64url(pub.e),
    }
    jwks_response = {"keys": [jwk_dict]}
    return private_pem, jwks_response


@pytest.fixture
def make_token():
    def _make_token(
        private_pem: str,
        *,
        sub: str = "1234567890",
        name: str = "Test User",
        email: str = "test@example.com",
        audience: str = TEST_CLIENT_ID,
        expired: bool = False,
    ) -> str:
        now = int(time.time())
        claims = {
            "sub": sub,
            "name": name,
            "email": email,
            "email_verified": True,
            "iss": "https://accounts.google.com",
            "aud": audience,
            "exp": now - 3600 if expired else now + 3600,
            "iat": now - 60,
        }
        return jwt.encode(claims, private_pem, algorithm="RS256", headers={"kid": TEST_KID})

    return _make_token


@pytest.fixture
def mock_user_editor():
    return UserInfo(id="editor-1", name="Editor User", email="editor@example.com", email_verified=True)


@pytest.fixture
def mock_user_guest():
    return UserInfo(id="guest-1", name="Guest User", email="guest@example.com", email_verified=True)


@pytest.fixture
def authenticated_client(mock_user_editor):
    app.dependency_overrides[get_current_user] = lambda: mock_user_editor
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def workbook():
    return MemoryWorkbook()


@pytest.fixture
def roster(workbook):
    return RosterService(workbook)


@pytest.fixture
def photos(tmp_path):
    return PhotoService(tmp_path / "photos", max_bytes=1024)


@pytest.fixture
def png_bytes():
    return b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


@pytest.fixture
def png_base64(png_bytes):
    return base64.b64encode(png_bytes).decode("ascii")
