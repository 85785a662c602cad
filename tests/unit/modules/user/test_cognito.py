"""Cognito access token verification tests with a locally generated key pair."""

import asyncio
import time
from unittest.mock import AsyncMock, patch

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp import test_utils
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from jose import jwk, jwt

from src.modules.user.cognito import CognitoTokenVerifier, InvalidTokenError
from src.modules.user.jwt_claims import extract_identity_from_claims
from src.utils.settings.auth import CognitoSettings

KID = "test-key"


@pytest.fixture(scope="module")
def private_pem() -> bytes:
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )


@pytest.fixture(scope="module")
def public_jwk(private_pem) -> dict:
    private_key = serialization.load_pem_private_key(private_pem, password=None)
    public_pem = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return {**jwk.construct(public_pem, "RS256").to_dict(), "kid": KID, "use": "sig"}


@pytest.fixture
def settings() -> CognitoSettings:
    return CognitoSettings(
        AWS_REGION="us-east-1",
        COGNITO_USER_POOL_ID="us-east-1_TestPool",
        COGNITO_CLIENT_ID="web-client",
    )


@pytest.fixture
def verifier(settings, public_jwk) -> CognitoTokenVerifier:
    verifier = CognitoTokenVerifier(settings)
    verifier.fetch_jwks = AsyncMock(return_value=[public_jwk])
    return verifier


@pytest.fixture
def sign(private_pem, settings):
    def _sign(kid: str = KID, **overrides) -> str:
        now = int(time.time())
        claims = {
            "sub": "0f1e2d3c",
            "iss": settings.issuer,
            "token_use": "access",
            "client_id": "web-client",
            "username": "lucia",
            "cognito:groups": ["agents"],
            "iat": now,
            "exp": now + 3600,
        }
        claims.update(overrides)
        return jwt.encode(claims, private_pem, algorithm="RS256", headers={"kid": kid})

    return _sign


@pytest.mark.asyncio
async def test_valid_access_token_yields_identity(verifier, sign):
    identity = await verifier.identify(sign())

    assert identity.sub == "0f1e2d3c"
    assert identity.username == "lucia"
    assert identity.groups == ["agents"]


@pytest.mark.asyncio
async def test_signing_keys_are_cached(verifier, sign):
    await verifier.verify(sign())
    await verifier.verify(sign())

    verifier.fetch_jwks.assert_awaited_once()


@pytest.mark.asyncio
async def test_expired_token_is_rejected(verifier, sign):
    past = int(time.time()) - 7200
    with pytest.raises(InvalidTokenError, match="expired"):
        await verifier.verify(sign(iat=past, exp=past + 60))


@pytest.mark.asyncio
async def test_id_token_is_rejected(verifier, sign):
    with pytest.raises(InvalidTokenError, match="access token"):
        await verifier.verify(sign(token_use="id"))


@pytest.mark.asyncio
async def test_other_client_is_rejected(verifier, sign):
    with pytest.raises(InvalidTokenError, match="another client"):
        await verifier.verify(sign(client_id="mobile-client"))


@pytest.mark.asyncio
async def test_wrong_issuer_is_rejected(verifier, sign):
    with pytest.raises(InvalidTokenError):
        await verifier.verify(sign(iss="https://evil.example.com"))


@pytest.mark.asyncio
async def test_unknown_kid_is_rejected(verifier, sign):
    with pytest.raises(InvalidTokenError, match="Unknown signing key"):
        await verifier.verify(sign(kid="rotated-away"))


@pytest.mark.asyncio
async def test_garbage_token_is_rejected(verifier):
    with pytest.raises(InvalidTokenError, match="Malformed"):
        await verifier.verify("not.a.jwt")


@pytest.mark.asyncio
async def test_unconfigured_pool_rejects_everything(public_jwk, sign):
    verifier = CognitoTokenVerifier(CognitoSettings(COGNITO_USER_POOL_ID="", COGNITO_CLIENT_ID=""))

    with patch.object(verifier, "fetch_jwks", AsyncMock(return_value=[public_jwk])) as fetch:
        with pytest.raises(InvalidTokenError, match="not configured"):
            await verifier.verify(sign())
        fetch.assert_not_awaited()


def test_claims_mapping_defaults():
    identity = extract_identity_from_claims(
        {"sub": "abc", "cognito:username": "fallback", "cognito:groups": "admins"}
    )

    assert identity.username == "fallback"
    assert identity.groups == ["admins"]
    assert identity.email is None
    assert identity.email_verified is False


def test_claims_without_sub_are_invalid():
    with pytest.raises(ValueError):
        extract_identity_from_claims({"username": "ghost"})


class LocalJwksSettings(CognitoSettings):
    """Points the verifier at a local JWKS endpoint."""

    JWKS_ENDPOINT: str = ""

    @property
    def jwks_url(self) -> str:
        return self.JWKS_ENDPOINT


@pytest_asyncio.fixture
async def jwks_server():
    async def hanging(request):
        await asyncio.sleep(2)
        return web.json_response({"keys": []})

    async def not_a_key_set(request):
        return web.json_response([1, 2, 3])

    app = web.Application()
    app.router.add_get("/hanging", hanging)
    app.router.add_get("/list", not_a_key_set)
    server = test_utils.TestServer(app)
    await server.start_server()
    yield server
    await server.close()


def local_verifier(server, path: str) -> CognitoTokenVerifier:
    return CognitoTokenVerifier(
        LocalJwksSettings(
            COGNITO_USER_POOL_ID="us-east-1_TestPool",
            COGNITO_CLIENT_ID="web-client",
            COGNITO_JWKS_TIMEOUT_SECONDS=0.2,
            JWKS_ENDPOINT=str(server.make_url(path)),
        )
    )


@pytest.mark.asyncio
async def test_hanging_jwks_endpoint_rejects_token(jwks_server, sign):
    verifier = local_verifier(jwks_server, "/hanging")

    with pytest.raises(InvalidTokenError, match="signing keys"):
        await verifier.identify(sign())


@pytest.mark.asyncio
async def test_jwks_body_without_key_list_rejects_token(jwks_server, sign):
    verifier = local_verifier(jwks_server, "/list")

    with pytest.raises(InvalidTokenError, match="signing keys"):
        await verifier.identify(sign())


@pytest.mark.asyncio
async def test_malformed_keys_are_skipped(settings, public_jwk, sign):
    verifier = CognitoTokenVerifier(settings)
    verifier.fetch_jwks = AsyncMock(return_value=["junk", {"kty": "RSA"}, public_jwk])

    identity = await verifier.identify(sign())

    assert identity.sub == "0f1e2d3c"
