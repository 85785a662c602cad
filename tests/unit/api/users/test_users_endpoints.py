"""User profile endpoint tests."""

import pytest
from fastapi import status
from httpx import AsyncClient

from src.api.core.messages import MessageCode
from tests.utils.assertions import assert_error_response, assert_success_response


@pytest.mark.asyncio
async def test_me_requires_authentication(app, public_client: AsyncClient):
    response = await public_client.get("/users/me")

    assert_error_response(
        response, MessageCode.AUTH_REQUIRED, status.HTTP_401_UNAUTHORIZED
    )


@pytest.mark.asyncio
async def test_me_with_unknown_token(app, public_client: AsyncClient):
    response = await public_client.get(
        "/users/me", headers={"Authorization": "Bearer forged"}
    )

    assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.asyncio
async def test_me_returns_token_profile(app, authorized_client: AsyncClient):
    response = await authorized_client.get("/users/me")

    data = assert_success_response(response, MessageCode.SUCCESS)
    assert data["sub"] == "user-1"
    assert data["email"] == "user-1@example.com"
    assert data["username"] == "user1"
    assert data["groups"] == []
