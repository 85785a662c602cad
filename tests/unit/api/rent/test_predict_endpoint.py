"""POST /rent/predict tests."""

import asyncio
from unittest.mock import AsyncMock

import pytest
from fastapi import status
from httpx import AsyncClient
from jose import jwt
from sqlalchemy import select

from src.api.core.messages import MessageCode
from src.database.models import RentPrediction
from src.modules.rent.errors import InferenceFunctionNotFoundError
from src.modules.user.cognito import CognitoTokenVerifier
from src.utils.settings.auth import CognitoSettings
from tests.utils.assertions import assert_error_response

SPANISH_BODY = {
    "barrio": "palermo soho",
    "ambientes": 3,
    "metrosCuadradosMin": 70,
    "metrosCuadradosMax": 70,
    "dormitorios": 2,
    "banos": 1,
    "garajes": 1,
    "antiguedad": 15,
    "calle": "Gorriti 4800",
}


@pytest.mark.asyncio
async def test_anonymous_predict(app, public_client: AsyncClient, fake_invoker):
    response = await public_client.post("/rent/predict", json=SPANISH_BODY)

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["prediction"] == 850001
    assert data["prediction_id"] is None
    assert data["input_data"]["barrio"] == "palermo soho"
    assert data["nearby_places"]["summary"]["restaurantes"] == 3
    assert "executionTimeMs" in data
    assert fake_invoker.payloads[0]["neighborhood"] == "Palermo"
    assert fake_invoker.payloads[0]["garages"] == 1


@pytest.mark.asyncio
async def test_english_field_names_are_accepted(app, public_client: AsyncClient, fake_invoker):
    response = await public_client.post(
        "/rent/predict",
        json={"neighborhood": "Caballito", "rooms": 2, "total_area": 45, "antiquity": 30},
    )

    assert response.status_code == status.HTTP_200_OK
    assert fake_invoker.payloads[0] == {
        "total_area": 45,
        "rooms": 2,
        "antiquity": 30,
        "neighborhood": "Caballito",
    }


@pytest.mark.asyncio
async def test_authenticated_predict_is_stored(
    app, authorized_client: AsyncClient, session_factory
):
    response = await authorized_client.post("/rent/predict", json=SPANISH_BODY)

    assert response.status_code == status.HTTP_200_OK
    prediction_id = response.json()["prediction_id"]
    assert prediction_id is not None

    async with session_factory() as session:
        records = (await session.execute(select(RentPrediction))).scalars().all()
    assert len(records) == 1
    assert str(records[0].id) == prediction_id
    assert records[0].cognito_sub == "user-1"
    assert records[0].status == "success"


@pytest.mark.asyncio
async def test_invalid_token_is_treated_as_anonymous(app, public_client: AsyncClient):
    response = await public_client.post(
        "/rent/predict",
        json=SPANISH_BODY,
        headers={"Authorization": "Bearer not-a-real-token"},
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["prediction_id"] is None


@pytest.mark.asyncio
async def test_inference_failure_returns_flat_error(
    app, public_client: AsyncClient, fake_invoker
):
    fake_invoker.error = InferenceFunctionNotFoundError(
        "Lambda function 'rent-prediction-test' not found"
    )

    response = await public_client.post("/rent/predict", json=SPANISH_BODY)

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    data = response.json()
    assert data["error"] is True
    assert "not found" in data["message"]
    assert isinstance(data["executionTimeMs"], int)


@pytest.mark.asyncio
async def test_failed_authenticated_predict_records_error(
    app, authorized_client: AsyncClient, fake_invoker, session_factory
):
    fake_invoker.error = InferenceFunctionNotFoundError("missing function")

    response = await authorized_client.post("/rent/predict", json=SPANISH_BODY)

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    async with session_factory() as session:
        record = (await session.execute(select(RentPrediction))).scalar_one()
    assert record.status == "error"
    assert record.error_message == "missing function"


@pytest.mark.asyncio
async def test_negative_values_are_rejected(app, public_client: AsyncClient):
    response = await public_client.post(
        "/rent/predict", json={**SPANISH_BODY, "ambientes": -1}
    )

    assert_error_response(
        response, MessageCode.INVALID_INPUT, status.HTTP_422_UNPROCESSABLE_ENTITY
    )


@pytest.mark.asyncio
async def test_unreachable_jwks_serves_prediction_anonymously(
    app, public_client: AsyncClient
):
    verifier = CognitoTokenVerifier(
        CognitoSettings(COGNITO_USER_POOL_ID="us-east-1_TestPool", COGNITO_CLIENT_ID="web")
    )
    verifier.fetch_jwks = AsyncMock(side_effect=asyncio.TimeoutError())
    app.state.token_verifier = verifier
    token = jwt.encode({"sub": "user-1"}, "secret", algorithm="HS256", headers={"kid": "k1"})

    response = await public_client.post(
        "/rent/predict",
        json=SPANISH_BODY,
        headers={"Authorization": f"Bearer {token}"},
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["prediction_id"] is None
