"""Client for the rent price inference Lambda function."""

import asyncio
import json
import math
from typing import Any, Protocol

from botocore.exceptions import (
    ClientError,
    NoCredentialsError,
    PartialCredentialsError,
)

from src.api.rent.schemas import InferenceResult, PredictionRequest
from src.modules.rent.errors import (
    InferenceCredentialsError,
    InferenceError,
    InferenceFunctionNotFoundError,
    InferenceInvocationError,
    InvalidInferencePayloadError,
)
from src.modules.rent.infrastructure.aws import client_config, create_session
from src.modules.rent.neighborhoods import normalize_neighborhood
from src.utils.logger import get_logger
from src.utils.settings.aws import AWSSettings

logger = get_logger(__name__)

CREDENTIAL_ERROR_CODES = {
    "UnrecognizedClientException",
    "InvalidSignatureException",
    "ExpiredTokenException",
    "AccessDeniedException",
}


class InferenceInvoker(Protocol):
    """Anything able to run the inference function with a JSON payload."""

    async def invoke(self, payload: dict[str, Any]) -> Any: ...


def format_prediction_value(value: Any) -> int:
    """Turn the raw model output into a whole price, rounding up.

    The model answers with shapes like ``["[1006320.92]"]``; nested lists are
    unwrapped and brackets stripped before parsing. Anything unparseable
    becomes 0.
    """
    raw = value
    while isinstance(value, (list, tuple)) and value:
        value = value[0]

    if isinstance(value, str):
        value = value.replace("[", "").replace("]", "").strip()

    try:
        number = float(value)
    except (TypeError, ValueError):
        logger.warning("Could not parse prediction value", value=repr(raw))
        return 0

    if not math.isfinite(number):
        logger.warning("Prediction value is not finite", value=repr(raw))
        return 0
    return math.ceil(number)


def _client_error_to_inference_error(
    exc: ClientError, function_name: str
) -> InferenceError:
    code = exc.response.get("Error", {}).get("Code", "")
    message = exc.response.get("Error", {}).get("Message", str(exc))

    if code == "ResourceNotFoundException":
        return InferenceFunctionNotFoundError(
            f"Lambda function '{function_name}' not found. "
            "Check AWS_REGION and LAMBDA_PREDICTION_FUNCTION_NAME."
        )
    if code == "InvalidRequestContentException":
        return InvalidInferencePayloadError(
            "Invalid payload sent to the inference function. Check the request fields."
        )
    if code in CREDENTIAL_ERROR_CODES or "credentials" in message.lower():
        return InferenceCredentialsError(
            "Invalid AWS credentials. "
            "Check AWS_ACCESS_KEY_ID and AWS_SECRET_ACCESS_KEY_ID."
        )
    return InferenceInvocationError(f"Lambda invocation failed: {message}")


class LambdaInvoker:
    """Invokes the inference function through aioboto3."""

    def __init__(self, settings: AWSSettings | None = None):
        self.settings = settings or AWSSettings()
        self.function_name = self.settings.LAMBDA_PREDICTION_FUNCTION_NAME
        self._session = create_session(self.settings)

    async def invoke(self, payload: dict[str, Any]) -> Any:
        try:
            async with self._session.client(
                "lambda",
                config=client_config(self.settings.LAMBDA_TIMEOUT_SECONDS),
            ) as client:
                response = await client.invoke(
                    FunctionName=self.function_name,
                    InvocationType="RequestResponse",
                    Payload=json.dumps(payload).encode("utf-8"),
                )
                body = await response["Payload"].read()
        except ClientError as e:
            raise _client_error_to_inference_error(e, self.function_name) from e
        except (NoCredentialsError, PartialCredentialsError) as e:
            raise InferenceCredentialsError(
                "AWS credentials are missing. "
                "Check AWS_ACCESS_KEY_ID and AWS_SECRET_ACCESS_KEY_ID."
            ) from e

        try:
            decoded = json.loads(body) if body else {}
        except json.JSONDecodeError as e:
            raise InferenceInvocationError(
                f"Inference function returned invalid JSON: {e}"
            ) from e

        if response.get("FunctionError"):
            message = (
                decoded.get("errorMessage") if isinstance(decoded, dict) else None
            ) or response["FunctionError"]
            raise InferenceInvocationError(f"Lambda Error: {message}")
        return decoded


class InferenceGateway:
    """Builds inference payloads, runs one or two invocations and parses prices."""

    def __init__(
        self,
        invoker: InferenceInvoker,
        settings: AWSSettings | None = None,
        logger=None,
    ):
        self.invoker = invoker
        self.settings = settings or AWSSettings()
        self.timeout = self.settings.LAMBDA_TIMEOUT_SECONDS
        self.logger = logger or get_logger(self.__class__.__name__)

    async def predict(self, request: PredictionRequest) -> InferenceResult:
        input_data = request.to_input_data()

        if request.is_range:
            self.logger.info(
                "Running range prediction",
                surface_min=request.surface_min,
                surface_max=request.surface_max,
            )
            results = await asyncio.gather(
                self._invoke(self.build_payload(request, request.surface_min)),
                self._invoke(self.build_payload(request, request.surface_max)),
                return_exceptions=True,
            )
            # Either bound failing fails the whole range
            for result in results:
                if isinstance(result, BaseException):
                    raise result
            result_min, result_max = results
            return InferenceResult(
                prediction_min=format_prediction_value(result_min.get("prediction")),
                prediction_max=format_prediction_value(result_max.get("prediction")),
                input_data=input_data,
            )

        self.logger.info("Running single prediction", surface=request.single_surface)
        result = await self._invoke(self.build_payload(request, request.single_surface))
        return InferenceResult(
            prediction=format_prediction_value(result.get("prediction")),
            input_data=input_data,
        )

    def build_payload(
        self, request: PredictionRequest, total_area: float | None
    ) -> dict[str, Any]:
        """Map the canonical request onto the field names the model expects."""
        neighborhood = normalize_neighborhood(request.neighborhood) or request.neighborhood
        payload = {
            "total_area": total_area,
            "rooms": request.rooms,
            "bedrooms": request.bedrooms,
            "antiquity": request.age,
            "neighborhood": neighborhood,
            "bathrooms": request.bathrooms,
            "garages": request.garages,
        }
        return {key: value for key, value in payload.items() if value is not None}

    async def _invoke(self, payload: dict[str, Any]) -> dict[str, Any]:
        self.logger.debug("Invoking inference function", payload=payload)
        try:
            raw = await asyncio.wait_for(self.invoker.invoke(payload), self.timeout)
        except asyncio.TimeoutError as e:
            raise InferenceInvocationError(
                f"Inference function timed out after {self.timeout}s"
            ) from e
        except InferenceError as e:
            self.logger.error(
                "Inference invocation failed",
                error=e.message,
                error_type=type(e).__name__,
            )
            raise

        return self.parse_response(raw)

    @staticmethod
    def parse_response(raw: Any) -> dict[str, Any]:
        """Unwrap a plain JSON object or an API Gateway style envelope."""
        if isinstance(raw, (bytes, str)):
            try:
                raw = json.loads(raw)
            except json.JSONDecodeError as e:
                raise InferenceInvocationError(
                    f"Inference function returned invalid JSON: {e}"
                ) from e

        if not isinstance(raw, dict):
            raise InferenceInvocationError(
                f"Unexpected inference response type: {type(raw).__name__}"
            )

        if raw.get("errorMessage") or raw.get("errorType"):
            raise InferenceInvocationError(
                f"Lambda Error: {raw.get('errorMessage') or raw.get('errorType')}"
            )

        if "statusCode" in raw:
            status_code = raw["statusCode"]
            body = raw.get("body")
            if status_code != 200:
                raise InferenceInvocationError(
                    f"Lambda returned status {status_code}: {body}"
                )
            if isinstance(body, str):
                try:
                    body = json.loads(body)
                except json.JSONDecodeError as e:
                    raise InferenceInvocationError(
                        f"Inference function returned invalid body: {e}"
                    ) from e
            if not isinstance(body, dict):
                raise InferenceInvocationError("Inference response body is not an object")
            return body

        return raw
