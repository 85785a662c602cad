"""Errors raised by the rent prediction pipeline."""


class InferenceError(Exception):
    """Base class for failures talking to the inference function."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InferenceFunctionNotFoundError(InferenceError):
    """The configured Lambda function does not exist in the target region."""


class InvalidInferencePayloadError(InferenceError):
    """The inference function rejected the request payload."""


class InferenceCredentialsError(InferenceError):
    """AWS credentials were rejected or are missing."""


class InferenceInvocationError(InferenceError):
    """Any other invocation failure: timeouts, non-200 bodies, function errors."""


class PredictionFailedError(Exception):
    """Request-level failure surfaced by the orchestrator to the HTTP layer."""

    def __init__(self, message: str, execution_time_ms: int):
        self.message = message
        self.execution_time_ms = execution_time_ms
        super().__init__(message)

    def to_response_dict(self) -> dict:
        return {
            "error": True,
            "message": self.message,
            "executionTimeMs": self.execution_time_ms,
        }
