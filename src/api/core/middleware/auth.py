import structlog
from fastapi import Request

from src.api.core.constants import SKIP_AUTH_PATHS
from src.modules.user.cognito import InvalidTokenError

logger = structlog.get_logger(__name__)


def extract_bearer_token(authorization: str) -> str | None:
    parts = authorization.split(" ")
    if len(parts) != 2 or parts[0].lower() != "bearer" or not parts[1]:
        return None
    return parts[1]


async def auth_middleware(request: Request, call_next):
    """
    Resolve an optional caller identity from a Cognito bearer token.

    Authentication is never enforced here: missing or invalid tokens leave
    ``request.state.identity`` as None and the endpoint decides.
    """
    request.state.identity = None

    if request.url.path in SKIP_AUTH_PATHS:
        return await call_next(request)

    authorization = request.headers.get("Authorization", "")
    if not authorization:
        return await call_next(request)

    token = extract_bearer_token(authorization)
    if token is None:
        logger.debug("Ignoring malformed authorization header", path=request.url.path)
        return await call_next(request)

    verifier = getattr(request.app.state, "token_verifier", None)
    if verifier is None:
        logger.warning("No token verifier configured, treating caller as anonymous")
        return await call_next(request)

    try:
        request.state.identity = await verifier.identify(token)
    except (InvalidTokenError, ValueError) as e:
        logger.info("Token rejected, continuing anonymously", reason=str(e))
    else:
        structlog.contextvars.bind_contextvars(sub=request.state.identity.sub)
        logger.debug("Caller identified", sub=request.state.identity.sub)

    return await call_next(request)
