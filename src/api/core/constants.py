API_VERSION_HEADER = "X-Rent-Estimator-Version"

# JWT Configuration (Cognito signs access tokens with RS256)
JWT_ALGORITHM = "RS256"
COGNITO_TOKEN_USE = "access"

# Prediction defaults
DEFAULT_CURRENCY = "ARS"

# Pagination
DEFAULT_RECENT_LIMIT = 10
MAX_RECENT_LIMIT = 100

# Paths that never carry an identity (no token verification attempted)
SKIP_AUTH_PATHS = {
    "/openapi.json",
    "/docs",
    "/redoc",
    "/health",
    "/health/liveness",
    "/",
}
