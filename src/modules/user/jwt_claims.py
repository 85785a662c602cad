from src.core.context import CallerIdentity


def extract_identity_from_claims(payload: dict) -> CallerIdentity:
    """Build the caller identity from verified Cognito token claims."""
    groups = payload.get("cognito:groups") or []
    if isinstance(groups, str):
        groups = [groups]

    return CallerIdentity(
        sub=payload.get("sub", ""),
        email=payload.get("email") or None,
        username=payload.get("username") or payload.get("cognito:username"),
        email_verified=bool(payload.get("email_verified", False)),
        given_name=payload.get("given_name"),
        family_name=payload.get("family_name"),
        groups=list(groups),
        user_type=payload.get("custom:user_type"),
    )
