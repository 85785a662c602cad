"""Caller identity resolved from a Cognito access token."""

from dataclasses import dataclass, field


@dataclass
class CallerIdentity:
    """Who is calling. Only ``sub`` is guaranteed."""

    sub: str
    email: str | None = None
    username: str | None = None
    email_verified: bool = False
    given_name: str | None = None
    family_name: str | None = None
    groups: list[str] = field(default_factory=list)
    user_type: str | None = None

    def __post_init__(self):
        if not self.sub:
            raise ValueError("sub is required in caller identity")
