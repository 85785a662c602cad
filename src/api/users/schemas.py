from pydantic import BaseModel

from src.core.context import CallerIdentity


class UserProfileResponse(BaseModel):
    sub: str
    email: str | None = None
    username: str | None = None
    email_verified: bool = False
    given_name: str | None = None
    family_name: str | None = None
    groups: list[str] = []
    user_type: str | None = None

    @classmethod
    def from_identity(cls, identity: CallerIdentity) -> "UserProfileResponse":
        return cls(
            sub=identity.sub,
            email=identity.email,
            username=identity.username,
            email_verified=identity.email_verified,
            given_name=identity.given_name,
            family_name=identity.family_name,
            groups=identity.groups,
            user_type=identity.user_type,
        )
