from fastapi import APIRouter

from src.api.core.dependencies import CurrentIdentityDep
from src.api.core.messages import APIResponse, MessageCode
from src.api.users.schemas import UserProfileResponse

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me")
async def get_current_user_profile(
    identity: CurrentIdentityDep,
) -> APIResponse[UserProfileResponse]:
    """Profile of the caller as carried by their access token."""
    return APIResponse.success(
        message_code=MessageCode.SUCCESS,
        data=UserProfileResponse.from_identity(identity),
    )
