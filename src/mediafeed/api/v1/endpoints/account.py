"""Account endpoints: registration, login and profile picture."""

from fastapi import APIRouter, status

from mediafeed.api.v1.dependencies import IdentityRegistryDep
from mediafeed.schemas.documents import User
from mediafeed.schemas.user import LoginRequest, ProfilePictureUpdate, RegisterRequest, UserOut

router = APIRouter(prefix="/account", tags=["account"])


def _to_user_out(user: User) -> UserOut:
    return UserOut(
        user_id=user.user_id,
        username=user.username,
        profile_pic_url=user.profile_pic_url,
    )


@router.post("/register", response_model=UserOut, status_code=status.HTTP_201_CREATED)
async def register(payload: RegisterRequest, registry: IdentityRegistryDep) -> UserOut:
    """Register a new user.

    Returns 409 if the normalized username is already taken.
    """
    user = registry.register(payload.username, profile_pic_url=payload.profile_pic_url)
    return _to_user_out(user)


@router.post("/login", response_model=UserOut)
async def login(payload: LoginRequest, registry: IdentityRegistryDep) -> UserOut:
    """Look up the user registered under a username."""
    return _to_user_out(registry.login(payload.username))


@router.get("/{user_id}", response_model=UserOut)
async def get_user(user_id: str, registry: IdentityRegistryDep) -> UserOut:
    """Return a user by id."""
    return _to_user_out(registry.get_user(user_id))


@router.put("/{user_id}/profile-picture", response_model=UserOut)
async def update_profile_picture(
    user_id: str,
    payload: ProfilePictureUpdate,
    registry: IdentityRegistryDep,
) -> UserOut:
    """Replace a user's profile picture URL."""
    return _to_user_out(registry.update_profile_picture(user_id, payload.profile_pic_url))
