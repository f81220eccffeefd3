"""Account endpoints: sign up, sign in, sign out, current user and profile."""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from ...core import ApiModel, AuthenticationError, Settings, ValidationError, get_logger
from ...store import ProfileUpdate, SignInRequest, SignUpRequest, User
from ..deps import CurrentUser, SettingsDep, Users, session_token

logger = get_logger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


class SignedOut(ApiModel):
    success: bool = True
    message: str = "Signed out successfully"


def _set_session_cookie(response: Response, settings: Settings, token: str) -> None:
    response.set_cookie(
        key=settings.session_cookie,
        value=token,
        max_age=settings.session_ttl,
        path="/",
        httponly=True,
        samesite="strict",
        secure=settings.environment == "production",
    )


@router.post("/signup", response_model=User, status_code=status.HTTP_201_CREATED)
async def sign_up(body: SignUpRequest, response: Response, users: Users, settings: SettingsDep) -> User:
    user = users.create_user(body.email, body.password, body.name)
    _set_session_cookie(response, settings, users.create_session(user.id))
    logger.info("user_signed_up", user_id=user.id)
    return user


@router.post("/signin", response_model=User)
async def sign_in(body: SignInRequest, response: Response, users: Users, settings: SettingsDep) -> User:
    user = users.authenticate(body.email, body.password)
    if user is None:
        logger.info("sign_in_failed", email=body.email.lower())
        raise AuthenticationError("Invalid email or password", code="INVALID_CREDENTIALS")

    _set_session_cookie(response, settings, users.create_session(user.id))
    logger.info("user_signed_in", user_id=user.id)
    return user


@router.post("/signout", response_model=SignedOut)
async def sign_out(
    response: Response,
    users: Users,
    settings: SettingsDep,
    token: Annotated[str | None, Depends(session_token)],
) -> SignedOut:
    if token:
        users.delete_session(token)
    response.delete_cookie(settings.session_cookie, path="/")
    return SignedOut()


@router.get("/me", response_model=User)
async def me(user: CurrentUser) -> User:
    return user


@router.put("/update-profile", response_model=User)
async def update_profile(body: ProfileUpdate, user: CurrentUser, users: Users) -> User:
    """
    Change name and/or email.

    Unchanged values are ignored; a request that changes nothing is a 400.
    """
    name = body.name if body.name and body.name != user.name else None
    email = body.email if body.email and body.email != user.email else None
    if name is None and email is None:
        raise ValidationError("No updates provided", code="NO_UPDATES")

    updated = users.update_user(user.id, name=name, email=email)
    logger.info("profile_updated", user_id=user.id, name_changed=name is not None, email_changed=email is not None)
    return updated
