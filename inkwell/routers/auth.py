"""
FastAPI router for Auth system endpoints.

Provides authentication endpoints for registration, login, logout, password
change and per-device session management.
"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Request, Response

from common.utils import success_response
from common.utils.password import PasswordPolicy
from inkwell.auth import pipelines
from inkwell.auth.dependencies import (
    get_cookie_binder,
    get_credential_store,
    get_current_session_id,
    get_password_policy,
    get_session_manager,
    get_user_agent,
    get_user_repository,
    optional_auth,
    require_auth,
)
from inkwell.auth.models import User
from inkwell.auth.repositories import UserRepository
from inkwell.auth.services import CookieBinder, CredentialStore, SessionManager
from inkwell.schemas.auth import (
    ChangePasswordRequest,
    LoginRequest,
    RegisterRequest,
    SessionListResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", status_code=201)
async def register(
    body: RegisterRequest,
    response: Response,
    session_manager: Annotated[SessionManager, Depends(get_session_manager)],
    user_repository: Annotated[UserRepository, Depends(get_user_repository)],
    credential_store: Annotated[CredentialStore, Depends(get_credential_store)],
    password_policy: Annotated[PasswordPolicy, Depends(get_password_policy)],
    cookie_binder: Annotated[CookieBinder, Depends(get_cookie_binder)],
    user_agent: Annotated[str, Depends(get_user_agent)],
):
    """
    Register a new user account.

    Creates the account, signs the registering device in and sets the
    session cookie.
    """
    result = await pipelines.sign_up_pipeline(
        session_manager=session_manager,
        user_repository=user_repository,
        credential_store=credential_store,
        password_policy=password_policy,
        email=body.email,
        password=body.password,
        name=body.name,
        user_agent=user_agent
    )

    cookie_binder.attach(result["sessionToken"], response)

    return success_response(result)


@router.post("/login")
async def login(
    body: LoginRequest,
    response: Response,
    session_manager: Annotated[SessionManager, Depends(get_session_manager)],
    cookie_binder: Annotated[CookieBinder, Depends(get_cookie_binder)],
    user_agent: Annotated[str, Depends(get_user_agent)],
):
    """
    Sign in with email and password.

    Replaces any earlier session of the same device.
    """
    result = await pipelines.sign_in_pipeline(
        session_manager=session_manager,
        email=body.email,
        password=body.password,
        user_agent=user_agent
    )

    cookie_binder.attach(result["sessionToken"], response)

    return success_response(result)


@router.post("/logout")
async def logout(
    request: Request,
    response: Response,
    user: Annotated[Optional[User], Depends(optional_auth)],
    session_manager: Annotated[SessionManager, Depends(get_session_manager)],
    cookie_binder: Annotated[CookieBinder, Depends(get_cookie_binder)],
):
    """
    Sign out the current device.

    Always clears the cookie, so repeating it is harmless.
    """
    result = await pipelines.sign_out_pipeline(
        session_manager=session_manager,
        session_id=get_current_session_id(request) if user else None
    )

    cookie_binder.clear(response)

    return success_response(result)


@router.get("/session")
async def get_session(
    request: Request,
    session_manager: Annotated[SessionManager, Depends(get_session_manager)],
    cookie_binder: Annotated[CookieBinder, Depends(get_cookie_binder)],
):
    """
    Get the user behind the current session.

    Anonymous requests get a null user; a rejected token is a 401.
    """
    user = await pipelines.resolve_current_user_pipeline(
        session_manager=session_manager,
        token=cookie_binder.extract(request)
    )

    return success_response({
        "user": pipelines.format_user_response(user) if user else None
    })


@router.post("/change-password")
async def change_password(
    request: Request,
    body: ChangePasswordRequest,
    user: Annotated[User, Depends(require_auth)],
    session_manager: Annotated[SessionManager, Depends(get_session_manager)],
    password_policy: Annotated[PasswordPolicy, Depends(get_password_policy)],
):
    """
    Change the password of the signed-in user.

    Every other session of the user is revoked; the current one too unless
    keepCurrentSession is set.
    """
    current_session_id = get_current_session_id(request)

    result = await pipelines.change_password_pipeline(
        session_manager=session_manager,
        password_policy=password_policy,
        user=user,
        current_password=body.currentPassword,
        new_password=body.newPassword,
        keep_session_id=current_session_id if body.keepCurrentSession else None
    )

    return success_response(result)


@router.get("/sessions")
async def list_sessions(
    request: Request,
    user: Annotated[User, Depends(require_auth)],
    session_manager: Annotated[SessionManager, Depends(get_session_manager)],
):
    """
    List the active sessions of the signed-in user, newest first.
    """
    sessions = await pipelines.list_sessions_pipeline(
        session_manager=session_manager,
        user=user,
        current_session_id=get_current_session_id(request)
    )

    return success_response(
        SessionListResponse(sessions=sessions).model_dump(mode="json")
    )


@router.delete("/sessions/{session_id}")
async def revoke_session(
    session_id: str,
    request: Request,
    user: Annotated[User, Depends(require_auth)],
    session_manager: Annotated[SessionManager, Depends(get_session_manager)],
):
    """
    Sign out another device of the signed-in user.
    """
    result = await pipelines.revoke_session_pipeline(
        session_manager=session_manager,
        user=user,
        session_id=session_id,
        current_session_id=get_current_session_id(request)
    )

    return success_response(result)
