# accountflow/routers/auth_router.py
from fastapi import APIRouter, Depends
import logging

from ..application.services.account_service import AccountService
from ..application.services.user_store import User
from ..config import Settings
from ..dependencies import get_account_service, get_settings_dep
from ..exceptions import create_success_response
from ..schemas import (
    SendCodeRequest, SendCodeResponse, RegisterRequest, LoginRequest,
    AuthResponse, MessageResponse, ErrorResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
}


def _user_payload(user: User) -> dict:
    return user.to_dict()


@router.post("/send-code", response_model=SendCodeResponse, responses=ERROR_RESPONSES)
async def send_code(
    payload: SendCodeRequest,
    account_service: AccountService = Depends(get_account_service),
    cfg: Settings = Depends(get_settings_dep),
):
    """
    Issue a verification code for a phone number.

    Delivery is simulated; when EXPOSE_CODE_IN_RESPONSE is enabled the code is
    returned to the caller so it can be shown on screen.
    """
    code = account_service.send_code(payload.phone)
    data = {
        "phone": payload.phone.strip(),
        "expires_in": cfg.VERIFICATION_CODE_TTL_SECONDS,
    }
    if cfg.EXPOSE_CODE_IN_RESPONSE:
        data["code"] = code
    return create_success_response("Verification code sent", data)


@router.post("/register", status_code=201, response_model=AuthResponse, responses=ERROR_RESPONSES)
async def register(payload: RegisterRequest, account_service: AccountService = Depends(get_account_service)):
    """
    Verify the code, create the account and log the new user in.
    """
    user = account_service.register(payload.username, payload.phone, payload.email, payload.code)
    return create_success_response("Registration successful", _user_payload(user))


@router.post("/login", response_model=AuthResponse, responses=ERROR_RESPONSES)
async def login(payload: LoginRequest, account_service: AccountService = Depends(get_account_service)):
    user = account_service.login(payload.phone, payload.code)
    return create_success_response("Login successful", _user_payload(user))


@router.post("/logout", response_model=MessageResponse)
async def logout(account_service: AccountService = Depends(get_account_service)):
    account_service.logout()
    return {"success": True, "message": "Logout successful"}


@router.get("/me", response_model=AuthResponse)
async def me(account_service: AccountService = Depends(get_account_service)):
    user = account_service.current_user()
    if user is None:
        return create_success_response("No user logged in", None)
    return create_success_response("Current user", _user_payload(user))
