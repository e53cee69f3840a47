"""
Authentication router for CISS Workforce.

Employees sign in with a one-time code sent to their phone; admins sign in
with email and password. Code delivery and verification are handled by
Supabase Auth.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from gotrue.errors import AuthApiError

from auth.supabase_client import get_supabase, user_to_dict
from auth.dependencies import get_current_user
from auth.models import (
    User,
    UserLogin,
    OtpRequest,
    OtpVerifyRequest,
    TokenResponse,
)
from config import settings
from models.common import to_e164

logger = logging.getLogger(__name__)

router = APIRouter()


def _require_supabase(supabase):
    if not supabase:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Authentication service not configured"
        )


def _token_response(response) -> TokenResponse:
    if not response.session or not response.user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials"
        )
    return TokenResponse(
        access_token=response.session.access_token,
        refresh_token=response.session.refresh_token,
        expires_in=response.session.expires_in or 3600,
        user=User.from_auth_data(user_to_dict(response.user)),
    )


@router.post("/otp/send")
async def send_otp(request: OtpRequest, supabase=Depends(get_supabase)):
    """
    Send a one-time sign-in code by SMS.
    """
    _require_supabase(supabase)
    phone = to_e164(request.phone_number, settings.default_country_code)

    try:
        supabase.auth.sign_in_with_otp({"phone": phone})
    except AuthApiError as e:
        logger.error(f"OTP send error: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Failed to send verification code. Please check the number and try again."
        )

    return {"message": "Verification code sent", "phone": phone}


@router.post("/otp/verify", response_model=TokenResponse)
async def verify_otp(request: OtpVerifyRequest, supabase=Depends(get_supabase)):
    """
    Exchange a one-time code for access and refresh tokens.
    """
    _require_supabase(supabase)
    phone = to_e164(request.phone_number, settings.default_country_code)

    try:
        response = supabase.auth.verify_otp({
            "phone": phone,
            "token": request.token,
            "type": "sms",
        })
    except AuthApiError as e:
        logger.info(f"OTP verification rejected: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired verification code"
        )

    return _token_response(response)


@router.post("/login", response_model=TokenResponse)
async def login(credentials: UserLogin, supabase=Depends(get_supabase)):
    """
    Admin login with email and password.
    """
    _require_supabase(supabase)

    try:
        response = supabase.auth.sign_in_with_password({
            "email": credentials.email,
            "password": credentials.password,
        })
    except AuthApiError as e:
        logger.error(f"Login error: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials"
        )

    return _token_response(response)


@router.get("/me", response_model=User)
async def get_me(current_user: User = Depends(get_current_user)):
    """
    Get the current user's information, including role claims.
    """
    return current_user
