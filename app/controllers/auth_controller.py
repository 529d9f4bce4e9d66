from fastapi import APIRouter, Depends, status
from app.schemas.auth import (
    SignupRequest,
    LoginRequest,
    ForgotPasswordRequest,
    VerifyOtpRequest,
    ResetPasswordRequest,
    SignupResponse,
    LoginResponse,
    VerifyTokenResponse,
    VerifyOtpResponse,
)
from app.schemas.common import MessageResponse
from app.services.auth_service import (
    register_user,
    login_user,
    request_password_reset,
    verify_reset_otp,
    reset_password,
)
from app.utils.dependencies import get_current_user

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


@router.post("/signup", response_model=SignupResponse, status_code=status.HTTP_201_CREATED)
async def signup(request: SignupRequest):
    """Register a new buyer or seller"""
    user = await register_user(
        name=request.name,
        email=request.email,
        phone=request.phone,
        password=request.password,
        confirm_password=request.confirm_password,
        role=request.role,
    )
    return {"success": True, "message": "Signup successful", "data": {"user": user}}


@router.post("/login", response_model=LoginResponse)
async def login(request: LoginRequest):
    """Login and get a 24h access token"""
    result = await login_user(email=request.email, password=request.password)
    return {"success": True, "message": "Login successful", "data": result}


@router.get("/verify", response_model=VerifyTokenResponse)
async def verify(user: dict = Depends(get_current_user)):
    """Check a stored token and return the user it belongs to"""
    return {"success": True, "data": {"user": user}}


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(request: ForgotPasswordRequest):
    """Email a one-time code for password reset"""
    await request_password_reset(request.email)
    return {"success": True, "message": "OTP sent to email"}


@router.post("/verify-otp", response_model=VerifyOtpResponse)
async def verify_otp(request: VerifyOtpRequest):
    """Exchange a valid one-time code for a 15-minute reset token"""
    reset_token = await verify_reset_otp(email=request.email, otp=request.otp)
    return {"success": True, "message": "OTP verified", "data": {"reset_token": reset_token}}


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password_endpoint(request: ResetPasswordRequest):
    """Set a new password using a reset token"""
    await reset_password(
        email=request.email,
        reset_token=request.reset_token,
        new_password=request.new_password,
    )
    return {"success": True, "message": "Password reset successfully"}
