from pydantic import BaseModel
from typing import Optional
from app.schemas.common import CamelModel


# Request fields are optional so the auth service can report which rule failed
class SignupRequest(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    password: Optional[str] = None
    confirm_password: Optional[str] = None
    role: Optional[str] = None


class LoginRequest(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None


class ForgotPasswordRequest(CamelModel):
    email: Optional[str] = None


class VerifyOtpRequest(CamelModel):
    email: Optional[str] = None
    otp: Optional[str] = None


class ResetPasswordRequest(CamelModel):
    email: Optional[str] = None
    reset_token: Optional[str] = None
    new_password: Optional[str] = None


class UserResponse(CamelModel):
    id: str
    name: str
    email: str
    phone: str
    role: str


class UserData(BaseModel):
    user: UserResponse


class LoginData(BaseModel):
    token: str
    user: UserResponse


class ResetTokenData(CamelModel):
    reset_token: str


class SignupResponse(CamelModel):
    success: bool = True
    message: str
    data: UserData


class LoginResponse(CamelModel):
    success: bool = True
    message: str
    data: LoginData


class VerifyTokenResponse(CamelModel):
    success: bool = True
    data: UserData


class VerifyOtpResponse(CamelModel):
    success: bool = True
    message: str
    data: ResetTokenData
