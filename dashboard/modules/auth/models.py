"""
Authentication module data models.

Request bodies for the login endpoints and the registration lookup used
by school-admin login. The Session itself is a shared model.
"""

from typing import Optional, Union
from pydantic import BaseModel, Field


class SendOtpRequest(BaseModel):
    """Body for /dashboard/send-login-otp and /send-otp."""

    phone: str = Field(..., min_length=1, description="Phone number to send the OTP to")


class VerifyOtpRequest(BaseModel):
    """Body for /dashboard/login and /verify-otp."""

    phone: str = Field(..., min_length=1, description="Phone number the OTP was sent to")
    otp: str = Field(..., min_length=1, description="OTP code")


class RegistrationCheck(BaseModel):
    """Response from /check-registration/{phone}."""

    registered: bool = Field(default=False, description="Whether the phone is registered")
    id: Optional[Union[int, str]] = Field(None, description="Registration ID")
    name: Optional[str] = Field(None, description="Registered name")
    school: Optional[str] = Field(None, description="Registered school")
    district: Optional[str] = Field(None, description="Registered district")

    model_config = {"extra": "ignore"}


class CountdownTick(BaseModel):
    """One tick of the visible session countdown."""

    remaining_ms: int = Field(..., ge=0, description="Milliseconds until expiry")
    display: str = Field(..., description="Remaining time as MM:SS")
    warning: bool = Field(default=False, description="Whether expiry is close")
