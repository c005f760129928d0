"""
Shared data models used across modules.

The authenticated Session is read by every feature module through the
auth module's SessionManager, so its shape lives here rather than in
any single module.
"""

from enum import Enum
from typing import Optional, Union
from pydantic import AliasChoices, BaseModel, Field

from .expiry import deadline_passed


class Role(str, Enum):
    """Dashboard roles, using the spelling the remote API sends."""

    FIELD_WORKER = "fieldworker"
    MANAGER = "manager"
    SUPER_ADMIN = "superadmin"
    SCHOOL_ADMIN = "schooladmin"

    @classmethod
    def parse(cls, value: Union["Role", str]) -> "Role":
        """
        Parse a role, accepting hyphenated spellings ("super-admin").

        Raises:
            ValueError: If the value is not one of the known roles
        """
        if isinstance(value, Role):
            return value
        return cls(str(value).strip().lower().replace("-", "").replace("_", ""))


class Session(BaseModel):
    """
    The authenticated actor.

    Built from the login response and persisted in the credential store.
    Usable only while now < expires_at; expires_at is fixed at login.
    """

    id: Union[int, str] = Field(
        ...,
        validation_alias=AliasChoices("id", "user_id"),
        description="User ID (numeric or opaque)",
    )
    phone: str = Field(..., description="Phone number used to log in")
    name: str = Field(default="", description="Display name")
    role: str = Field(..., description="Role as reported by the API")
    school: Optional[str] = Field(None, description="School affiliation")
    district: Optional[str] = Field(None, description="District affiliation")
    access_token: Optional[str] = Field(None, description="Session bearer credential")
    login_time: int = Field(..., description="Login time (epoch ms)")
    expires_at: int = Field(..., description="Absolute expiry (epoch ms)")

    model_config = {
        "frozen": True,
        "extra": "ignore",
        "populate_by_name": True,
    }

    def is_valid(self, now: int) -> bool:
        """Whether the session can still be used at the given time (epoch ms)."""
        return not deadline_passed(self.expires_at, now)

    def remaining_ms(self, now: int) -> int:
        return max(0, self.expires_at - now)
