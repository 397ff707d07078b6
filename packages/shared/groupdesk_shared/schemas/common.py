from enum import Enum
from typing import Optional
from pydantic import BaseModel


class MemberRole(str, Enum):
    ADMIN = "admin"
    MEMBER = "member"

    @classmethod
    def from_value(cls, value: Optional[str]) -> "MemberRole":
        """Parse a role name case-insensitively. Raises ValueError if unknown."""
        if value is None:
            raise ValueError("Role is required")
        normalized = value.strip().lower()
        for role in cls:
            if role.value == normalized:
                return role
        raise ValueError(f"Unknown role '{value}'")


class SuccessResponse(BaseModel):
    data: bool


class ErrorDetail(BaseModel):
    code: str
    message: str
    status: int


class ErrorResponse(BaseModel):
    error: ErrorDetail
