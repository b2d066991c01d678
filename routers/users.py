"""
Account registration
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, EmailStr, Field, field_validator

from security import TokenService, get_token_service
from stores import UserStore, get_user_store

router = APIRouter(prefix="/api/users", tags=["users"])


class RegisterPayload(BaseModel):
    name: str = Field("", validate_default=True)
    email: EmailStr
    password: str = Field("", validate_default=True)

    @field_validator("name")
    @classmethod
    def name_required(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Name is required")
        return v.strip()

    @field_validator("password")
    @classmethod
    def password_length(cls, v: str) -> str:
        if len(v) < 6:
            raise ValueError("Please enter a password with 6 or more characters")
        return v


class TokenResponse(BaseModel):
    token: str


# @route POST /api/users  (public)
@router.post("", response_model=TokenResponse)
def register(payload: RegisterPayload, users: UserStore = Depends(get_user_store),
             tokens: TokenService = Depends(get_token_service)):
    user = users.create(payload.name, str(payload.email), payload.password)
    return {"token": tokens.issue(str(user["_id"]))}
