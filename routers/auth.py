"""
Login and current-user lookup
"""

import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel, EmailStr, Field, field_validator

from errors import NotFound, ValidationFailed
from routers.users import TokenResponse
from security import Identity, TokenService, get_current_identity, get_token_service, verify_password
from stores import UserStore, get_user_store, serialize_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


class LoginPayload(BaseModel):
    email: EmailStr
    password: str = Field("", validate_default=True)

    @field_validator("password")
    @classmethod
    def password_required(cls, v: str) -> str:
        if not v:
            raise ValueError("Password is required")
        return v


# @route GET /api/auth  (private)
@router.get("")
def current_user(identity: Identity = Depends(get_current_identity),
                 users: UserStore = Depends(get_user_store)):
    user = users.get(identity.id)
    if user is None:
        raise NotFound("User not found")
    return serialize_user(user)


# @route POST /api/auth  (public)
@router.post("", response_model=TokenResponse)
def login(payload: LoginPayload, users: UserStore = Depends(get_user_store),
          tokens: TokenService = Depends(get_token_service)):
    user = users.find_by_email(str(payload.email))
    if not user or not verify_password(payload.password, user.get("password_hash", "")):
        logger.info("[AUTH] Failed login attempt")
        raise ValidationFailed([{"msg": "Invalid credentials"}])
    return {"token": tokens.issue(str(user["_id"]))}
