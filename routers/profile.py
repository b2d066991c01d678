"""
Profiles: own profile upsert, public listing, experience/education entries
and the GitHub repository lookup
"""

import logging
from datetime import date, datetime, time, timezone
from typing import Any, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from errors import NotFound
from github import GithubClient, get_github
from schemas import Education, Experience
from security import Identity, get_current_identity
from stores import (
    PROFILE_FIELDS,
    SOCIAL_FIELDS,
    PostStore,
    ProfileStore,
    UserStore,
    get_post_store,
    get_profile_store,
    get_user_store,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/profile", tags=["profile"])


def _required(value: str, message: str) -> str:
    if not value or not value.strip():
        raise ValueError(message)
    return value.strip()


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class ProfilePayload(BaseModel):
    status: str = Field("", validate_default=True)
    skills: str = Field("", validate_default=True)
    company: Optional[str] = None
    website: Optional[str] = None
    location: Optional[str] = None
    bio: Optional[str] = None
    githubusername: Optional[str] = None
    youtube: Optional[str] = None
    twitter: Optional[str] = None
    facebook: Optional[str] = None
    linkedin: Optional[str] = None
    instagram: Optional[str] = None

    @field_validator("status")
    @classmethod
    def status_required(cls, v: str) -> str:
        return _required(v, "Status is required")

    @field_validator("skills")
    @classmethod
    def skills_required(cls, v: str) -> str:
        return _required(v, "Skills is required")


class DatedEntryPayload(BaseModel):
    """Shared `from`/`to`/`current` fields of experience and education entries

    Dates arrive as `YYYY-MM-DD` or as full ISO datetimes; an empty string
    means no date.
    """

    model_config = ConfigDict(populate_by_name=True)

    from_date: Optional[datetime] = Field(None, alias="from")
    to_date: Optional[datetime] = Field(None, alias="to")
    current: bool = False
    description: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def from_always_checked(cls, data: Any) -> Any:
        # a missing `from` goes through the field validators under its alias
        if isinstance(data, dict) and "from" not in data and "from_date" not in data:
            data = {**data, "from": None}
        return data

    @field_validator("from_date", "to_date", mode="before")
    @classmethod
    def parse_date(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip()
            if not v:
                return None
            if len(v) == 10:
                return datetime.combine(date.fromisoformat(v), time.min, tzinfo=timezone.utc)
        return v

    @field_validator("from_date")
    @classmethod
    def from_required(cls, v: Optional[datetime]) -> datetime:
        if v is None:
            raise ValueError("From date is required")
        return v


class ExperiencePayload(DatedEntryPayload):
    title: str = Field("", validate_default=True)
    company: str = Field("", validate_default=True)
    location: Optional[str] = None

    @field_validator("title")
    @classmethod
    def title_required(cls, v: str) -> str:
        return _required(v, "Title is required")

    @field_validator("company")
    @classmethod
    def company_required(cls, v: str) -> str:
        return _required(v, "Company is required")

    def to_entry(self) -> Experience:
        return Experience(
            title=self.title,
            company=self.company,
            location=self.location,
            from_date=_as_utc(self.from_date),
            to_date=_as_utc(self.to_date),
            current=self.current,
            description=self.description,
        )


class EducationPayload(DatedEntryPayload):
    school: str = Field("", validate_default=True)
    degree: str = Field("", validate_default=True)
    fieldofstudy: str = Field("", validate_default=True)

    @field_validator("school")
    @classmethod
    def school_required(cls, v: str) -> str:
        return _required(v, "School is required")

    @field_validator("degree")
    @classmethod
    def degree_required(cls, v: str) -> str:
        return _required(v, "Degree is required")

    @field_validator("fieldofstudy")
    @classmethod
    def fieldofstudy_required(cls, v: str) -> str:
        return _required(v, "Field of study is required")

    def to_entry(self) -> Education:
        return Education(
            school=self.school,
            degree=self.degree,
            fieldofstudy=self.fieldofstudy,
            from_date=_as_utc(self.from_date),
            to_date=_as_utc(self.to_date),
            current=self.current,
            description=self.description,
        )


# @route GET /api/profile/me  (private)
@router.get("/me")
def my_profile(identity: Identity = Depends(get_current_identity),
               profiles: ProfileStore = Depends(get_profile_store)):
    profile = profiles.get_by_user(identity.id)
    if profile is None:
        raise NotFound("There is no profile for this user", status_code=400)
    return profiles.populate([profile])[0]


# @route POST /api/profile  (private)
@router.post("")
def save_profile(payload: ProfilePayload, identity: Identity = Depends(get_current_identity),
                 profiles: ProfileStore = Depends(get_profile_store)):
    data = payload.model_dump()
    fields = {key: data[key] for key in PROFILE_FIELDS + ("skills",)}
    social = {key: data[key] for key in SOCIAL_FIELDS}
    profile = profiles.upsert(identity.id, fields, social)
    return profiles.populate([profile])[0]


# @route GET /api/profile  (public)
@router.get("")
def all_profiles(profiles: ProfileStore = Depends(get_profile_store)):
    return profiles.populate(profiles.list_all())


# @route GET /api/profile/user/{user_id}  (public)
@router.get("/user/{user_id}")
def profile_by_user(user_id: str, profiles: ProfileStore = Depends(get_profile_store)):
    profile = profiles.get_by_user(user_id)
    if profile is None:
        raise NotFound("Profile not found", status_code=400)
    return profiles.populate([profile])[0]


# @route DELETE /api/profile  (private)
@router.delete("")
def delete_account(identity: Identity = Depends(get_current_identity),
                   profiles: ProfileStore = Depends(get_profile_store),
                   posts: PostStore = Depends(get_post_store),
                   users: UserStore = Depends(get_user_store)):
    removed_posts = posts.delete_by_user(identity.id)
    profiles.delete_by_user(identity.id)
    users.delete(identity.id)
    logger.info(f"[PROFILE] Deleted user {identity.id} with {removed_posts} posts")
    return {"msg": "User deleted"}


# @route PUT /api/profile/experience  (private)
@router.put("/experience")
def add_experience(payload: ExperiencePayload, identity: Identity = Depends(get_current_identity),
                   profiles: ProfileStore = Depends(get_profile_store)):
    profile = profiles.add_experience(identity.id, payload.to_entry())
    return profiles.populate([profile])[0]


# @route DELETE /api/profile/experience/{exp_id}  (private)
@router.delete("/experience/{exp_id}")
def delete_experience(exp_id: str, identity: Identity = Depends(get_current_identity),
                      profiles: ProfileStore = Depends(get_profile_store)):
    profile = profiles.remove_experience(identity.id, exp_id)
    return profiles.populate([profile])[0]


# @route PUT /api/profile/education  (private)
@router.put("/education")
def add_education(payload: EducationPayload, identity: Identity = Depends(get_current_identity),
                  profiles: ProfileStore = Depends(get_profile_store)):
    profile = profiles.add_education(identity.id, payload.to_entry())
    return profiles.populate([profile])[0]


# @route DELETE /api/profile/education/{edu_id}  (private)
@router.delete("/education/{edu_id}")
def delete_education(edu_id: str, identity: Identity = Depends(get_current_identity),
                     profiles: ProfileStore = Depends(get_profile_store)):
    profile = profiles.remove_education(identity.id, edu_id)
    return profiles.populate([profile])[0]


# @route GET /api/profile/github/{username}  (public)
@router.get("/github/{username}")
def github_repos(username: str, github: GithubClient = Depends(get_github)):
    return github.latest_repos(username)
