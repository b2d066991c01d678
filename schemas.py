"""
Collection schemas for users, profiles and posts

Each top-level model maps to one MongoDB collection named after it in
lowercase (`user`, `profile`, `post`). Embedded models (experience,
education, likes, comments) live inside their parent document and are never
stored on their own.
"""

from datetime import datetime
from typing import List, Optional

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, EmailStr, Field

from database import utcnow


class User(BaseModel):
    """Users collection schema (collection name: user)"""
    name: str = Field(..., description="Full name")
    email: EmailStr = Field(..., description="User email (unique)")
    password_hash: str = Field(..., description="BCrypt hashed password")
    avatar: Optional[str] = Field(None, description="Gravatar URL")
    date: datetime = Field(default_factory=utcnow)


class Social(BaseModel):
    youtube: Optional[str] = None
    twitter: Optional[str] = None
    facebook: Optional[str] = None
    linkedin: Optional[str] = None
    instagram: Optional[str] = None


class Experience(BaseModel):
    """Embedded in profile.experience, most recent first"""
    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    id: ObjectId = Field(default_factory=ObjectId, alias="_id")
    title: str
    company: str
    location: Optional[str] = None
    from_date: datetime = Field(..., alias="from")
    to_date: Optional[datetime] = Field(None, alias="to")
    current: bool = False
    description: Optional[str] = None


class Education(BaseModel):
    """Embedded in profile.education, most recent first"""
    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    id: ObjectId = Field(default_factory=ObjectId, alias="_id")
    school: str
    degree: str
    fieldofstudy: str
    from_date: datetime = Field(..., alias="from")
    to_date: Optional[datetime] = Field(None, alias="to")
    current: bool = False
    description: Optional[str] = None


class Profile(BaseModel):
    """Profiles collection schema (collection name: profile)"""
    user: str = Field(..., description="User ObjectId as string (unique)")
    company: Optional[str] = None
    website: Optional[str] = None
    location: Optional[str] = None
    bio: Optional[str] = None
    status: Optional[str] = None
    githubusername: Optional[str] = None
    skills: List[str] = Field(default_factory=list)
    social: Social = Field(default_factory=Social)
    experience: List[Experience] = Field(default_factory=list)
    education: List[Education] = Field(default_factory=list)
    date: datetime = Field(default_factory=utcnow)


class Like(BaseModel):
    user: str = Field(..., description="Liking user's id")


class Comment(BaseModel):
    """Embedded in post.comments, most recent first"""
    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    id: ObjectId = Field(default_factory=ObjectId, alias="_id")
    user: str
    text: str
    name: Optional[str] = None
    avatar: Optional[str] = None
    date: datetime = Field(default_factory=utcnow)


class Post(BaseModel):
    """Posts collection schema (collection name: post)"""
    user: str = Field(..., description="Author's user id")
    text: str
    name: Optional[str] = Field(None, description="Author name at the time of posting")
    avatar: Optional[str] = Field(None, description="Author avatar at the time of posting")
    like: List[Like] = Field(default_factory=list)
    comments: List[Comment] = Field(default_factory=list)
    date: datetime = Field(default_factory=utcnow)


def to_document(model: BaseModel) -> dict:
    """Dump a schema model the way it is stored (aliases such as `_id`, `from`)"""
    return model.model_dump(by_alias=True)
