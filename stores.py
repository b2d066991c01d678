"""
Document stores for users, profiles and posts

Each store wraps one collection of the injected `Database`. Lookups return
None when a document is absent; mutations raise the errors in `errors.py`.
Sub-document changes (likes, comments, experience, education) are single
conditional updates so two concurrent requests cannot both apply them.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from bson import ObjectId
from fastapi import Depends
from pymongo import DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

from database import Database, get_db, to_object_id
from errors import Conflict, NotFound, Unauthorized, ValidationFailed
from schemas import Comment, Education, Experience, Like, Post, Profile, Social, User, to_document
from security import gravatar_url, hash_password

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("company", "website", "location", "bio", "status", "githubusername")
SOCIAL_FIELDS = tuple(Social.model_fields)


def serialize_document(value: Any) -> Any:
    """Make a Mongo document JSON friendly: `_id` -> `id`, ObjectId -> str"""
    if isinstance(value, dict):
        out = {}
        for key, item in value.items():
            out["id" if key == "_id" else key] = serialize_document(item)
        return out
    if isinstance(value, list):
        return [serialize_document(item) for item in value]
    if isinstance(value, ObjectId):
        return str(value)
    return value


def serialize_user(user_doc: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": str(user_doc.get("_id")),
        "name": user_doc.get("name"),
        "email": user_doc.get("email"),
        "avatar": user_doc.get("avatar"),
        "date": user_doc.get("date"),
    }


def parse_skills(skills: str) -> List[str]:
    return [skill.strip() for skill in skills.split(",") if skill.strip()]


class UserStore:
    def __init__(self, database: Database):
        self.collection = database.users

    def get(self, user_id: str) -> Optional[Dict[str, Any]]:
        oid = to_object_id(user_id)
        if oid is None:
            return None
        return self.collection.find_one({"_id": oid})

    def find_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        return self.collection.find_one({"email": email.lower()})

    def get_many(self, user_ids: Iterable[str]) -> Dict[str, Dict[str, Any]]:
        oids = [oid for oid in (to_object_id(uid) for uid in set(user_ids)) if oid is not None]
        if not oids:
            return {}
        return {str(doc["_id"]): doc for doc in self.collection.find({"_id": {"$in": oids}})}

    def create(self, name: str, email: str, password: str) -> Dict[str, Any]:
        email = email.lower()
        if self.find_by_email(email):
            raise ValidationFailed([{"msg": "User already exists"}])
        user = User(
            name=name,
            email=email,
            password_hash=hash_password(password),
            avatar=gravatar_url(email),
        )
        doc = to_document(user)
        try:
            result = self.collection.insert_one(doc)
        except DuplicateKeyError:
            raise ValidationFailed([{"msg": "User already exists"}])
        doc["_id"] = result.inserted_id
        logger.info(f"[USERS] Registered user {result.inserted_id}")
        return doc

    def delete(self, user_id: str) -> bool:
        oid = to_object_id(user_id)
        if oid is None:
            return False
        return self.collection.delete_one({"_id": oid}).deleted_count > 0


class ProfileStore:
    def __init__(self, database: Database):
        self.collection = database.profiles
        self.users = UserStore(database)

    def get_by_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        return self.collection.find_one({"user": user_id})

    def list_all(self) -> List[Dict[str, Any]]:
        return list(self.collection.find())

    def populate(self, profiles: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Serialize profiles with `user` expanded to {id, name, avatar}"""
        users = self.users.get_many(p["user"] for p in profiles)
        out = []
        for profile in profiles:
            data = serialize_document(profile)
            user = users.get(profile["user"])
            data["user"] = {
                "id": profile["user"],
                "name": user.get("name") if user else None,
                "avatar": user.get("avatar") if user else None,
            }
            out.append(data)
        return out

    def upsert(self, user_id: str, fields: Dict[str, Any], social: Dict[str, Any]) -> Dict[str, Any]:
        """Create the profile or merge provided fields into it

        Empty values in `fields` are ignored so they never erase stored data;
        `social` replaces the stored links as a whole.
        """
        updates: Dict[str, Any] = {key: value for key, value in fields.items() if value}
        if isinstance(updates.get("skills"), str):
            updates["skills"] = parse_skills(updates["skills"])
        updates["social"] = Social(**{k: v for k, v in social.items() if v}).model_dump(exclude_none=True)

        defaults = to_document(Profile(user=user_id))
        on_insert = {key: value for key, value in defaults.items() if key not in updates and key != "user"}

        profile = self.collection.find_one_and_update(
            {"user": user_id},
            {"$set": updates, "$setOnInsert": on_insert},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        logger.info(f"[PROFILE] Saved profile for user {user_id}")
        return profile

    def delete_by_user(self, user_id: str) -> bool:
        return self.collection.delete_one({"user": user_id}).deleted_count > 0

    def add_experience(self, user_id: str, entry: Experience) -> Dict[str, Any]:
        return self._add_entry(user_id, "experience", to_document(entry))

    def remove_experience(self, user_id: str, entry_id: str) -> Dict[str, Any]:
        return self._remove_entry(user_id, "experience", entry_id, "Experience not found")

    def add_education(self, user_id: str, entry: Education) -> Dict[str, Any]:
        return self._add_entry(user_id, "education", to_document(entry))

    def remove_education(self, user_id: str, entry_id: str) -> Dict[str, Any]:
        return self._remove_entry(user_id, "education", entry_id, "Education not found")

    def _add_entry(self, user_id: str, list_name: str, entry: Dict[str, Any]) -> Dict[str, Any]:
        profile = self.collection.find_one_and_update(
            {"user": user_id},
            {"$push": {list_name: {"$each": [entry], "$position": 0}}},
            return_document=ReturnDocument.AFTER,
        )
        if profile is None:
            raise NotFound("There is no profile for this user")
        return profile

    def _remove_entry(self, user_id: str, list_name: str, entry_id: str, missing_msg: str) -> Dict[str, Any]:
        oid = to_object_id(entry_id)
        profile = None
        if oid is not None:
            profile = self.collection.find_one_and_update(
                {"user": user_id, f"{list_name}._id": oid},
                {"$pull": {list_name: {"_id": oid}}},
                return_document=ReturnDocument.AFTER,
            )
        if profile is None:
            if self.get_by_user(user_id) is None:
                raise NotFound("There is no profile for this user")
            raise NotFound(missing_msg)
        return profile


class PostStore:
    def __init__(self, database: Database):
        self.collection = database.posts

    def create(self, author: Dict[str, Any], text: str) -> Dict[str, Any]:
        post = Post(
            user=str(author["_id"]),
            text=text,
            name=author.get("name"),
            avatar=author.get("avatar"),
        )
        doc = to_document(post)
        result = self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        logger.info(f"[POSTS] User {post.user} created post {result.inserted_id}")
        return doc

    def list_all(self) -> List[Dict[str, Any]]:
        return list(self.collection.find().sort("date", DESCENDING))

    def get(self, post_id: str) -> Optional[Dict[str, Any]]:
        oid = to_object_id(post_id)
        if oid is None:
            return None
        return self.collection.find_one({"_id": oid})

    def _require(self, post_id: str) -> Dict[str, Any]:
        post = self.get(post_id)
        if post is None:
            raise NotFound("Post not found")
        return post

    def delete(self, post_id: str, user_id: str) -> None:
        post = self._require(post_id)
        if post["user"] != user_id:
            raise Unauthorized("User not authorized")
        self.collection.delete_one({"_id": post["_id"]})
        logger.info(f"[POSTS] User {user_id} deleted post {post_id}")

    def delete_by_user(self, user_id: str) -> int:
        return self.collection.delete_many({"user": user_id}).deleted_count

    def like(self, post_id: str, user_id: str) -> List[Dict[str, Any]]:
        oid = to_object_id(post_id)
        post = None
        if oid is not None:
            post = self.collection.find_one_and_update(
                {"_id": oid, "like.user": {"$ne": user_id}},
                {"$push": {"like": {"$each": [to_document(Like(user=user_id))], "$position": 0}}},
                return_document=ReturnDocument.AFTER,
            )
        if post is None:
            self._require(post_id)
            raise Conflict("Post already liked")
        return post["like"]

    def unlike(self, post_id: str, user_id: str) -> List[Dict[str, Any]]:
        oid = to_object_id(post_id)
        post = None
        if oid is not None:
            post = self.collection.find_one_and_update(
                {"_id": oid, "like.user": user_id},
                {"$pull": {"like": {"user": user_id}}},
                return_document=ReturnDocument.AFTER,
            )
        if post is None:
            self._require(post_id)
            raise Conflict("Post has not yet been liked")
        return post["like"]

    def add_comment(self, post_id: str, author: Dict[str, Any], text: str) -> List[Dict[str, Any]]:
        oid = to_object_id(post_id)
        comment = Comment(
            user=str(author["_id"]),
            text=text,
            name=author.get("name"),
            avatar=author.get("avatar"),
        )
        post = None
        if oid is not None:
            post = self.collection.find_one_and_update(
                {"_id": oid},
                {"$push": {"comments": {"$each": [to_document(comment)], "$position": 0}}},
                return_document=ReturnDocument.AFTER,
            )
        if post is None:
            raise NotFound("Post not found")
        return post["comments"]

    def remove_comment(self, post_id: str, comment_id: str, user_id: str) -> List[Dict[str, Any]]:
        post = self._require(post_id)
        comment_oid = to_object_id(comment_id)
        comment = next((c for c in post.get("comments", []) if c["_id"] == comment_oid), None)
        if comment is None:
            raise NotFound("Comment does not exist")
        if comment["user"] != user_id:
            raise Unauthorized("User is not authorized")
        updated = self.collection.find_one_and_update(
            {"_id": post["_id"]},
            {"$pull": {"comments": {"_id": comment_oid}}},
            return_document=ReturnDocument.AFTER,
        )
        if updated is None:
            raise NotFound("Post not found")
        return updated["comments"]


def get_user_store(db: Database = Depends(get_db)) -> UserStore:
    return UserStore(db)


def get_profile_store(db: Database = Depends(get_db)) -> ProfileStore:
    return ProfileStore(db)


def get_post_store(db: Database = Depends(get_db)) -> PostStore:
    return PostStore(db)
