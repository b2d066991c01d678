"""
Posts, likes and comments (all private)
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field, field_validator

from errors import NotFound
from security import Identity, get_current_identity
from stores import PostStore, UserStore, get_post_store, get_user_store, serialize_document

router = APIRouter(prefix="/api/posts", tags=["posts"])


class TextPayload(BaseModel):
    text: str = Field("", validate_default=True)

    @field_validator("text")
    @classmethod
    def text_required(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Text is required")
        return v


def _author(users: UserStore, identity: Identity) -> dict:
    user = users.get(identity.id)
    if user is None:
        raise NotFound("User not found")
    return user


# @route POST /api/posts
@router.post("")
def create_post(payload: TextPayload, identity: Identity = Depends(get_current_identity),
                posts: PostStore = Depends(get_post_store), users: UserStore = Depends(get_user_store)):
    post = posts.create(_author(users, identity), payload.text)
    return serialize_document(post)


# @route GET /api/posts
@router.get("")
def list_posts(identity: Identity = Depends(get_current_identity),
               posts: PostStore = Depends(get_post_store)):
    return serialize_document(posts.list_all())


# @route GET /api/posts/{post_id}
@router.get("/{post_id}")
def get_post(post_id: str, identity: Identity = Depends(get_current_identity),
             posts: PostStore = Depends(get_post_store)):
    post = posts.get(post_id)
    if post is None:
        raise NotFound("Post not found")
    return serialize_document(post)


# @route DELETE /api/posts/{post_id}
@router.delete("/{post_id}")
def delete_post(post_id: str, identity: Identity = Depends(get_current_identity),
                posts: PostStore = Depends(get_post_store)):
    posts.delete(post_id, identity.id)
    return {"msg": "Post removed"}


# @route PUT /api/posts/like/{post_id}
@router.put("/like/{post_id}")
def like_post(post_id: str, identity: Identity = Depends(get_current_identity),
              posts: PostStore = Depends(get_post_store)):
    return serialize_document(posts.like(post_id, identity.id))


# @route PUT /api/posts/unlike/{post_id}
@router.put("/unlike/{post_id}")
def unlike_post(post_id: str, identity: Identity = Depends(get_current_identity),
                posts: PostStore = Depends(get_post_store)):
    return serialize_document(posts.unlike(post_id, identity.id))


# @route POST /api/posts/comment/{post_id}
@router.post("/comment/{post_id}")
def add_comment(post_id: str, payload: TextPayload, identity: Identity = Depends(get_current_identity),
                posts: PostStore = Depends(get_post_store), users: UserStore = Depends(get_user_store)):
    comments = posts.add_comment(post_id, _author(users, identity), payload.text)
    return serialize_document(comments)


# @route DELETE /api/posts/comment/{post_id}/{comment_id}
@router.delete("/comment/{post_id}/{comment_id}")
def delete_comment(post_id: str, comment_id: str, identity: Identity = Depends(get_current_identity),
                   posts: PostStore = Depends(get_post_store)):
    return serialize_document(posts.remove_comment(post_id, comment_id, identity.id))
