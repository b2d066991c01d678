"""
API routers, one per resource
"""

from . import auth, posts, profile, users

__all__ = ["auth", "posts", "profile", "users"]
