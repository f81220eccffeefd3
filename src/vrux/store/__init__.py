"""Domain stores: templates, shared components, users and sessions."""

from .templates import Template, TemplateCreate, TemplateStore, LikeState
from .shares import SharedComponent, ShareCreate, ShareUpdate, ShareLike, SharePage, ShareStore, TagCount
from .users import User, UserStore, SignInRequest, SignUpRequest, ProfileUpdate, UNLIMITED

__all__ = [
    "Template",
    "TemplateCreate",
    "TemplateStore",
    "LikeState",
    "SharedComponent",
    "ShareCreate",
    "ShareUpdate",
    "ShareLike",
    "SharePage",
    "ShareStore",
    "TagCount",
    "User",
    "UserStore",
    "SignInRequest",
    "SignUpRequest",
    "ProfileUpdate",
    "UNLIMITED",
]
