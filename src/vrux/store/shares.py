"""
Share Store
Published component snapshots with views and likes, persisted to a JSON file.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Literal

from pydantic import Field
from pydantic import ValidationError as PydanticValidationError

from ..core import ApiModel, JSONParseError, NotFoundError, dumps, get_logger, loads_object
from ..core.id import new_share_id

logger = get_logger(__name__)

ShareSort = Literal["recent", "popular", "views"]

MAX_TAGS = 5


class SharedComponent(ApiModel):
    id: str
    code: str
    title: str
    description: str | None = None
    tags: list[str] = Field(default_factory=list)
    is_public: bool = True
    user_id: str
    user_name: str
    created_at: datetime
    updated_at: datetime
    views: int = 0
    likes: int = 0


class ShareCreate(ApiModel):
    code: str = Field(min_length=1)
    title: str = Field(min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    tags: list[str] = Field(default_factory=list, max_length=MAX_TAGS)
    is_public: bool = True


class ShareUpdate(ApiModel):
    """Partial update; unset fields are left alone."""

    title: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    tags: list[str] | None = Field(default=None, max_length=MAX_TAGS)
    is_public: bool | None = None


class ShareLike(ApiModel):
    liked: bool
    likes: int


class SharePage(ApiModel):
    shares: list[SharedComponent]
    total: int


class TagCount(ApiModel):
    tag: str
    count: int


def _now() -> datetime:
    return datetime.now(timezone.utc)


class ShareStore:
    """
    Share store backed by a JSON file.

    The file holds ``{"shares": [...], "userLikes": {user_id: [share_id]}}``.
    It is read once at construction and rewritten after every mutation.
    """

    def __init__(self, path: str | Path | None = None) -> None:
        self.path = Path(path) if path else None
        self._shares: dict[str, SharedComponent] = {}
        self._user_likes: dict[str, set[str]] = {}
        self._load()

    def __len__(self) -> int:
        return len(self._shares)

    def _load(self) -> None:
        if self.path is None or not self.path.exists():
            return
        try:
            data = loads_object(self.path.read_bytes())
            shares = [SharedComponent.model_validate(item) for item in data.get("shares", [])]
            likes = {user: set(ids) for user, ids in (data.get("userLikes") or {}).items()}
        except (OSError, JSONParseError, PydanticValidationError, TypeError, AttributeError) as e:
            # Unreadable file means an empty store
            logger.warning("share_store_load_failed", path=str(self.path), error=str(e))
            return

        self._shares = {share.id: share for share in shares}
        self._user_likes = likes
        logger.info("share_store_loaded", path=str(self.path), shares=len(self._shares))

    def _save(self) -> None:
        if self.path is None:
            return
        payload: dict[str, Any] = {
            "shares": [share.model_dump(mode="json", by_alias=True) for share in self._shares.values()],
            "userLikes": {user: sorted(ids) for user, ids in self._user_likes.items()},
        }
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_bytes(dumps(payload, indent=True))
        except OSError as e:
            logger.error("share_store_save_failed", path=str(self.path), error=str(e))

    def _visible(self, share: SharedComponent | None, viewer_id: str | None) -> bool:
        return share is not None and (share.is_public or share.user_id == viewer_id)

    def create(self, user_id: str, user_name: str, data: ShareCreate) -> SharedComponent:
        now = _now()
        share = SharedComponent(
            id=new_share_id(),
            user_id=user_id,
            user_name=user_name,
            created_at=now,
            updated_at=now,
            **data.model_dump(),
        )
        self._shares[share.id] = share
        self._save()
        logger.info("share_created", share_id=share.id, user_id=user_id, is_public=share.is_public)
        return share

    def get(self, share_id: str, viewer_id: str | None = None) -> SharedComponent | None:
        """Fetch a share and count the view; private shares are owner-only."""
        share = self._shares.get(share_id)
        if not self._visible(share, viewer_id):
            return None

        share.views += 1
        share.updated_at = _now()
        self._save()
        return share

    def update(self, share_id: str, user_id: str, updates: ShareUpdate) -> SharedComponent | None:
        """Apply an owner's update. Returns None when missing or not owned."""
        share = self._shares.get(share_id)
        if share is None or share.user_id != user_id:
            return None

        for key, value in updates.model_dump(exclude_unset=True).items():
            setattr(share, key, value)
        share.updated_at = _now()
        self._save()
        logger.info("share_updated", share_id=share_id, user_id=user_id)
        return share

    def delete(self, share_id: str, user_id: str) -> bool:
        share = self._shares.get(share_id)
        if share is None or share.user_id != user_id:
            return False

        del self._shares[share_id]
        for liked in self._user_likes.values():
            liked.discard(share_id)
        self._save()
        logger.info("share_deleted", share_id=share_id, user_id=user_id)
        return True

    def toggle_like(self, share_id: str, user_id: str) -> ShareLike:
        """
        Like or unlike a share for a user.

        Raises:
            NotFoundError: Share missing or private to someone else
        """
        share = self._shares.get(share_id)
        if not self._visible(share, user_id):
            raise NotFoundError("Share not found or access denied")

        liked_ids = self._user_likes.setdefault(user_id, set())
        if share_id in liked_ids:
            liked_ids.discard(share_id)
            share.likes = max(0, share.likes - 1)
            liked = False
        else:
            liked_ids.add(share_id)
            share.likes += 1
            liked = True

        share.updated_at = _now()
        self._save()
        logger.info("share_like_toggled", share_id=share_id, user_id=user_id, liked=liked)
        return ShareLike(liked=liked, likes=share.likes)

    def list_public(
        self,
        limit: int = 20,
        offset: int = 0,
        tag: str | None = None,
        user_id: str | None = None,
        sort_by: ShareSort = "recent",
        viewer_id: str | None = None,
    ) -> SharePage:
        """
        Page through listed shares.

        ``user_id`` narrows the page to one author. Private shares appear
        only when the viewer lists their own.
        """
        own_listing = viewer_id is not None and user_id == viewer_id
        shares = [
            share
            for share in self._shares.values()
            if (share.is_public or own_listing)
            and (not tag or tag in share.tags)
            and (not user_id or share.user_id == user_id)
        ]

        if sort_by == "popular":
            shares.sort(key=lambda s: s.likes, reverse=True)
        elif sort_by == "views":
            shares.sort(key=lambda s: s.views, reverse=True)
        else:
            shares.sort(key=lambda s: s.created_at, reverse=True)

        return SharePage(shares=shares[offset : offset + limit], total=len(shares))

    def user_shares(self, user_id: str) -> list[SharedComponent]:
        shares = [s for s in self._shares.values() if s.user_id == user_id]
        return sorted(shares, key=lambda s: s.created_at, reverse=True)

    def user_liked(self, user_id: str) -> list[SharedComponent]:
        """Public shares the user has liked, newest first."""
        shares = [self._shares.get(share_id) for share_id in self._user_likes.get(user_id, ())]
        visible = [s for s in shares if s is not None and s.is_public]
        return sorted(visible, key=lambda s: s.created_at, reverse=True)

    def popular_tags(self, limit: int = 10) -> list[TagCount]:
        counts: dict[str, int] = {}
        for share in self._shares.values():
            if share.is_public:
                for tag in share.tags:
                    counts[tag] = counts.get(tag, 0) + 1

        ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)[:limit]
        return [TagCount(tag=tag, count=count) for tag, count in ranked]
