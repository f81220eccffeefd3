"""Shared component endpoints. Every route requires a signed-in user."""

from typing import Annotated

from fastapi import APIRouter, Query, Response, status

from ...core import ApiModel, NotFoundError
from ...store import SharedComponent, ShareCreate, ShareLike, SharePage, ShareUpdate, TagCount
from ...store.shares import ShareSort
from ..deps import CurrentUser, Shares, SettingsDep

router = APIRouter(prefix="/api/share", tags=["share"])


class ShareEnvelope(ApiModel):
    share: SharedComponent


class ShareCreated(ShareEnvelope):
    url: str


@router.get("", response_model=ShareEnvelope | SharePage)
async def get_or_list_shares(
    user: CurrentUser,
    shares: Shares,
    id: str | None = None,
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
    offset: Annotated[int, Query(ge=0)] = 0,
    tag: str | None = None,
    user_id: Annotated[str | None, Query(alias="userId")] = None,
    sort_by: Annotated[ShareSort, Query(alias="sortBy")] = "recent",
) -> ShareEnvelope | SharePage:
    """One share when ``id`` is given, otherwise a page of visible shares."""
    if id:
        share = shares.get(id, viewer_id=user.id)
        if share is None:
            raise NotFoundError("Share not found")
        return ShareEnvelope(share=share)

    return shares.list_public(
        limit=limit, offset=offset, tag=tag, user_id=user_id or None, sort_by=sort_by, viewer_id=user.id
    )


@router.post("", response_model=ShareCreated, status_code=status.HTTP_201_CREATED)
async def create_share(body: ShareCreate, user: CurrentUser, shares: Shares, settings: SettingsDep) -> ShareCreated:
    share = shares.create(user.id, user.name or "Anonymous", body)
    return ShareCreated(share=share, url=f"{settings.app_url.rstrip('/')}/share/{share.id}")


@router.put("", response_model=ShareEnvelope)
async def update_share(id: str, body: ShareUpdate, user: CurrentUser, shares: Shares) -> ShareEnvelope:
    share = shares.update(id, user.id, body)
    if share is None:
        raise NotFoundError("Share not found or access denied")
    return ShareEnvelope(share=share)


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def delete_share(id: str, user: CurrentUser, shares: Shares) -> Response:
    if not shares.delete(id, user.id):
        raise NotFoundError("Share not found or access denied")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{share_id}/like", response_model=ShareLike)
async def like_share(share_id: str, user: CurrentUser, shares: Shares) -> ShareLike:
    return shares.toggle_like(share_id, user.id)


@router.get("/mine", response_model=list[SharedComponent])
async def my_shares(user: CurrentUser, shares: Shares) -> list[SharedComponent]:
    return shares.user_shares(user.id)


@router.get("/liked", response_model=list[SharedComponent])
async def liked_shares(user: CurrentUser, shares: Shares) -> list[SharedComponent]:
    return shares.user_liked(user.id)


@router.get("/tags", response_model=list[TagCount])
async def popular_tags(
    user: CurrentUser, shares: Shares, limit: Annotated[int, Query(ge=1, le=50)] = 10
) -> list[TagCount]:
    return shares.popular_tags(limit)
