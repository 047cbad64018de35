"""Post feed endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from pydantic import Field

from edugram.auth.dependencies import get_current_user_id
from edugram.db.models import CamelModel, Comment, Post
from edugram.posts.service import add_comment, create_post, list_comments, list_feed, toggle_like
from edugram.profiles.router import read_upload
from edugram.storage.blob import BlobStorage, get_blob_storage
from edugram.store import KeyValueStore, get_store

router = APIRouter(prefix="/posts", tags=["Posts"])


class PostResponse(CamelModel):
    post: Post


class PostListResponse(CamelModel):
    posts: list[Post]


class CommentRequest(CamelModel):
    content: str = Field("", max_length=2000)


class CommentResponse(CamelModel):
    comment: Comment


class CommentListResponse(CamelModel):
    comments: list[Comment]


@router.post("", response_model=PostResponse)
async def create(
    content: str = Form(""),
    community_only: bool = Form(False, alias="isCollegeCommunityOnly"),
    image: UploadFile | None = File(None),
    user_id: str = Depends(get_current_user_id),
    store: KeyValueStore = Depends(get_store),
    blobs: BlobStorage = Depends(get_blob_storage),
) -> PostResponse:
    """Create a post (verified users only)."""
    post = await create_post(
        store,
        blobs,
        user_id,
        content=content,
        community_only=community_only,
        image=await read_upload(image),
    )
    return PostResponse(post=post)


@router.get("", response_model=PostListResponse)
async def feed(
    community_only: bool = Query(False, alias="collegeCommunityOnly"),
    user_id: str = Depends(get_current_user_id),
    store: KeyValueStore = Depends(get_store),
) -> PostListResponse:
    """The feed, newest first; optionally only the caller's college community."""
    return PostListResponse(posts=await list_feed(store, user_id, community_only=community_only))


@router.post("/{post_id}/like", response_model=PostResponse)
async def like(
    post_id: str,
    user_id: str = Depends(get_current_user_id),
    store: KeyValueStore = Depends(get_store),
) -> PostResponse:
    """Toggle the caller's like on a post."""
    return PostResponse(post=await toggle_like(store, post_id, user_id))


@router.post("/{post_id}/comment", response_model=CommentResponse)
async def comment(
    post_id: str,
    body: CommentRequest,
    user_id: str = Depends(get_current_user_id),
    store: KeyValueStore = Depends(get_store),
) -> CommentResponse:
    return CommentResponse(comment=await add_comment(store, post_id, user_id, body.content))


@router.get("/{post_id}/comments", response_model=CommentListResponse)
async def comments(
    post_id: str,
    _user_id: str = Depends(get_current_user_id),
    store: KeyValueStore = Depends(get_store),
) -> CommentListResponse:
    return CommentListResponse(comments=await list_comments(store, post_id))
