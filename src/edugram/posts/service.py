"""
Post feed: posts, likes and comments.

Author display fields are copied onto posts and comments when they are
written; later profile edits do not rewrite old posts. Like and comment
updates are read-modify-write on the whole post record with no locking, so
concurrent writers to the same post are last-writer-wins.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from edugram.db.models import Comment, Post, new_id
from edugram.errors import Forbidden, NotFound, ValidationError
from edugram.notifications.service import COMMENT, LIKE, push_notification_best_effort
from edugram.profiles.service import get_profile, load_profile
from edugram.storage.blob import POST_IMAGES

if TYPE_CHECKING:
    from edugram.storage.blob import BlobStorage, Upload
    from edugram.store import KeyValueStore

logger = structlog.get_logger()

COMMENT_PREVIEW_LENGTH = 50


def post_key(post_id: str) -> str:
    return f"post:{post_id}"


def comment_key(post_id: str, comment_id: str) -> str:
    return f"comment:{post_id}:{comment_id}"


def comment_preview(content: str) -> str:
    if len(content) > COMMENT_PREVIEW_LENGTH:
        return content[:COMMENT_PREVIEW_LENGTH] + "..."
    return content


async def get_post(store: KeyValueStore, post_id: str) -> Post:
    doc = await store.get(post_key(post_id))
    if doc is None:
        raise NotFound("Post not found")
    return Post.from_document(doc)


async def save_post(store: KeyValueStore, post: Post) -> None:
    await store.set(post_key(post.id), post.to_document())


async def create_post(
    store: KeyValueStore,
    blobs: BlobStorage,
    author_id: str,
    content: str,
    community_only: bool = False,
    image: Upload | None = None,
) -> Post:
    """
    Publish a post. Only verified users may post.

    Raises:
        ValidationError: If content is empty.
        Forbidden: If the author is not verified.
        UpstreamFailure: If the image upload fails.
    """
    content = (content or "").strip()
    if not content:
        raise ValidationError("Content is required")

    author = await load_profile(store, author_id)
    if author is None or not author.verified:
        raise Forbidden("Only verified users can post")

    image_url = None
    if image is not None:
        image_url = (await blobs.store(POST_IMAGES, author_id, image.filename, image.data)).url

    post = Post(
        id=new_id("post"),
        author_id=author_id,
        author_name=author.full_name,
        author_department=author.department,
        author_profile_picture=author.profile_picture,
        author_college=author.college_name,
        content=content,
        image=image_url,
        is_college_community_only=community_only,
    )
    await save_post(store, post)
    logger.info("post_created", post_id=post.id, author_id=author_id, community_only=community_only)
    return post


async def list_feed(store: KeyValueStore, viewer_id: str, community_only: bool = False) -> list[Post]:
    """
    Every post, newest first.

    With ``community_only`` only community posts whose author college matches
    the viewer's current college are returned.
    """
    posts = [Post.from_document(doc) for doc in await store.get_by_prefix("post:") if doc.get("id")]

    if community_only:
        viewer = await load_profile(store, viewer_id)
        college = viewer.college_name if viewer else None
        posts = [p for p in posts if p.is_college_community_only and college and p.author_college == college]

    posts.sort(key=lambda p: p.created_at, reverse=True)
    return posts


async def toggle_like(store: KeyValueStore, post_id: str, user_id: str) -> Post:
    """Like the post if the user hasn't, otherwise unlike it. Notifies the author on like."""
    post = await get_post(store, post_id)

    if user_id in post.liked_by:
        post.liked_by.remove(user_id)
        post.likes = max(0, post.likes - 1)
        liked = False
    else:
        post.liked_by.append(user_id)
        post.likes += 1
        liked = True

    await save_post(store, post)
    logger.info("post_liked" if liked else "post_unliked", post_id=post_id, user_id=user_id, likes=post.likes)

    if liked and post.author_id != user_id:
        liker = await load_profile(store, user_id)
        await push_notification_best_effort(
            store,
            post.author_id,
            LIKE,
            "liked your post",
            from_user=liker.full_name if liker else None,
            post_id=post_id,
        )
    return post


async def add_comment(store: KeyValueStore, post_id: str, author_id: str, content: str) -> Comment:
    """
    Append a comment, bump the post's comment counter and notify the author.

    The counter is authoritative and only ever incremented here, after the
    comment itself is stored.
    """
    content = (content or "").strip()
    if not content:
        raise ValidationError("Comment content is required")

    post = await get_post(store, post_id)
    author = await get_profile(store, author_id)

    comment = Comment(
        id=new_id("comment"),
        post_id=post_id,
        author_id=author_id,
        author_name=author.full_name,
        author_profile_picture=author.profile_picture,
        content=content,
    )
    await store.set(comment_key(post_id, comment.id), comment.to_document())

    post.comments += 1
    await save_post(store, post)
    logger.info("comment_added", post_id=post_id, comment_id=comment.id, author_id=author_id)

    if post.author_id != author_id:
        await push_notification_best_effort(
            store,
            post.author_id,
            COMMENT,
            f'commented on your post: "{comment_preview(content)}"',
            from_user=author.full_name,
            post_id=post_id,
        )
    return comment


async def list_comments(store: KeyValueStore, post_id: str) -> list[Comment]:
    """All comments on a post, oldest first."""
    docs = await store.get_by_prefix(f"comment:{post_id}:")
    comments = [Comment.from_document(doc) for doc in docs if doc.get("id")]
    comments.sort(key=lambda c: c.created_at)
    return comments
