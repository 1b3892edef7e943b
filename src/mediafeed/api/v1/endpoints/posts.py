"""Post endpoints: creation, detail, edits, comments and likes."""

from typing import Annotated

from fastapi import APIRouter, Query, status

from mediafeed.api.v1.dependencies import PostAggregateDep
from mediafeed.schemas.documents import Comment, Like
from mediafeed.schemas.post import (
    CommentAppendResult,
    CommentCreate,
    LikeRequest,
    LikeStatusView,
    LikeToggleResult,
    PostCreate,
    PostDetail,
    PostEdit,
    PostEditView,
    PostView,
)

router = APIRouter(prefix="/posts", tags=["posts"])


@router.post("/", response_model=PostView, status_code=status.HTTP_201_CREATED)
async def create_post(payload: PostCreate, posts: PostAggregateDep) -> PostView:
    """Create a text post with zeroed counters."""
    post = posts.create_post(
        author_id=payload.author_id,
        author_username=payload.author_username,
        content=payload.content,
        caption=payload.caption,
        title=payload.title,
    )
    return PostView.from_post(post)


@router.get("/{post_id}", response_model=PostDetail)
async def get_post(
    post_id: str,
    posts: PostAggregateDep,
    user_id: Annotated[str | None, Query(alias="userId")] = None,
) -> PostDetail:
    """Return a post, its comments and whether ``userId`` likes it."""
    return posts.get_post_detail(post_id, user_id)


@router.get("/{post_id}/edit", response_model=PostEditView)
async def get_post_for_edit(post_id: str, posts: PostAggregateDep) -> PostEditView:
    """Return the editable fields of a post."""
    return posts.get_post_for_edit(post_id)


@router.put("/{post_id}", response_model=PostEditView)
async def edit_post(post_id: str, payload: PostEdit, posts: PostAggregateDep) -> PostEditView:
    """Overwrite a post's title and content."""
    post = posts.edit_post(post_id, payload.title, payload.content)
    return PostEditView(title=post.title, content=post.content)


@router.post("/{post_id}/comments", response_model=CommentAppendResult)
async def add_comment(
    post_id: str,
    payload: CommentCreate,
    posts: PostAggregateDep,
) -> CommentAppendResult:
    """Append a comment. Comments on unknown posts are dropped silently."""
    return posts.add_comment(
        post_id,
        payload.content,
        payload.author_id,
        author_username=payload.author_username,
        profile_pic_url=payload.profile_pic_url,
    )


@router.get("/{post_id}/comments", response_model=list[Comment])
async def list_comments(post_id: str, posts: PostAggregateDep) -> list[Comment]:
    """List a post's comments, newest first."""
    return posts.list_comments(post_id)


@router.post("/{post_id}/like", response_model=LikeToggleResult)
async def toggle_like(
    post_id: str,
    payload: LikeRequest,
    posts: PostAggregateDep,
) -> LikeToggleResult:
    """Like the post if the user has not, otherwise remove the like."""
    return posts.toggle_like(
        post_id,
        payload.user_id,
        username=payload.username,
        profile_pic_url=payload.profile_pic_url,
    )


@router.post("/{post_id}/unlike", response_model=LikeToggleResult)
async def unlike(post_id: str, payload: LikeRequest, posts: PostAggregateDep) -> LikeToggleResult:
    """Remove the user's like if there is one."""
    return posts.unlike(post_id, payload.user_id)


@router.get("/{post_id}/likes", response_model=list[Like])
async def list_likes(post_id: str, posts: PostAggregateDep) -> list[Like]:
    """List a post's likes, newest first."""
    return posts.list_likes(post_id)


@router.get("/{post_id}/likes/{user_id}", response_model=LikeStatusView)
async def get_like_status(post_id: str, user_id: str, posts: PostAggregateDep) -> LikeStatusView:
    """Report whether one user likes one post."""
    return LikeStatusView(
        post_id=post_id,
        user_id=user_id,
        status=posts.get_like_status(post_id, user_id),
    )
