import uuid
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from litejira.api.deps import get_current_user, get_db
from litejira.common.exceptions import NotFoundError, PermissionDeniedError
from litejira.core.access import get_visible_task
from litejira.db.models.comment import Comment
from litejira.db.models.user import User

router = APIRouter(tags=["Comments"])


# ---------- Schemas ----------


class CommentRequest(BaseModel):
    content: str = Field(min_length=1, max_length=10_000)


class CommentResponse(BaseModel):
    id: uuid.UUID
    task_id: uuid.UUID
    author_id: uuid.UUID
    content: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


async def _get_own_comment(comment_id: uuid.UUID, user: User, db: AsyncSession) -> Comment:
    result = await db.execute(
        select(Comment).where(Comment.id == comment_id, Comment.is_deleted.is_(False))
    )
    comment = result.scalar_one_or_none()
    if not comment:
        raise NotFoundError("Comment", str(comment_id))

    await get_visible_task(comment.task_id, user.id, db)
    if comment.author_id != user.id:
        raise PermissionDeniedError("Only the author can modify this comment")
    return comment


# ---------- Endpoints ----------


@router.get("/tasks/{task_id}/comments", response_model=list[CommentResponse])
async def list_comments(
    task_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    task = await get_visible_task(task_id, current_user.id, db)
    result = await db.execute(
        select(Comment)
        .where(Comment.task_id == task.id, Comment.is_deleted.is_(False))
        .order_by(Comment.created_at)
    )
    return result.scalars().all()


@router.post("/tasks/{task_id}/comments", response_model=CommentResponse, status_code=201)
async def create_comment(
    task_id: uuid.UUID,
    body: CommentRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    task = await get_visible_task(task_id, current_user.id, db)
    comment = Comment(task_id=task.id, author_id=current_user.id, content=body.content)
    db.add(comment)
    await db.flush()
    await db.refresh(comment)
    return comment


@router.patch("/comments/{comment_id}", response_model=CommentResponse)
async def update_comment(
    comment_id: uuid.UUID,
    body: CommentRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    comment = await _get_own_comment(comment_id, current_user, db)
    comment.content = body.content
    await db.flush()
    await db.refresh(comment)
    return comment


@router.delete("/comments/{comment_id}", status_code=204)
async def delete_comment(
    comment_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    comment = await _get_own_comment(comment_id, current_user, db)
    comment.is_deleted = True
    comment.deleted_at = datetime.now(timezone.utc)
    await db.flush()
    return Response(status_code=204)
