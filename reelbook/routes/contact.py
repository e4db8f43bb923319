"""Contact form routes."""

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from reelbook.core.database import get_db
from reelbook.core.dependencies import Actor, require_admin
from reelbook.core.errors import NotFound
from reelbook.models.feedback import ContactMessage
from reelbook.schemas import ContactCreate, ContactOut, MessageResponse, Pagination
from reelbook.services.notifications import send_contact_notification

router = APIRouter(prefix="/contact", tags=["contact"])


@router.post("", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def submit_message(body: ContactCreate, background_tasks: BackgroundTasks, db: AsyncSession = Depends(get_db)):
    db.add(ContactMessage(**body.model_dump()))
    await db.commit()
    background_tasks.add_task(send_contact_notification, body.name, body.email, body.subject, body.message)
    return MessageResponse(message="Thank you for your message! We'll get back to you soon.")


@router.get("/admin/all")
async def list_messages(
    is_read: bool | None = None,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    _: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    conditions = [] if is_read is None else [ContactMessage.is_read.is_(is_read)]
    total = (await db.execute(select(func.count(ContactMessage.id)).where(*conditions))).scalar_one()
    result = await db.execute(
        select(ContactMessage)
        .where(*conditions)
        .order_by(ContactMessage.created_at.desc(), ContactMessage.id.desc())
        .limit(limit)
        .offset(offset)
    )
    messages = [ContactOut.model_validate(m) for m in result.scalars().all()]
    return {
        "success": True,
        "messages": messages,
        "pagination": Pagination(total=total, limit=limit, offset=offset, hasMore=total > offset + len(messages)),
    }


@router.put("/admin/{message_id}/read", response_model=MessageResponse)
async def mark_read(message_id: int, _: Actor = Depends(require_admin), db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(ContactMessage).where(ContactMessage.id == message_id))
    message = result.scalar_one_or_none()
    if message is None:
        raise NotFound("Message not found")
    message.is_read = True
    return MessageResponse(message="Message marked as read")
