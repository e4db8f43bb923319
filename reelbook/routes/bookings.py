"""Booking routes: create, my bookings, cancel, and admin management."""

from datetime import date

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from reelbook.core.database import get_db
from reelbook.core.dependencies import Actor, get_actor, get_current_user, get_optional_user, require_admin
from reelbook.models.member import User
from reelbook.schemas import (
    BookingCreate,
    BookingOut,
    BookingPage,
    BookingResponse,
    CancelRequest,
    MessageResponse,
    MyBookingOut,
    Pagination,
    StatusUpdate,
)
from reelbook.services import booking_manager
from reelbook.services.notifications import send_booking_confirmation

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    body: BookingCreate,
    background_tasks: BackgroundTasks,
    user: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    booking = await booking_manager.create_booking(db, body, user_id=user.id if user else None)
    details = booking_manager.booking_details(booking)
    await db.commit()

    # Email goes out after the response; the booking is already committed
    background_tasks.add_task(send_booking_confirmation, details)

    return BookingResponse(message="Booking created successfully", booking=BookingOut.model_validate(booking))


@router.get("/my-bookings")
async def list_my_bookings(
    status_filter: str | None = Query(None, alias="status"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    bookings = await booking_manager.list_user_bookings(db, user.id, status_filter)
    return {"success": True, "bookings": [MyBookingOut.model_validate(b) for b in bookings]}


@router.put("/{booking_id}/cancel", response_model=MessageResponse)
async def cancel_booking(
    booking_id: int,
    body: CancelRequest | None = None,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
):
    await booking_manager.cancel_booking(db, booking_id, actor, body.reason if body else None)
    return MessageResponse(message="Booking cancelled successfully")


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------


@router.get("/admin/all", response_model=BookingPage)
async def list_all_bookings(
    status_filter: str | None = Query(None, alias="status"),
    date_from: date | None = None,
    date_to: date | None = None,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    _: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    page = await booking_manager.list_bookings(db, status_filter, date_from, date_to, limit, offset)
    return BookingPage(
        bookings=[BookingOut.model_validate(b) for b in page.items],
        pagination=Pagination(total=page.total, limit=limit, offset=offset, hasMore=page.has_more),
    )


@router.put("/admin/{booking_id}/status", response_model=BookingResponse)
async def update_booking_status(
    booking_id: int,
    body: StatusUpdate,
    _: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    booking = await booking_manager.update_booking_status(
        db, booking_id, body.booking_status, body.payment_status, body.notes
    )
    return BookingResponse(message="Booking updated successfully", booking=BookingOut.model_validate(booking))
