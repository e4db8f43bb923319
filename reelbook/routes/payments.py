"""Razorpay payment routes: create order, verify callback, and lookups."""

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from reelbook.core.database import get_db
from reelbook.core.dependencies import Actor, require_admin
from reelbook.schemas import (
    CreateOrderRequest,
    CreateOrderResponse,
    Pagination,
    PaymentOut,
    PaymentPage,
    PaymentResponse,
    VerifyPaymentRequest,
    VerifyPaymentResponse,
)
from reelbook.services import payment_reconciler
from reelbook.services.notifications import send_payment_notification

router = APIRouter(prefix="/payments", tags=["payments"])


@router.post("/create-order", response_model=CreateOrderResponse)
async def create_order(body: CreateOrderRequest, db: AsyncSession = Depends(get_db)):
    order, payment = await payment_reconciler.create_order(db, body)
    return CreateOrderResponse(order=order, paymentId=payment.id)


@router.post("/verify", response_model=VerifyPaymentResponse)
async def verify_payment(
    body: VerifyPaymentRequest,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
):
    """Checkout callback. Called by the client redirect or the gateway webhook."""
    details = await payment_reconciler.verify_payment(db, body)
    await db.commit()
    if details is not None:
        background_tasks.add_task(send_payment_notification, details)

    return VerifyPaymentResponse(message="Payment verified successfully", payment_id=body.razorpay_payment_id)


@router.get("/admin/all", response_model=PaymentPage)
async def list_payments(
    status_filter: str | None = Query(None, alias="status"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    _: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    page = await payment_reconciler.list_payments(db, status_filter, limit, offset)
    return PaymentPage(
        payments=[PaymentOut.model_validate(p) for p in page.items],
        pagination=Pagination(total=page.total, limit=limit, offset=offset, hasMore=page.has_more),
    )


@router.get("/{payment_id}", response_model=PaymentResponse)
async def get_payment(payment_id: str, db: AsyncSession = Depends(get_db)):
    payment = await payment_reconciler.get_payment(db, payment_id)
    return PaymentResponse(payment=PaymentOut.model_validate(payment))
