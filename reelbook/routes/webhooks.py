"""Razorpay webhook handler.

Processes payment.captured and payment.failed events.
"""

import json

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from reelbook.core.database import get_db
from reelbook.core.errors import SignatureInvalid, ValidationFailed
from reelbook.services import payment_reconciler, razorpay_service
from reelbook.services.notifications import send_payment_notification

router = APIRouter(prefix="/webhooks", tags=["webhooks"])


@router.post("/razorpay")
async def razorpay_webhook(request: Request, background_tasks: BackgroundTasks, db: AsyncSession = Depends(get_db)):
    """Handle Razorpay webhook events.

    The signature covers the raw body, so it is checked before parsing.
    """
    payload = await request.body()
    signature = request.headers.get("x-razorpay-signature", "")

    if not razorpay_service.verify_webhook_signature(payload, signature):
        raise SignatureInvalid("Invalid webhook signature")

    try:
        event = json.loads(payload)
    except ValueError:
        raise ValidationFailed("Malformed webhook payload") from None
    if not isinstance(event, dict):
        raise ValidationFailed("Malformed webhook payload")

    details = await payment_reconciler.apply_webhook_event(db, event)
    await db.commit()
    if details is not None:
        background_tasks.add_task(send_payment_notification, details)

    return {"success": True, "status": "ok"}
