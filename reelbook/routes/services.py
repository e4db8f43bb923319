"""Service catalogue routes (public)."""

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from reelbook.core.database import get_db
from reelbook.models.service import Service
from reelbook.schemas import ServiceOut
from reelbook.services.booking_rules import resolve_service

router = APIRouter(prefix="/services", tags=["services"])


@router.get("")
async def list_services(db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(Service).where(Service.is_active.is_(True)).order_by(Service.price))
    return {"success": True, "services": [ServiceOut.model_validate(s) for s in result.scalars().all()]}


@router.get("/{identifier}")
async def get_service(identifier: str, db: AsyncSession = Depends(get_db)):
    """Accepts the same identifiers as the booking form: slug, display name, or id."""
    service = await resolve_service(db, identifier)
    return {"success": True, "service": ServiceOut.model_validate(service)}
