"""Equipment inventory routes: catalogue, maintenance log, usage. Admin only."""

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from reelbook.core.database import get_db
from reelbook.core.dependencies import require_admin
from reelbook.core.errors import NotFound
from reelbook.models.inventory import Equipment, EquipmentMaintenance, EquipmentUsage
from reelbook.schemas import (
    EquipmentCreate,
    EquipmentOut,
    EquipmentUpdate,
    MaintenanceCreate,
    MaintenanceOut,
    UsageCreate,
    UsageOut,
)
from reelbook.services.booking_manager import get_booking

router = APIRouter(prefix="/inventory", tags=["inventory"], dependencies=[Depends(require_admin)])


async def _get_equipment(db: AsyncSession, equipment_id: int) -> Equipment:
    result = await db.execute(select(Equipment).where(Equipment.id == equipment_id))
    equipment = result.scalar_one_or_none()
    if equipment is None:
        raise NotFound("Equipment not found")
    return equipment


@router.get("/equipment")
async def list_equipment(category: str | None = None, db: AsyncSession = Depends(get_db)):
    query = select(Equipment)
    if category:
        query = query.where(Equipment.category == category)
    result = await db.execute(query.order_by(Equipment.category, Equipment.name))
    return {"success": True, "equipment": [EquipmentOut.model_validate(e) for e in result.scalars().all()]}


@router.post("/equipment", status_code=status.HTTP_201_CREATED)
async def add_equipment(body: EquipmentCreate, db: AsyncSession = Depends(get_db)):
    equipment = Equipment(**body.model_dump())
    db.add(equipment)
    await db.flush()
    return {"success": True, "message": "Equipment added", "equipment": EquipmentOut.model_validate(equipment)}


@router.put("/equipment/{equipment_id}")
async def update_equipment(equipment_id: int, body: EquipmentUpdate, db: AsyncSession = Depends(get_db)):
    equipment = await _get_equipment(db, equipment_id)
    for field, value in body.model_dump(exclude_unset=True).items():
        setattr(equipment, field, value)
    await db.flush()
    return {"success": True, "message": "Equipment updated", "equipment": EquipmentOut.model_validate(equipment)}


@router.get("/equipment/{equipment_id}/maintenance")
async def list_maintenance(equipment_id: int, db: AsyncSession = Depends(get_db)):
    await _get_equipment(db, equipment_id)
    result = await db.execute(
        select(EquipmentMaintenance)
        .where(EquipmentMaintenance.equipment_id == equipment_id)
        .order_by(EquipmentMaintenance.maintenance_date.desc(), EquipmentMaintenance.id.desc())
    )
    return {"success": True, "maintenance": [MaintenanceOut.model_validate(m) for m in result.scalars().all()]}


@router.post("/equipment/{equipment_id}/maintenance", status_code=status.HTTP_201_CREATED)
async def add_maintenance(equipment_id: int, body: MaintenanceCreate, db: AsyncSession = Depends(get_db)):
    await _get_equipment(db, equipment_id)
    record = EquipmentMaintenance(equipment_id=equipment_id, **body.model_dump())
    db.add(record)
    await db.flush()
    return {"success": True, "maintenance": MaintenanceOut.model_validate(record)}


@router.post("/equipment/{equipment_id}/usage", status_code=status.HTTP_201_CREATED)
async def record_usage(equipment_id: int, body: UsageCreate, db: AsyncSession = Depends(get_db)):
    equipment = await _get_equipment(db, equipment_id)
    if body.booking_id is not None and await get_booking(db, body.booking_id) is None:
        raise NotFound("Booking not found")

    usage = EquipmentUsage(equipment_id=equipment_id, **body.model_dump())
    db.add(usage)
    if body.condition_after is not None:
        equipment.condition_status = body.condition_after
    await db.flush()
    return {"success": True, "usage": UsageOut.model_validate(usage)}
