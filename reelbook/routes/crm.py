"""Lead tracking routes for the studio's sales pipeline. Admin only."""

from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from reelbook.core.database import get_db
from reelbook.core.dependencies import Actor, require_admin
from reelbook.core.errors import NotFound
from reelbook.models.crm import CLOSED_LEAD_STATUSES, Lead, LeadActivity, LeadStatus
from reelbook.schemas import LeadActivityCreate, LeadActivityOut, LeadCreate, LeadOut, LeadUpdate, Pagination

router = APIRouter(prefix="/crm", tags=["crm"], dependencies=[Depends(require_admin)])


async def _get_lead(db: AsyncSession, lead_id: int) -> Lead:
    result = await db.execute(select(Lead).where(Lead.id == lead_id))
    lead = result.scalar_one_or_none()
    if lead is None:
        raise NotFound("Lead not found")
    return lead


@router.get("/leads")
async def list_leads(
    status_filter: LeadStatus | None = Query(None, alias="status"),
    source: str | None = None,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    conditions = []
    if status_filter is not None:
        conditions.append(Lead.status == status_filter)
    if source:
        conditions.append(Lead.source == source)

    total = (await db.execute(select(func.count(Lead.id)).where(*conditions))).scalar_one()
    result = await db.execute(
        select(Lead).where(*conditions).order_by(Lead.created_at.desc(), Lead.id.desc()).limit(limit).offset(offset)
    )
    leads = [LeadOut.model_validate(lead) for lead in result.scalars().all()]
    return {
        "success": True,
        "leads": leads,
        "pagination": Pagination(total=total, limit=limit, offset=offset, hasMore=total > offset + len(leads)),
    }


@router.post("/leads", status_code=status.HTTP_201_CREATED)
async def create_lead(body: LeadCreate, db: AsyncSession = Depends(get_db)):
    lead = Lead(**body.model_dump(), status=LeadStatus.NEW)
    db.add(lead)
    await db.flush()
    return {"success": True, "message": "Lead added", "lead": LeadOut.model_validate(lead)}


@router.get("/leads/{lead_id}")
async def get_lead(lead_id: int, db: AsyncSession = Depends(get_db)):
    return {"success": True, "lead": LeadOut.model_validate(await _get_lead(db, lead_id))}


@router.put("/leads/{lead_id}")
async def update_lead(lead_id: int, body: LeadUpdate, db: AsyncSession = Depends(get_db)):
    lead = await _get_lead(db, lead_id)
    for field, value in body.model_dump(exclude_unset=True).items():
        setattr(lead, field, value)
    await db.flush()
    return {"success": True, "message": "Lead updated", "lead": LeadOut.model_validate(lead)}


@router.post("/leads/{lead_id}/activity", status_code=status.HTTP_201_CREATED)
async def add_activity(lead_id: int, body: LeadActivityCreate, db: AsyncSession = Depends(get_db)):
    lead = await _get_lead(db, lead_id)
    activity = LeadActivity(lead_id=lead.id, **body.model_dump())
    db.add(activity)
    if body.next_action_date is not None:
        # The lead's follow-up date tracks its latest planned action
        lead.follow_up_date = body.next_action_date
    await db.flush()
    return {"success": True, "activity": LeadActivityOut.model_validate(activity)}


@router.get("/leads/{lead_id}/activities")
async def list_activities(lead_id: int, db: AsyncSession = Depends(get_db)):
    await _get_lead(db, lead_id)
    result = await db.execute(
        select(LeadActivity)
        .where(LeadActivity.lead_id == lead_id)
        .order_by(LeadActivity.created_at.desc(), LeadActivity.id.desc())
    )
    return {"success": True, "activities": [LeadActivityOut.model_validate(a) for a in result.scalars().all()]}


@router.get("/follow-ups/today")
async def todays_follow_ups(db: AsyncSession = Depends(get_db)):
    result = await db.execute(
        select(Lead)
        .where(Lead.follow_up_date == date.today(), Lead.status.not_in(CLOSED_LEAD_STATUSES))
        .order_by(Lead.id)
    )
    return {"success": True, "followUps": [LeadOut.model_validate(lead) for lead in result.scalars().all()]}
