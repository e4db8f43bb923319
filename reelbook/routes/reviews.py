"""Customer review routes: submit, public listing, and admin moderation."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from reelbook.core.database import get_db
from reelbook.core.dependencies import Actor, require_admin
from reelbook.core.errors import NotFound
from reelbook.models.feedback import Review
from reelbook.schemas import MessageResponse, ReviewCreate, ReviewModerate, ReviewOut

router = APIRouter(prefix="/reviews", tags=["reviews"])


async def _get_review(db: AsyncSession, review_id: int) -> Review:
    result = await db.execute(select(Review).where(Review.id == review_id))
    review = result.scalar_one_or_none()
    if review is None:
        raise NotFound("Review not found")
    return review


@router.post("", status_code=status.HTTP_201_CREATED)
async def submit_review(body: ReviewCreate, db: AsyncSession = Depends(get_db)):
    review = Review(**body.model_dump())
    db.add(review)
    await db.flush()
    return {
        "success": True,
        "message": "Thank you! Your review will appear once approved.",
        "review": ReviewOut.model_validate(review),
    }


@router.get("")
async def list_approved_reviews(
    featured: bool = False,
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    query = select(Review).where(Review.is_approved.is_(True))
    if featured:
        query = query.where(Review.is_featured.is_(True))
    result = await db.execute(query.order_by(Review.is_featured.desc(), Review.created_at.desc()).limit(limit))
    return {"success": True, "reviews": [ReviewOut.model_validate(r) for r in result.scalars().all()]}


@router.get("/admin/all")
async def list_all_reviews(_: Actor = Depends(require_admin), db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(Review).order_by(Review.created_at.desc(), Review.id.desc()))
    return {"success": True, "reviews": [ReviewOut.model_validate(r) for r in result.scalars().all()]}


@router.put("/admin/{review_id}")
async def moderate_review(
    review_id: int,
    body: ReviewModerate,
    _: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    review = await _get_review(db, review_id)
    if body.is_approved is not None:
        review.is_approved = body.is_approved
    if body.is_featured is not None:
        review.is_featured = body.is_featured
    await db.flush()
    return {"success": True, "message": "Review updated", "review": ReviewOut.model_validate(review)}


@router.delete("/admin/{review_id}", response_model=MessageResponse)
async def delete_review(review_id: int, _: Actor = Depends(require_admin), db: AsyncSession = Depends(get_db)):
    review = await _get_review(db, review_id)
    await db.delete(review)
    return MessageResponse(message="Review deleted")
