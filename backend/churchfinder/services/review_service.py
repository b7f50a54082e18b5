"""
ChurchFinder Backend — Review Service
======================================

What:  Adds visitor reviews to a church.
How:   created_at is always assigned here at insert time; any value a caller
       sends is ignored by the schema. Reviews are never edited or deleted.
"""

import logging
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from churchfinder.models.church import Review
from churchfinder.schemas.church import ReviewCreate, ReviewResponse
from churchfinder.services.church_service import ChurchService

logger = logging.getLogger(__name__)


class ReviewService:
    def __init__(self, church_service: ChurchService):
        self.church_service = church_service

    async def add(self, db: AsyncSession, church_id: int, payload: ReviewCreate) -> ReviewResponse:
        """
        Insert one review for `church_id`.

        Raises:
            NotFoundError: the church does not exist
        """
        await self.church_service.ensure_exists(db, church_id)

        review = Review(
            church_id=church_id,
            user_name=payload.user_name,
            rating=payload.rating,
            comment=payload.comment,
            created_at=datetime.now(timezone.utc),
        )
        db.add(review)
        await db.flush()

        logger.info(
            "Review added: id=%s church_id=%s rating=%.1f",
            review.id,
            church_id,
            payload.rating,
        )
        return ReviewResponse.model_validate(review)
