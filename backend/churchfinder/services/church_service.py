"""
ChurchFinder Backend — Church Service (Church Repository)
=========================================================

What:  Lookup, find-or-create, explicit create, partial update and listing of
       churches, plus the aggregate of a church with its service times and
       reviews.
Who:   Called by the /api/churches route handlers.

Find-or-create flow (GET /api/churches/{place_id}):
    ┌──────────────┐  found   ┌──────────────────────────────┐
    │ read by      │─────────▶│ church + serviceTimes +      │
    │ place_id     │          │ reviews (newest first)       │
    └──────┬───────┘          └──────────────────────────────┘
           │ absent
           ▼
    ┌──────────────┐  ok      ┌──────────────────────────────┐
    │ insert from  │─────────▶│ church + [] + []             │
    │ seed fields  │          └──────────────────────────────┘
    └──────┬───────┘
           │ unique violation (another request inserted it first)
           ▼
    rollback, read again (bounded by FIND_OR_CREATE_ATTEMPTS)

No explicit multi-statement transaction is opened: the unique constraint on
churches.place_id is what keeps place ids single.
"""

import logging
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt

from churchfinder.exceptions import (
    ChurchFinderError,
    ConflictError,
    DatabaseError,
    NotFoundError,
    ValidationError,
)
from churchfinder.models.church import Church
from churchfinder.schemas.church import (
    ChurchCreate,
    ChurchDetailResponse,
    ChurchResponse,
    ChurchSeed,
    ChurchUpdate,
    ChurchWithServiceTimes,
    ServiceTimeResponse,
    church_detail,
)

logger = logging.getLogger(__name__)


class ChurchService:
    """
    Repository for the `churches` table and its aggregate view.

    Error Handling Strategy:
        Our own exceptions propagate unchanged. Any other SQLAlchemy error is
        logged and wrapped in DatabaseError so the client gets a generic 500.
    """

    def __init__(self, find_or_create_attempts: int = 2):
        self.find_or_create_attempts = find_or_create_attempts

    async def find_by_place_id(self, db: AsyncSession, place_id: str) -> Optional[Church]:
        """Exact match on the unique external identifier, or None."""
        result = await db.execute(select(Church).where(Church.place_id == place_id))
        return result.scalar_one_or_none()

    async def _load_aggregate(self, db: AsyncSession, place_id: str) -> Optional[Church]:
        result = await db.execute(
            select(Church)
            .where(Church.place_id == place_id)
            .options(selectinload(Church.service_times), selectinload(Church.reviews))
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def find_or_create(
        self,
        db: AsyncSession,
        place_id: str,
        seed: Optional[ChurchSeed],
    ) -> ChurchDetailResponse:
        """
        Return the aggregate for `place_id`, creating a minimal church first
        when none exists.

        Args:
            db: Async database session
            place_id: External place identifier
            seed: Name, vicinity, coordinates and optional rating from the
                  places provider. Only used when the church is new.

        Returns:
            ChurchDetailResponse. For a new church serviceTimes and reviews
            are empty lists.

        Raises:
            ValidationError: church absent and no usable seed supplied
            DatabaseError: query failed, or concurrent inserts kept winning
        """
        try:
            async for attempt in AsyncRetrying(
                retry=retry_if_exception_type(IntegrityError),
                stop=stop_after_attempt(self.find_or_create_attempts),
                reraise=True,
            ):
                with attempt:
                    church = await self._load_aggregate(db, place_id)
                    if church is not None:
                        return church_detail(church, church.service_times, church.reviews)

                    if seed is None:
                        raise ValidationError(
                            message="Invalid church data",
                            field="name",
                            context={"place_id": place_id, "reason": "unknown place id without seed fields"},
                        )

                    church = Church(
                        place_id=place_id,
                        name=seed.name,
                        vicinity=seed.vicinity,
                        lat=seed.lat,
                        lng=seed.lng,
                        rating=seed.rating,
                    )
                    db.add(church)
                    try:
                        await db.flush()
                    except IntegrityError:
                        logger.info(
                            "Church %s was created concurrently; re-reading", place_id
                        )
                        await db.rollback()
                        raise

                    logger.info("Church created: id=%s place_id=%s", church.id, place_id)
                    return church_detail(church, [], [])
        except ChurchFinderError:
            raise
        except IntegrityError as e:
            logger.error(
                "find_or_create for %s lost %d insert races",
                place_id,
                self.find_or_create_attempts,
            )
            raise DatabaseError(
                message="Could not load the church. Please try again.",
                context={"place_id": place_id, "error_type": type(e).__name__},
            )
        except SQLAlchemyError as e:
            logger.error("Database error in find_or_create(%s): %s", place_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not load the church. Please try again.",
                context={"place_id": place_id, "error_type": type(e).__name__},
            )

    async def create(self, db: AsyncSession, payload: ChurchCreate) -> ChurchResponse:
        """
        Explicit creation (POST /api/churches).

        Raises:
            ConflictError: a church with this place_id already exists
        """
        existing = await self.find_by_place_id(db, payload.place_id)
        if existing is not None:
            raise ConflictError(
                message="A church with this place id already exists",
                context={"place_id": payload.place_id, "church_id": existing.id},
            )

        church = Church(**payload.model_dump())
        db.add(church)
        try:
            await db.flush()
        except IntegrityError as e:
            await db.rollback()
            raise ConflictError(
                message="A church with this place id already exists",
                context={"place_id": payload.place_id, "error_type": type(e).__name__},
            )
        logger.info("Church created: id=%s place_id=%s", church.id, church.place_id)
        return ChurchResponse.model_validate(church)

    async def update(self, db: AsyncSession, church_id: int, changes: ChurchUpdate) -> ChurchResponse:
        """
        Partial update of phone/website/denomination/description.

        Only keys present in the request body are written.

        Raises:
            NotFoundError: no church with this id (nothing is written)
        """
        church = await db.get(Church, church_id)
        if church is None:
            raise NotFoundError(resource="church", resource_id=str(church_id), message="Church not found")

        fields = changes.model_dump(exclude_unset=True)
        for field, value in fields.items():
            setattr(church, field, value)
        await db.flush()

        if fields:
            logger.info("Church %s updated: %s", church_id, ", ".join(sorted(fields)))
        return ChurchResponse.model_validate(church)

    async def list_churches(self, db: AsyncSession) -> List[ChurchWithServiceTimes]:
        """All churches, each with its service times."""
        result = await db.execute(
            select(Church).options(selectinload(Church.service_times)).order_by(Church.id)
        )
        return [
            ChurchWithServiceTimes(
                **ChurchResponse.model_validate(church).model_dump(),
                service_times=[ServiceTimeResponse.model_validate(s) for s in church.service_times],
            )
            for church in result.scalars().all()
        ]

    async def list_denominations(self, db: AsyncSession) -> List[str]:
        """
        Distinct denominations for the filter control.

        Never contains null, blank or duplicate entries; values are trimmed
        and sorted.
        """
        trimmed = func.trim(Church.denomination)
        result = await db.execute(
            select(trimmed)
            .where(Church.denomination.is_not(None))
            .where(trimmed != "")
            .distinct()
            .order_by(trimmed)
        )
        return [row for row in result.scalars().all() if row]

    async def ensure_exists(self, db: AsyncSession, church_id: int) -> Church:
        """Return the church or raise NotFoundError (used by child inserts)."""
        church = await db.get(Church, church_id)
        if church is None:
            raise NotFoundError(resource="church", resource_id=str(church_id), message="Church not found")
        return church
