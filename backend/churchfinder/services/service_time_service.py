"""
ChurchFinder Backend — Service Time Service
============================================

What:  Adds weekly service times to a church.
How:   The body is already validated (ServiceTimeCreate); the parent church
       is checked here so a missing church is a 404 instead of an orphan row
       or a foreign-key 500.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from churchfinder.models.church import ServiceTime
from churchfinder.schemas.church import ServiceTimeCreate, ServiceTimeResponse
from churchfinder.services.church_service import ChurchService

logger = logging.getLogger(__name__)


class ServiceTimeService:
    def __init__(self, church_service: ChurchService):
        self.church_service = church_service

    async def add(
        self,
        db: AsyncSession,
        church_id: int,
        payload: ServiceTimeCreate,
    ) -> ServiceTimeResponse:
        """
        Insert one service time for `church_id`.

        Raises:
            NotFoundError: the church does not exist
        """
        await self.church_service.ensure_exists(db, church_id)

        service_time = ServiceTime(church_id=church_id, **payload.model_dump())
        db.add(service_time)
        await db.flush()

        if payload.end_time <= payload.start_time:
            # Accepted as-is; overnight or mistyped windows are left to the editor.
            logger.warning(
                "Service time %s for church %s ends before it starts (%s-%s)",
                service_time.id,
                church_id,
                payload.start_time,
                payload.end_time,
            )
        logger.info(
            "Service time added: id=%s church_id=%s day=%s",
            service_time.id,
            church_id,
            payload.day_of_week,
        )
        return ServiceTimeResponse.model_validate(service_time)
