"""
AlumniRepository for alumni batches and applications
"""

from typing import List, Optional, Set, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func

from config.settings import ALUMNI_PENDING
from database_models import AlumniApplication, AlumniBatch, Profile


class AlumniRepository:
    """
    Repository class for alumni batch and application operations.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_batch(self, batch_number: int, active_only: bool = True) -> Optional[AlumniBatch]:
        stmt = select(AlumniBatch).where(AlumniBatch.batch_number == batch_number)
        if active_only:
            stmt = stmt.where(AlumniBatch.is_active.is_(True))
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def list_batches(self, active_only: bool = True) -> List[AlumniBatch]:
        stmt = select(AlumniBatch).order_by(AlumniBatch.batch_number.asc())
        if active_only:
            stmt = stmt.where(AlumniBatch.is_active.is_(True))
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def create_batch(self, batch_data: dict) -> AlumniBatch:
        batch = AlumniBatch(**batch_data)
        self.db.add(batch)
        await self.db.flush()
        await self.db.refresh(batch)
        return batch

    async def get_application(self, application_id: int) -> Optional[AlumniApplication]:
        result = await self.db.execute(
            select(AlumniApplication).where(AlumniApplication.id == application_id)
        )
        return result.scalar_one_or_none()

    async def get_application_for_user(self, user_id: str) -> Optional[AlumniApplication]:
        result = await self.db.execute(
            select(AlumniApplication).where(AlumniApplication.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def save_application(self, application: AlumniApplication) -> AlumniApplication:
        """Insert or flush changes to an application and reload server defaults."""
        self.db.add(application)
        await self.db.flush()
        await self.db.refresh(application)
        return application

    async def list_applications(
        self,
        status: Optional[str] = None,
        offset: int = 0,
        limit: int = 20,
    ) -> Tuple[List[Tuple[AlumniApplication, Profile, Optional[AlumniBatch]]], int]:
        """
        Page through applications, newest first, joined with the applicant and batch.

        Args:
            status: pending | approved | rejected; None for every status
            offset: Rows to skip
            limit: Page size

        Returns:
            (rows, total) where total counts every application matching status
        """
        stmt = (
            select(AlumniApplication, Profile, AlumniBatch)
            .join(Profile, Profile.id == AlumniApplication.user_id)
            .outerjoin(AlumniBatch, AlumniBatch.batch_number == AlumniApplication.batch_number)
            .order_by(AlumniApplication.applied_at.desc(), AlumniApplication.id.desc())
            .offset(offset)
            .limit(limit)
        )
        count_stmt = select(func.count(AlumniApplication.id))
        if status:
            stmt = stmt.where(AlumniApplication.status == status)
            count_stmt = count_stmt.where(AlumniApplication.status == status)

        result = await self.db.execute(stmt)
        total = await self.db.execute(count_stmt)
        return [tuple(row) for row in result.all()], int(total.scalar_one())

    async def pending_user_ids(self) -> Set[str]:
        """IDs of users whose alumni application awaits review."""
        result = await self.db.execute(
            select(AlumniApplication.user_id).where(AlumniApplication.status == ALUMNI_PENDING)
        )
        return set(result.scalars().all())
