"""
UserRepository for database operations on the Profile model
"""

from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_, func
from database_models import Profile


class UserRepository:
    """
    Repository class for Profile database operations.
    Encapsulates all database logic for user accounts.
    """

    def __init__(self, db: AsyncSession):
        """
        Initialize the repository with a database session.

        Args:
            db: AsyncSession instance for database operations
        """
        self.db = db

    async def get_user_by_email(self, email: str) -> Optional[Profile]:
        """
        Retrieve a user by email address.

        Args:
            email: User's email address (case-insensitive search)

        Returns:
            Profile object if found, None otherwise
        """
        result = await self.db.execute(
            select(Profile).where(Profile.email == email.lower())
        )
        return result.scalar_one_or_none()

    async def get_user_by_id(self, user_id: str) -> Optional[Profile]:
        """
        Retrieve a user by ID.

        Args:
            user_id: Profile ID

        Returns:
            Profile object if found, None otherwise
        """
        result = await self.db.execute(
            select(Profile).where(Profile.id == user_id)
        )
        return result.scalar_one_or_none()

    async def list_users(self, search: Optional[str] = None) -> List[Profile]:
        """
        List users, newest first.

        Args:
            search: Optional case-insensitive substring matched on email or display name

        Returns:
            List of Profile objects
        """
        stmt = select(Profile).order_by(Profile.created_at.desc())
        if search:
            pattern = f"%{search.lower()}%"
            stmt = stmt.where(
                or_(
                    func.lower(Profile.email).like(pattern),
                    func.lower(Profile.display_name).like(pattern),
                )
            )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def create_user(self, user_data: dict) -> Profile:
        """
        Create a new user in the database.

        Args:
            user_data: Dictionary containing user data. Must include:
                - email: str
                Optional: any other Profile column (plan_type, trial_ends_at, ...)

        Returns:
            Created Profile object
        """
        data = dict(user_data)
        data["email"] = data["email"].lower()
        user = Profile(**data)
        self.db.add(user)
        await self.db.flush()  # Flush to get defaults without committing
        await self.db.refresh(user)
        return user

    async def update_user(self, user: Profile, updates: dict) -> Profile:
        """
        Apply a partial update to a user.

        Args:
            user: Profile object to update
            updates: Dictionary of fields to update (e.g., {"trial_ends_at": ...})

        Returns:
            Updated Profile object
        """
        for key, value in updates.items():
            if hasattr(user, key):
                setattr(user, key, value)

        await self.db.flush()
        await self.db.refresh(user)
        return user
