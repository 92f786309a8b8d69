import logging
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import Optional

from app.modules.users.models import User
from app.modules.users.dto import CreateUserDto
from app.modules.users.types import FindOrCreateResult

logger = logging.getLogger(__name__)


class UsersService:
    def __init__(self):
        self.logger = logger

    async def find_or_create(
        self, db: AsyncSession, user_data: CreateUserDto
    ) -> FindOrCreateResult:
        """Find existing user or create new one"""
        user = await self.get_user_by_whatsapp_number(db, user_data.whatsapp_number)

        if user:
            return {"user": user, "is_existing_user": True}

        self.logger.info(f"Creating new user with number: {user_data.whatsapp_number}")

        new_user = User(
            whatsapp_number=user_data.whatsapp_number.strip(),
            name=user_data.name,
            meta=user_data.meta,
        )

        db.add(new_user)
        await db.commit()
        await db.refresh(new_user)

        return {"user": new_user, "is_existing_user": False}

    async def get_user_by_id(self, db: AsyncSession, user_id: int) -> Optional[User]:
        """Get user by ID"""
        result = await db.execute(
            select(User).where(User.id == user_id, User.deleted_at.is_(None))
        )
        return result.scalar_one_or_none()

    async def get_user_by_whatsapp_number(
        self, db: AsyncSession, whatsapp_number: str
    ) -> Optional[User]:
        """Resolve a sender identifier to its owner, if registered"""
        result = await db.execute(
            select(User).where(
                User.whatsapp_number == whatsapp_number.strip(),
                User.deleted_at.is_(None),
            )
        )
        return result.scalar_one_or_none()
