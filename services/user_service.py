from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from models.user import User
from core.logger import logger

class UserService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_active_user(self, user_id: int) -> Optional[User]:
        result = await self.db.execute(
            select(User).filter(User.id == user_id, User.is_active == True)
        )
        return result.scalar_one_or_none()

    async def get_or_create_user(self, email: str, **kwargs) -> tuple[User, bool]:
        result = await self.db.execute(select(User).filter(User.email == email))
        user = result.scalar_one_or_none()
        if user:
            return user, False

        user = User(email=email, **kwargs)
        user.is_active = True
        self.db.add(user)
        await self.db.commit()
        await self.db.refresh(user)
        logger.info("New user created", user_id=user.id)
        return user, True
