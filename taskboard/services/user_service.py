"""用户服务模块

注册、资料修改、密码修改和头像设置
"""
from typing import List, Optional

from sqlalchemy import select

from taskboard.core.exceptions import (
    EmailAlreadyExistsException,
    IncorrectPasswordException,
    UserNotFoundException,
    UsernameAlreadyExistsException,
)
from taskboard.core.security import get_password_hash, verify_password
from taskboard.models.user import User
from taskboard.schemas.user import PasswordChange, ProfilePictureUpdate, ProfileUpdate, UserCreate
from taskboard.services.base import BaseService


class UserService(BaseService):
    """用户服务类"""

    async def get_by_id(self, user_id: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == email.strip().lower()))
        return result.scalar_one_or_none()

    async def get_user(self, user_id: str) -> User:
        """根据ID获取用户，不存在时抛出异常"""
        user = await self.get_by_id(user_id)
        if user is None:
            raise UserNotFoundException(user_id)
        return user

    async def _name_taken(self, name: str, exclude_id: Optional[str] = None) -> bool:
        query = select(User.id).where(User.name == name)
        if exclude_id is not None:
            query = query.where(User.id != exclude_id)
        result = await self.db.execute(query)
        return result.first() is not None

    async def _email_taken(self, email: str, exclude_id: Optional[str] = None) -> bool:
        query = select(User.id).where(User.email == email)
        if exclude_id is not None:
            query = query.where(User.id != exclude_id)
        result = await self.db.execute(query)
        return result.first() is not None

    async def create_user(self, user_data: UserCreate) -> User:
        """注册新用户"""
        email = user_data.email.lower()
        if await self._email_taken(email):
            raise EmailAlreadyExistsException(email)
        if await self._name_taken(user_data.name):
            raise UsernameAlreadyExistsException(user_data.name)

        user = User(
            name=user_data.name,
            email=email,
            hashed_password=get_password_hash(user_data.password),
        )
        self.db.add(user)
        await self._commit("user registration")

        user = await self.get_user_fresh(user.id)
        self._log_event("user_registered", "user", user.id)
        return user

    async def get_user_fresh(self, user_id: str) -> User:
        result = await self.db.execute(
            select(User).where(User.id == user_id).execution_options(populate_existing=True)
        )
        user = result.scalar_one_or_none()
        if user is None:
            raise UserNotFoundException(user_id)
        return user

    async def list_users(self) -> List[User]:
        """获取所有用户"""
        result = await self.db.execute(select(User).order_by(User.name))
        return list(result.scalars().all())

    async def update_profile(self, user_id: str, profile: ProfileUpdate) -> User:
        """更新用户名和邮箱"""
        user = await self.get_user(user_id)

        if profile.name is not None and profile.name != user.name:
            if await self._name_taken(profile.name, exclude_id=user_id):
                raise UsernameAlreadyExistsException(profile.name)
            user.name = profile.name

        if profile.email is not None:
            email = profile.email.lower()
            if email != user.email:
                if await self._email_taken(email, exclude_id=user_id):
                    raise EmailAlreadyExistsException(email)
                user.email = email

        await self._commit("profile update")
        self._log_event("profile_updated", "user", user_id)
        return await self.get_user_fresh(user_id)

    async def change_password(self, user_id: str, data: PasswordChange) -> None:
        """修改密码"""
        user = await self.get_user(user_id)
        if not verify_password(data.old_password, user.hashed_password):
            raise IncorrectPasswordException()

        user.hashed_password = get_password_hash(data.new_password)
        await self._commit("password change")
        self._log_event("password_changed", "user", user_id)

    async def update_picture(self, user_id: str, data: ProfilePictureUpdate) -> User:
        """设置头像"""
        user = await self.get_user(user_id)
        user.image = data.image_url
        await self._commit("profile picture update")
        self._log_event("profile_picture_updated", "user", user_id)
        return await self.get_user_fresh(user_id)
