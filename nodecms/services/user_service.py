"""User service — user records and their assigned role names."""

import logging
from typing import List, Optional

from nodecms.core.config import settings
from nodecms.core.exceptions import ConflictError, NotFoundError, ValidationError
from nodecms.core.status import Status, success
from nodecms.db.store import DocumentStore
from nodecms.schemas.schemas import Identity, UserRecord

logger = logging.getLogger("nodecms")


class UserService:
    """Manages user records. Roles are embedded on the user as a list of names."""

    def __init__(self, store: DocumentStore, collection: str = settings.COL_USERS):
        self.store = store
        self.collection = collection

    async def create_user(self, username: str, email: Optional[str] = None) -> UserRecord:
        """Create a user with no roles.

        Raises:
            ConflictError: If the username is taken.
        """
        logger.info(f"UserService.create_user: Creating account for: {username}")
        if not username:
            raise ValidationError("Username is required", component="user")
        if await self.store.find_one(self.collection, {"username": username}) is not None:
            raise ConflictError("Username already exists", component="user")

        user = UserRecord(username=username, email=email)
        try:
            doc = await self.store.insert(self.collection, user.to_document())
        except ConflictError as e:
            raise ConflictError("Username already exists", component="user") from e
        return UserRecord.model_validate(doc)

    async def find_user(self, identity: Identity) -> Optional[UserRecord]:
        """Return the user record for an identity, or None if there is none."""
        doc = await self.store.find_one(self.collection, identity.to_filter())
        if doc is None:
            return None
        return UserRecord.model_validate(doc)

    async def get_user(self, identity: Identity) -> UserRecord:
        user = await self.find_user(identity)
        if user is None:
            logger.error(f"UserService.get_user: Error finding user record: {identity}")
            raise NotFoundError("Error finding user record.", component="user")
        return user

    async def get_user_roles(self, identity: Identity) -> List[str]:
        logger.info(f"UserService.get_user_roles: Getting all roles for user: {identity}")
        return list((await self.get_user(identity)).roles)

    async def get_users_and_roles(self) -> List[UserRecord]:
        """All users ordered by username, with their roles."""
        docs = await self.store.find(self.collection, sort="username")
        return [UserRecord.model_validate(doc) for doc in docs]

    async def assign_role(self, identity: Identity, role: str) -> Status:
        """Add a role to a user; assigning a role twice is a no-op."""
        logger.info(f"UserService.assign_role: Adding role {role} for user: {identity}")
        user = await self.get_user(identity)
        if role not in user.roles:
            user.roles.append(role)
            await self._replace(user)
        return success("user")

    async def remove_role(self, identity: Identity, role: str) -> Status:
        logger.info(f"UserService.remove_role: Remove role {role} for user: {identity}")
        user = await self.get_user(identity)
        if role not in user.roles:
            logger.debug("UserService.remove_role: User does not have the role. Still OK.")
            return success("user")
        user.roles = [name for name in user.roles if name != role]
        await self._replace(user)
        return success("user")

    async def _replace(self, user: UserRecord) -> None:
        matched = await self.store.update(self.collection, {"id": user.id}, user.to_document())
        if not matched:
            raise NotFoundError("Could not update user record.", component="user")
