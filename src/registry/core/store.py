# src/registry/core/store.py
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional, Protocol

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import sessionmaker

from src.registry.core.db import session_scope
from src.registry.core.errors import DuplicateEntry, StoreError
from src.registry.crud import admin as crud_admin
from src.registry.crud import supporter as crud_supporter
from src.registry.models.admin import Admin
from src.registry.models.supporter import Supporter
from src.registry.schemas.supporter import SupporterFilter

logger = logging.getLogger(__name__)


class RegistryStore(Protocol):
    """Persistence contract the services depend on."""

    async def insert_supporter(self, supporter: Supporter) -> Supporter: ...

    async def list_supporters(self, filters: Optional[SupporterFilter] = None) -> list[Supporter]: ...

    async def count_supporters(self) -> int: ...

    async def count_supporters_by(self, field: str) -> list[tuple[str, int]]: ...

    async def get_admin(self, username: str) -> Optional[Admin]: ...

    async def ensure_admin(self, username: str, password_hash: str, must_change_password: bool = True) -> bool: ...

    async def update_admin_password(self, admin_id: int, password_hash: str) -> None: ...


def _is_unique_violation(exc: IntegrityError) -> bool:
    text = str(exc.orig).lower()
    return "unique" in text or "duplicate" in text


class SQLStore:
    """RegistryStore backed by SQLModel tables on an async SQLAlchemy engine."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    @asynccontextmanager
    async def _session(self, action: str) -> AsyncIterator[AsyncSession]:
        try:
            async with session_scope(self._session_factory) as db:
                yield db
        except IntegrityError:
            raise
        except SQLAlchemyError as exc:
            logger.exception("Store failure while trying to %s", action)
            raise StoreError() from exc

    async def insert_supporter(self, supporter: Supporter) -> Supporter:
        try:
            async with self._session("insert supporter") as db:
                return await crud_supporter.create_supporter(db, supporter)
        except IntegrityError as exc:
            if _is_unique_violation(exc):
                raise DuplicateEntry() from exc
            logger.exception("Integrity error inserting supporter")
            raise StoreError() from exc

    async def list_supporters(self, filters: Optional[SupporterFilter] = None) -> list[Supporter]:
        async with self._session("list supporters") as db:
            return await crud_supporter.list_supporters(db, filters)

    async def count_supporters(self) -> int:
        async with self._session("count supporters") as db:
            return await crud_supporter.count_supporters(db)

    async def count_supporters_by(self, field: str) -> list[tuple[str, int]]:
        async with self._session(f"count supporters by {field}") as db:
            return await crud_supporter.count_supporters_by(db, field)

    async def get_admin(self, username: str) -> Optional[Admin]:
        async with self._session("read admin") as db:
            return await crud_admin.get_admin_by_username(db, username)

    async def ensure_admin(self, username: str, password_hash: str, must_change_password: bool = True) -> bool:
        try:
            async with self._session("provision admin") as db:
                if await crud_admin.get_admin_by_username(db, username) is not None:
                    return False
                await crud_admin.create_admin(db, username, password_hash, must_change_password)
                return True
        except IntegrityError:
            # another worker provisioned the same username first
            logger.info("Admin %s was provisioned concurrently", username)
            return False

    async def update_admin_password(self, admin_id: int, password_hash: str) -> None:
        async with self._session("update admin password") as db:
            await crud_admin.set_admin_password(db, admin_id, password_hash)
