"""
==============================================================================
Database Bootstrap
==============================================================================

Startup work for a fresh or existing database: create missing tables and
make sure at least one admin can log in. The bootstrap admin belongs to the
primary shop.

==============================================================================
"""

from __future__ import annotations

import logging
from typing import Dict, Optional

from sqlalchemy.orm import Session

from app.config import get_settings
from app.core.security import get_security_manager
from app.db.database import DatabaseManager
from app.db.models import CatalogEntry, Product, User, UserRole


# Module logger
logger = logging.getLogger(__name__)


class DatabaseInitializer:
    """
    Table setup, admin bootstrap and row counts.

    Works on its own short-lived sessions unless a session is passed in, in
    which case that session is used and left open.
    """

    def __init__(
        self,
        db_manager: Optional[DatabaseManager] = None,
        session: Optional[Session] = None
    ) -> None:
        self._db_manager = db_manager or DatabaseManager()
        self._session = session

    def _open(self) -> Session:
        return self._session or self._db_manager.get_session()

    def _close(self, session: Session) -> None:
        if session is not self._session:
            session.close()

    def create_default_admin(self) -> Optional[User]:
        """
        Add DEFAULT_ADMIN_USERNAME as an admin of the primary shop.

        Returns:
            The new admin, or None when any admin already exists
        """
        settings = get_settings()
        session = self._open()

        try:
            if session.query(User).filter(User.role == UserRole.ADMIN).count():
                logger.info("Admin account present, skipping bootstrap")
                return None

            admin = User(
                username=settings.default_admin_username.lower(),
                password_hash=get_security_manager().hash_password(settings.default_admin_password),
                role=UserRole.ADMIN,
                shop_id=settings.primary_shop_id,
                is_active=True,
            )
            session.add(admin)
            session.commit()
        except Exception:
            session.rollback()
            logger.exception("Default admin bootstrap failed")
            raise
        finally:
            self._close(session)

        logger.info(f"✅ Default admin user created: {admin.username}")
        logger.warning("⚠️ Default admin password in use, change it before going live")
        return admin

    def initialize(self) -> None:
        logger.info("Initializing database...")

        self._db_manager.create_tables()
        self.create_default_admin()

        if not self._db_manager.verify_connection():
            logger.warning("⚠️ Database connection check failed")

    def get_stats(self) -> Dict[str, int]:
        """Live product and catalog entry counts."""
        session = self._open()
        try:
            products = session.query(Product).filter(Product.is_deleted.is_(False)).count()
            entries = session.query(CatalogEntry).count()
        finally:
            self._close(session)

        return {"products": products, "catalog_entries": entries}


def init_db() -> None:
    """Run the startup bootstrap against the configured database."""
    DatabaseInitializer().initialize()
