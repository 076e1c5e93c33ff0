"""
==============================================================================
Catalog Store Module
==============================================================================

Key-value document store for published catalog entries.

Operations:
----------
- get(key)            -> stored document or None
- put(key, document)  -> replace the whole document (insert if absent)
- patch(key, fields)  -> merge fields into the stored document
- delete(key)         -> remove the entry

Every write commits immediately. There is no transaction spanning several
entries. A write whose commit fails is rolled back and reported as False,
so a publish batch can tell which entries were not written.

==============================================================================
"""

from __future__ import annotations

import copy
import logging
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.db.models import CatalogEntry


# Module logger
logger = logging.getLogger(__name__)


class CatalogStore:
    """
    Catalog collection backed by the ``catalog`` table.

    Documents are handed out as deep copies, so callers can never mutate
    stored state without going through put/patch.

    Example:
        >>> store = CatalogStore(session)
        >>> store.put("p1", {"id": "p1", "isSoldOut": False})
        True
        >>> store.patch("p1", {"isSoldOut": True})
        True
        >>> store.get("p1")["isSoldOut"]
        True
    """

    def __init__(self, db: Session) -> None:
        self._db = db

    def _find(self, key: str) -> Optional[CatalogEntry]:
        return self._db.query(CatalogEntry).filter(CatalogEntry.id == key).first()

    def _commit(self, key: str) -> bool:
        """Commit a pending write; a failed commit is rolled back and reported."""
        try:
            self._db.commit()
        except SQLAlchemyError as e:
            self._db.rollback()
            logger.error(f"Catalog write failed for {key}: {e}")
            return False
        return True

    # =========================================================================
    # READ OPERATIONS
    # =========================================================================

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        """Get a copy of the stored document, or None."""
        entry = self._find(key)
        if entry is None:
            return None
        return copy.deepcopy(entry.document)

    def exists(self, key: str) -> bool:
        return self._find(key) is not None

    def list_keys(self, shop_id: Optional[str] = None) -> List[str]:
        """List entry keys, optionally limited to one shop."""
        query = self._db.query(CatalogEntry.id)
        if shop_id is not None:
            query = query.filter(CatalogEntry.shop_id == shop_id)
        return [row.id for row in query.order_by(CatalogEntry.id).all()]

    # =========================================================================
    # WRITE OPERATIONS
    # =========================================================================

    def put(
        self,
        key: str,
        document: Mapping[str, Any],
        shop_id: Optional[str] = None
    ) -> bool:
        """
        Replace the document stored under key, inserting it if absent.

        Returns:
            True if the entry was written, False if the write was rolled back
        """
        entry = self._find(key)
        stored = copy.deepcopy(dict(document))

        if entry is None:
            entry = CatalogEntry(id=key, shop_id=shop_id, document=stored)
            self._db.add(entry)
            action = "inserted"
        else:
            entry.document = stored
            entry.shop_id = shop_id
            entry.published_at = datetime.utcnow()
            action = "replaced"

        if not self._commit(key):
            return False

        logger.info(f"Catalog entry {action}: {key}")
        return True

    def patch(self, key: str, fields: Mapping[str, Any]) -> bool:
        """
        Merge fields into the stored document.

        Returns:
            True if an entry was updated, False if no entry exists or the
            write was rolled back
        """
        entry = self._find(key)
        if entry is None:
            return False

        merged = copy.deepcopy(entry.document)
        merged.update(copy.deepcopy(dict(fields)))
        # Reassign so the JSON column is flagged dirty
        entry.document = merged

        if not self._commit(key):
            return False

        logger.info(f"Catalog entry patched: {key} ({', '.join(sorted(fields))})")
        return True

    def delete(self, key: str) -> bool:
        """
        Remove the entry stored under key.

        Returns:
            True if an entry was removed
        """
        entry = self._find(key)
        if entry is None:
            return False

        self._db.delete(entry)
        self._db.commit()

        logger.info(f"Catalog entry deleted: {key}")
        return True
