"""
==============================================================================
Media Service Module
==============================================================================

Media store access: grid media lookup and URL generation.

Grid media for a product are the media records with ``to_grid == 1`` whose
workflow is neither "archived" nor "unpublished", sorted by priority and
then by upload time.

==============================================================================
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.catalog.models import ProductMedia
from app.config import Settings, get_settings
from app.db.models import Media, MediaWorkflow
from app.schemas.product import MediaCreate


# Module logger
logger = logging.getLogger(__name__)


class MediaService:
    """
    Media store service.

    Attributes:
        _db: Database session
        _url_prefix: Prefix of generated media URLs
    """

    def __init__(self, db: Session, settings: Optional[Settings] = None) -> None:
        self._db = db
        self._url_prefix = (settings or get_settings()).media_url_prefix

    def find_grid_media(self, product_id: str) -> List[Media]:
        """Active grid media of a product in display order."""
        return (
            self._db.query(Media)
            .filter(
                Media.product_id == product_id,
                Media.to_grid == 1,
                or_(
                    Media.workflow.is_(None),
                    Media.workflow.notin_(MediaWorkflow.hidden()),
                ),
            )
            .order_by(Media.priority, Media.uploaded_at)
            .all()
        )

    def media_urls(self, media: Media) -> ProductMedia:
        """URLs for every size variant of one media record."""
        return ProductMedia(**{
            store: media.url(store, self._url_prefix)
            for store in Media.STORES
        })

    def product_media(self, product_id: str) -> List[ProductMedia]:
        """URL records of a product's grid media, in display order."""
        return [self.media_urls(media) for media in self.find_grid_media(product_id)]

    def add_media(self, product_id: str, shop_id: Optional[str], data: MediaCreate) -> Media:
        """Attach a media record to a product."""
        media = Media(
            product_id=product_id,
            shop_id=shop_id,
            filename=data.filename,
            to_grid=data.to_grid,
            workflow=data.workflow,
            priority=data.priority,
            uploaded_at=data.uploaded_at or datetime.utcnow(),
        )

        self._db.add(media)
        self._db.commit()
        self._db.refresh(media)

        logger.info(f"Media added to {product_id}: {media.filename}")
        return media
