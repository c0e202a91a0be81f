"""
Content API service layer

Business rules for gallery, news and career content over the record store
and the blob store. Services receive their stores at construction.
"""

from .gallery_service import GalleryService
from .news_service import NewsService
from .career_service import CareerService

__all__ = [
    'GalleryService',
    'NewsService',
    'CareerService',
]
