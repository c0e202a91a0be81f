"""
Store construction and the FastAPI dependencies that hand stores, services
and the caller's credential to route handlers.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from fastapi import Header, Request

from database.blob_store import GridFSBlobStore, LocalBlobStore
from database.mongo_adapter import MongoAdapter
from database.nosql_adapter import NoSQLAdapter
from content_api.auth import AuthService, extract_bearer_token
from content_api.config.settings import Settings
from content_api.errors import AuthenticationRequired
from content_api.services import CareerService, GalleryService, NewsService

logger = logging.getLogger(__name__)


@dataclass
class Stores:
    """The record store and the blob store the services share"""
    records: Any
    blobs: Any

    def close(self) -> None:
        try:
            self.records.close()
        except Exception as e:
            logger.error(f"Error closing record store: {e}")


def build_stores(settings: Settings) -> Stores:
    """Connect the backends selected by STORAGE_MODE."""
    if settings.storage_mode == "local":
        Path(settings.storage_dir).mkdir(parents=True, exist_ok=True)
        blobs = LocalBlobStore(settings.storage_dir, chunk_size_bytes=settings.gridfs_chunk_size_bytes)
        records = NoSQLAdapter(settings.local_db_path)
        logger.info(f"Using local storage in {settings.storage_dir}")
        return Stores(records=records, blobs=blobs)

    records = MongoAdapter(
        settings.mongodb_uri,
        db_name=settings.mongodb_db_name,
        max_pool_size=settings.db_pool_size,
        server_selection_timeout_ms=settings.db_timeout_ms,
        socket_timeout_ms=settings.db_socket_timeout_ms,
    )
    blobs = GridFSBlobStore(
        records.db,
        bucket_name=settings.gridfs_bucket_name,
        chunk_size_bytes=settings.gridfs_chunk_size_bytes,
    )
    return Stores(records=records, blobs=blobs)


def get_settings_from_app(request: Request) -> Settings:
    return request.app.state.settings


def get_stores(request: Request) -> Stores:
    return request.app.state.stores


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_gallery_service(request: Request) -> GalleryService:
    stores = get_stores(request)
    return GalleryService(stores.records, stores.blobs)


def get_news_service(request: Request) -> NewsService:
    stores = get_stores(request)
    return NewsService(stores.records, stores.blobs)


def get_career_service(request: Request) -> CareerService:
    return CareerService(get_stores(request).records)


def optional_role(request: Request, authorization: Optional[str] = Header(default=None)) -> Optional[str]:
    """Role of the caller when a valid bearer token is present, otherwise None."""
    return get_auth_service(request).try_authenticate(authorization)


def require_admin(request: Request, authorization: Optional[str] = Header(default=None)) -> str:
    """Gate for write routes: 401 without a token, 401 with a bad one."""
    token = extract_bearer_token(authorization)
    if token is None:
        raise AuthenticationRequired("Authentication required")
    return get_auth_service(request).verify(token)["role"]
