"""
Object storage for uploaded images.

GridFSBlobStore keeps blobs in a MongoDB GridFS bucket (chunked by the driver);
LocalBlobStore keeps them on the local filesystem for development and tests.
Both hand downloads back as a lazy chunk iterator so responses can stream.
"""

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, List, Optional

from bson import ObjectId
from gridfs import GridFSBucket
from gridfs.errors import NoFile
from pymongo.database import Database

from .mongo_adapter import parse_object_id

logger = logging.getLogger(__name__)

DEFAULT_BUCKET_NAME = 'uploads'
DEFAULT_CHUNK_SIZE_BYTES = 261120  # 255KB
DEFAULT_CONTENT_TYPE = 'application/octet-stream'


class BlobNotFound(Exception):
    """Raised when a blob id is malformed or nothing is stored under it"""

    def __init__(self, blob_id):
        super().__init__(f"Blob not found: {blob_id}")
        self.blob_id = blob_id


@dataclass
class BlobStream:
    """An opened blob: metadata is known, bytes are pulled on iteration"""
    blob_id: str
    filename: Optional[str]
    content_type: Optional[str]
    length: int
    chunks: Iterator[bytes]


class GridFSBlobStore:
    """Blob store backed by a GridFS bucket"""

    def __init__(self, db: Database, bucket_name: str = DEFAULT_BUCKET_NAME,
                 chunk_size_bytes: int = DEFAULT_CHUNK_SIZE_BYTES):
        self.db = db
        self.bucket_name = bucket_name
        self.bucket = GridFSBucket(db, bucket_name=bucket_name, chunk_size_bytes=chunk_size_bytes)

    def put(self, data: bytes, filename: str, content_type: Optional[str] = None) -> str:
        """Upload bytes and return the new blob id"""
        try:
            file_id = self.bucket.upload_from_stream(
                filename,
                data,
                metadata={
                    "contentType": content_type or DEFAULT_CONTENT_TYPE,
                    "originalName": filename,
                    "uploadedAt": datetime.now(timezone.utc),
                },
            )
            logger.info(f"Stored blob {file_id} ({len(data)} bytes) in bucket {self.bucket_name}")
            return str(file_id)
        except Exception as e:
            logger.error(f"Error uploading blob {filename}: {e}")
            raise

    def get(self, blob_id: str) -> BlobStream:
        """Open a blob for streaming; raises BlobNotFound before any byte is read"""
        object_id = parse_object_id(blob_id)
        if object_id is None:
            raise BlobNotFound(blob_id)
        try:
            grid_out = self.bucket.open_download_stream(object_id)
        except NoFile:
            raise BlobNotFound(blob_id)

        metadata = grid_out.metadata or {}
        return BlobStream(
            blob_id=str(object_id),
            filename=grid_out.filename,
            # Older uploads carry the type on the file document itself
            content_type=metadata.get("contentType") or getattr(grid_out, "content_type", None),
            length=grid_out.length,
            chunks=self._iter_chunks(grid_out),
        )

    @staticmethod
    def _iter_chunks(grid_out) -> Iterator[bytes]:
        # Iterating a GridOut splits on newlines, so pull whole chunks
        try:
            while True:
                chunk = grid_out.readchunk()
                if not chunk:
                    break
                yield chunk
        finally:
            grid_out.close()

    def delete(self, blob_id: str) -> None:
        """Delete a blob and its chunks"""
        object_id = parse_object_id(blob_id)
        if object_id is None:
            raise BlobNotFound(blob_id)
        try:
            self.bucket.delete(object_id)
        except NoFile:
            raise BlobNotFound(blob_id)
        logger.info(f"Deleted blob {blob_id} from bucket {self.bucket_name}")

    def list_ids(self) -> List[str]:
        """Ids of every blob in the bucket"""
        files = self.db[f"{self.bucket_name}.files"].find({}, {"_id": 1})
        return [str(doc["_id"]) for doc in files]

    def delete_all(self) -> int:
        """Delete every blob in the bucket and return how many went"""
        deleted = 0
        for blob_id in self.list_ids():
            try:
                self.delete(blob_id)
                deleted += 1
            except BlobNotFound:
                continue
        logger.info(f"Deleted {deleted} blobs from bucket {self.bucket_name}")
        return deleted


class LocalBlobStore:
    """Blob store on the local filesystem: one data file plus a JSON sidecar per blob"""

    def __init__(self, storage_dir: str = "storage", chunk_size_bytes: int = DEFAULT_CHUNK_SIZE_BYTES):
        self.storage_dir = Path(storage_dir)
        self.storage_dir.mkdir(parents=True, exist_ok=True)
        self.chunk_size_bytes = chunk_size_bytes

    def _paths(self, blob_id: str):
        if parse_object_id(blob_id) is None:
            raise BlobNotFound(blob_id)
        return self.storage_dir / blob_id, self.storage_dir / f"{blob_id}.json"

    def put(self, data: bytes, filename: str, content_type: Optional[str] = None) -> str:
        blob_id = str(ObjectId())
        data_path, meta_path = self._paths(blob_id)
        data_path.write_bytes(data)
        meta_path.write_text(json.dumps({
            "filename": filename,
            "contentType": content_type or DEFAULT_CONTENT_TYPE,
            "length": len(data),
            "uploadedAt": datetime.now(timezone.utc).isoformat(),
        }))
        logger.info(f"Stored blob {blob_id} ({len(data)} bytes) in {self.storage_dir}")
        return blob_id

    def get(self, blob_id: str) -> BlobStream:
        data_path, meta_path = self._paths(blob_id)
        if not data_path.exists() or not meta_path.exists():
            raise BlobNotFound(blob_id)
        metadata = json.loads(meta_path.read_text())
        return BlobStream(
            blob_id=blob_id,
            filename=metadata.get("filename"),
            content_type=metadata.get("contentType"),
            length=metadata.get("length", data_path.stat().st_size),
            chunks=self._iter_chunks(data_path),
        )

    def _iter_chunks(self, path: Path) -> Iterator[bytes]:
        with open(path, "rb") as f:
            while True:
                chunk = f.read(self.chunk_size_bytes)
                if not chunk:
                    break
                yield chunk

    def delete(self, blob_id: str) -> None:
        data_path, meta_path = self._paths(blob_id)
        if not data_path.exists():
            raise BlobNotFound(blob_id)
        data_path.unlink()
        meta_path.unlink(missing_ok=True)
        logger.info(f"Deleted blob {blob_id} from {self.storage_dir}")

    def list_ids(self) -> List[str]:
        return sorted(path.stem for path in self.storage_dir.glob("*.json"))

    def delete_all(self) -> int:
        deleted = 0
        for blob_id in self.list_ids():
            try:
                self.delete(blob_id)
                deleted += 1
            except BlobNotFound:
                continue
        logger.info(f"Deleted {deleted} blobs from {self.storage_dir}")
        return deleted
