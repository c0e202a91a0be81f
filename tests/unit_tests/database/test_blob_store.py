import pytest
from pymongo import MongoClient

from database.blob_store import BlobNotFound, GridFSBlobStore
from tests.fixtures.content_fixtures import MISSING_ID, PNG_BYTES


def test_put_then_get_streams_in_chunks(blobs):
    blob_id = blobs.put(PNG_BYTES, "summit.png", "image/png")

    blob = blobs.get(blob_id)
    chunks = list(blob.chunks)

    assert blob.blob_id == blob_id
    assert blob.filename == "summit.png"
    assert blob.content_type == "image/png"
    assert blob.length == len(PNG_BYTES)
    assert b"".join(chunks) == PNG_BYTES
    assert len(chunks) == -(-len(PNG_BYTES) // 128)


def test_delete_removes_blob(blobs):
    blob_id = blobs.put(PNG_BYTES, "summit.png", "image/png")
    blobs.delete(blob_id)

    with pytest.raises(BlobNotFound):
        blobs.get(blob_id)
    with pytest.raises(BlobNotFound):
        blobs.delete(blob_id)


@pytest.mark.parametrize("blob_id", [MISSING_ID, "not-an-object-id", "../content.db"])
def test_missing_or_malformed_id(blobs, blob_id):
    with pytest.raises(BlobNotFound):
        blobs.get(blob_id)


def test_list_and_delete_all(blobs):
    ids = {blobs.put(PNG_BYTES, f"{i}.png", "image/png") for i in range(3)}

    assert set(blobs.list_ids()) == ids
    assert blobs.delete_all() == 3
    assert blobs.list_ids() == []


def test_missing_content_type_falls_back(blobs):
    blob_id = blobs.put(b"raw", "raw.bin")
    assert blobs.get(blob_id).content_type == "application/octet-stream"


class FakeGridOut:
    """Stands in for a GridOut; only chunk-wise reads are supported"""

    def __init__(self, chunks, metadata=None, content_type=None):
        self._chunks = list(chunks)
        self.metadata = metadata
        self.content_type = content_type
        self.filename = "summit.png"
        self.length = sum(len(chunk) for chunk in chunks)
        self.closed = False

    def readchunk(self):
        return self._chunks.pop(0) if self._chunks else b""

    def close(self):
        self.closed = True


class FakeBucket:
    def __init__(self, grid_out):
        self.grid_out = grid_out

    def open_download_stream(self, file_id):
        return self.grid_out


@pytest.fixture
def gridfs_store():
    client = MongoClient("mongodb://localhost:27017", connect=False)
    yield GridFSBlobStore(client["content_api_test"])
    client.close()


def test_gridfs_get_yields_whole_chunks(gridfs_store):
    stored = [b"\x89PNG\r\n\x1a\n" + b"\x00" * 8, b"line one\nline two\n", b"tail"]
    grid_out = FakeGridOut(stored, metadata={"contentType": "image/png"})
    gridfs_store.bucket = FakeBucket(grid_out)

    blob = gridfs_store.get(MISSING_ID)

    assert blob.content_type == "image/png"
    assert blob.length == sum(len(chunk) for chunk in stored)
    assert list(blob.chunks) == stored
    assert grid_out.closed


def test_gridfs_content_type_from_file_document(gridfs_store):
    gridfs_store.bucket = FakeBucket(FakeGridOut([PNG_BYTES], metadata=None, content_type="image/png"))

    blob = gridfs_store.get(MISSING_ID)

    assert blob.content_type == "image/png"
    assert b"".join(blob.chunks) == PNG_BYTES


def test_gridfs_missing_content_type_is_none(gridfs_store):
    gridfs_store.bucket = FakeBucket(FakeGridOut([PNG_BYTES], metadata={}))

    assert gridfs_store.get(MISSING_ID).content_type is None
