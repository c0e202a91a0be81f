"""
MongoDB adapter for document-based operations.
Provides identical interface to NoSQLAdapter but uses native MongoDB collections.
"""

import logging
from typing import Dict, Any, List, Optional
from datetime import datetime, timezone

from bson import ObjectId
from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.database import Database
from pymongo.errors import ConnectionFailure

from .schemas import COLLECTIONS, DOCUMENT_VALIDATORS, GALLERY, NEWS, CAREERS

logger = logging.getLogger(__name__)

DEFAULT_DB_NAME = 'content_api'
DEFAULT_SORT = [("created_at", DESCENDING), ("_id", DESCENDING)]


def parse_object_id(doc_id: Any) -> Optional[ObjectId]:
    """Return an ObjectId for a well-formed id, None otherwise"""
    if isinstance(doc_id, ObjectId):
        return doc_id
    if isinstance(doc_id, str) and ObjectId.is_valid(doc_id):
        return ObjectId(doc_id)
    return None


class MongoAdapter:
    """MongoDB adapter for document-based database operations"""

    def __init__(self, connection_string: str, db_name: Optional[str] = None,
                 max_pool_size: int = 10, server_selection_timeout_ms: int = 5000,
                 socket_timeout_ms: int = 45000):
        if not connection_string:
            raise ValueError("MongoDB connection string required. Set MONGODB_URI environment variable")

        self.connection_string = connection_string
        self.db_name = db_name
        self.client_options = {
            "maxPoolSize": max_pool_size,
            "serverSelectionTimeoutMS": server_selection_timeout_ms,
            "socketTimeoutMS": socket_timeout_ms,
            "tz_aware": True,
        }
        self.client: Optional[MongoClient] = None
        self.db: Optional[Database] = None
        self._connect()

    def _connect(self) -> None:
        """Establish MongoDB connection"""
        try:
            self.client = MongoClient(self.connection_string, **self.client_options)
            db_name = self.db_name
            if not db_name:
                # Fallback to extracting from URI path
                db_name = self.connection_string.split('/')[-1].split('?')[0]
                if not db_name or '@' in db_name or ':' in db_name:
                    db_name = DEFAULT_DB_NAME
            self.db_name = db_name
            self.db = self.client[db_name]

            # Test connection
            self.ping()
            logger.info(f"Connected to MongoDB database: {db_name}")

        except ConnectionFailure as e:
            logger.error(f"Failed to connect to MongoDB: {e}")
            raise
        except Exception as e:
            logger.error(f"MongoDB connection error: {e}")
            raise

    def _validate_document(self, collection: str, document: Dict[str, Any], partial: bool = False) -> None:
        """Validate document against schema"""
        if collection not in COLLECTIONS:
            raise ValueError(f"Unknown collection: {collection}")
        try:
            DOCUMENT_VALIDATORS[collection](document, partial)
        except Exception as e:
            logger.error(f"Document validation failed for {collection}: {e}")
            raise ValueError(f"Document validation failed: {e}")

    @staticmethod
    def _to_record(document: Dict[str, Any]) -> Dict[str, Any]:
        """Expose MongoDB's _id as a string ``id`` field"""
        record = dict(document)
        record['id'] = str(record.pop('_id'))
        return record

    def ping(self) -> bool:
        """Round-trip to the server; raises when it is unreachable"""
        self.client.admin.command('ping')
        return True

    def init_collections(self) -> None:
        """Initialize MongoDB collections and indexes"""
        try:
            for collection_name in COLLECTIONS:
                collection = self.db[collection_name]
                collection.create_index([("created_at", DESCENDING)])

                if collection_name == GALLERY:
                    collection.create_index([("category", ASCENDING)])
                elif collection_name in (NEWS, CAREERS):
                    collection.create_index([("published", ASCENDING)])

            logger.info("MongoDB collections and indexes initialized successfully")

        except Exception as e:
            logger.error(f"Error initializing MongoDB collections: {e}")
            raise

    def create_document(self, collection: str, document: Dict[str, Any]) -> str:
        """Create a new document in the collection and return its id"""
        try:
            self._validate_document(collection, document)
            result = self.db[collection].insert_one(dict(document))
            doc_id = str(result.inserted_id)
            logger.info(f"Created document in {collection} with ID: {doc_id}")
            return doc_id

        except Exception as e:
            logger.error(f"Error creating document in {collection}: {e}")
            raise

    def get_document(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        """Get a document by ID"""
        object_id = parse_object_id(doc_id)
        if object_id is None:
            return None
        try:
            document = self.db[collection].find_one({"_id": object_id})
            if document:
                return self._to_record(document)
            return None

        except Exception as e:
            logger.error(f"Error getting document from {collection}: {e}")
            raise

    def update_document(self, collection: str, doc_id: str, patch: Dict[str, Any]) -> bool:
        """Apply a partial update to a document by ID"""
        object_id = parse_object_id(doc_id)
        if object_id is None:
            return False
        try:
            patch = dict(patch)
            patch['updated_at'] = datetime.now(timezone.utc)
            self._validate_document(collection, patch, partial=True)

            result = self.db[collection].update_one({"_id": object_id}, {"$set": patch})
            success = result.matched_count > 0

            if success:
                logger.info(f"Updated document in {collection} with ID: {doc_id}")
            else:
                logger.warning(f"No document found to update in {collection} with ID: {doc_id}")

            return success

        except Exception as e:
            logger.error(f"Error updating document in {collection}: {e}")
            raise

    def delete_document(self, collection: str, doc_id: str) -> bool:
        """Delete a document by ID"""
        object_id = parse_object_id(doc_id)
        if object_id is None:
            return False
        try:
            result = self.db[collection].delete_one({"_id": object_id})
            success = result.deleted_count > 0

            if success:
                logger.info(f"Deleted document from {collection} with ID: {doc_id}")
            else:
                logger.warning(f"No document found to delete in {collection} with ID: {doc_id}")

            return success

        except Exception as e:
            logger.error(f"Error deleting document from {collection}: {e}")
            raise

    def delete_documents(self, collection: str, query: Optional[Dict[str, Any]] = None) -> int:
        """Delete every document matching query and return how many went"""
        try:
            result = self.db[collection].delete_many(query or {})
            logger.info(f"Deleted {result.deleted_count} documents from {collection}")
            return result.deleted_count

        except Exception as e:
            logger.error(f"Error deleting documents from {collection}: {e}")
            raise

    def query_documents(self, collection: str, query: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """Query documents with equality filters, newest first"""
        try:
            cursor = self.db[collection].find(query or {}).sort(DEFAULT_SORT)
            return [self._to_record(doc) for doc in cursor]

        except Exception as e:
            logger.error(f"Error querying documents from {collection}: {e}")
            raise

    def count_documents(self, collection: str, query: Optional[Dict[str, Any]] = None) -> int:
        """Count documents matching query"""
        try:
            return self.db[collection].count_documents(query or {})

        except Exception as e:
            logger.error(f"Error counting documents in {collection}: {e}")
            raise

    def distinct_values(self, collection: str, field: str) -> List[Any]:
        """Distinct values of a field across the collection"""
        try:
            return sorted(self.db[collection].distinct(field))

        except Exception as e:
            logger.error(f"Error reading distinct {field} from {collection}: {e}")
            raise

    def close(self) -> None:
        """Close MongoDB connection"""
        if self.client:
            self.client.close()
            self.client = None
            logger.info("MongoDB connection closed")
