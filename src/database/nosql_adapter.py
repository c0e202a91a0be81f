"""
SQLite-backed NoSQL adapter for document-based operations.
Stores JSON documents in SQLite with the same interface as MongoAdapter, for local development and tests.
"""

import sqlite3
import json
import logging
from typing import Dict, Any, List, Optional, Tuple
from datetime import datetime, timezone

from bson import ObjectId

from .schemas import COLLECTIONS, DOCUMENT_VALIDATORS, GALLERY, NEWS, CAREERS

logger = logging.getLogger(__name__)

TIMESTAMP_FIELDS = ('created_at', 'updated_at')


class NoSQLAdapter:
    """SQLite adapter for document-based database operations"""

    def __init__(self, db_path: str = "content.db"):
        self.db_path = db_path

    def _get_connection(self) -> sqlite3.Connection:
        """Get a database connection with JSON support"""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    @staticmethod
    def _table(collection: str) -> str:
        if collection not in COLLECTIONS:
            raise ValueError(f"Unknown collection: {collection}")
        return f"{collection}_docs"

    def _validate_document(self, collection: str, document: Dict[str, Any], partial: bool = False) -> None:
        """Validate document against schema"""
        try:
            DOCUMENT_VALIDATORS[collection](document, partial)
        except Exception as e:
            logger.error(f"Document validation failed for {collection}: {e}")
            raise ValueError(f"Document validation failed: {e}")

    def _serialize_document(self, document: Dict[str, Any]) -> str:
        """Serialize document to JSON string"""
        def json_serializer(obj):
            if isinstance(obj, datetime):
                return obj.isoformat()
            raise TypeError(f"Object of type {type(obj)} is not JSON serializable")

        return json.dumps(document, default=json_serializer)

    def _deserialize_document(self, doc_id: str, json_str: str) -> Dict[str, Any]:
        """Deserialize JSON string to document, restoring timestamps"""
        document = json.loads(json_str)
        for field in TIMESTAMP_FIELDS:
            if isinstance(document.get(field), str):
                document[field] = datetime.fromisoformat(document[field])
        document['id'] = doc_id
        return document

    @staticmethod
    def _where(query: Optional[Dict[str, Any]]) -> Tuple[str, list]:
        """Build a WHERE clause of JSON path equality filters"""
        where_clauses = []
        params = []
        for key, value in (query or {}).items():
            if key in ('_id', 'id'):
                where_clauses.append("doc_id = ?")
                params.append(str(value))
            else:
                where_clauses.append("json_extract(document, ?) = ?")
                params.extend([f"$.{key}", value])
        if not where_clauses:
            return "", params
        return " WHERE " + " AND ".join(where_clauses), params

    def ping(self) -> bool:
        conn = self._get_connection()
        try:
            conn.execute("SELECT 1")
            return True
        finally:
            conn.close()

    def init_collections(self) -> None:
        """Initialize document collections (tables)"""
        conn = self._get_connection()
        try:
            cursor = conn.cursor()
            for collection in COLLECTIONS:
                table = self._table(collection)
                cursor.execute(f'''
                    CREATE TABLE IF NOT EXISTS {table} (
                        doc_id TEXT PRIMARY KEY,
                        document TEXT NOT NULL,
                        created_at TEXT NOT NULL
                    )
                ''')
                cursor.execute(f'''
                    CREATE INDEX IF NOT EXISTS idx_{collection}_created_at
                    ON {table}(created_at)
                ''')

            cursor.execute('''
                CREATE INDEX IF NOT EXISTS idx_gallery_category
                ON gallery_docs(json_extract(document, '$.category'))
            ''')
            for collection in (NEWS, CAREERS):
                cursor.execute(f'''
                    CREATE INDEX IF NOT EXISTS idx_{collection}_published
                    ON {collection}_docs(json_extract(document, '$.published'))
                ''')

            conn.commit()
            logger.info("NoSQL collections initialized successfully")

        except Exception as e:
            logger.error(f"Error initializing collections: {e}")
            raise
        finally:
            conn.close()

    def create_document(self, collection: str, document: Dict[str, Any]) -> str:
        """Create a new document in the collection and return its id"""
        table = self._table(collection)
        self._validate_document(collection, document)
        doc_id = str(ObjectId())
        conn = self._get_connection()
        try:
            created_at = document.get('created_at') or datetime.now(timezone.utc)
            conn.execute(
                f"INSERT INTO {table} (doc_id, document, created_at) VALUES (?, ?, ?)",
                (doc_id, self._serialize_document(document), created_at.isoformat())
            )
            conn.commit()
            logger.info(f"Created document in {collection} with ID: {doc_id}")
            return doc_id

        except Exception as e:
            logger.error(f"Error creating document in {collection}: {e}")
            raise
        finally:
            conn.close()

    def get_document(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        """Get a document by ID"""
        table = self._table(collection)
        conn = self._get_connection()
        try:
            row = conn.execute(f"SELECT doc_id, document FROM {table} WHERE doc_id = ?", (str(doc_id),)).fetchone()
            if row:
                return self._deserialize_document(row['doc_id'], row['document'])
            return None

        except Exception as e:
            logger.error(f"Error getting document from {collection}: {e}")
            raise
        finally:
            conn.close()

    def update_document(self, collection: str, doc_id: str, patch: Dict[str, Any]) -> bool:
        """Apply a partial update to a document by ID"""
        table = self._table(collection)
        patch = dict(patch)
        patch['updated_at'] = datetime.now(timezone.utc)
        self._validate_document(collection, patch, partial=True)

        conn = self._get_connection()
        try:
            row = conn.execute(f"SELECT document FROM {table} WHERE doc_id = ?", (str(doc_id),)).fetchone()
            if row is None:
                logger.warning(f"No document found to update in {collection} with ID: {doc_id}")
                return False

            document = json.loads(row['document'])
            document.update(json.loads(self._serialize_document(patch)))
            conn.execute(f"UPDATE {table} SET document = ? WHERE doc_id = ?", (json.dumps(document), str(doc_id)))
            conn.commit()
            logger.info(f"Updated document in {collection} with ID: {doc_id}")
            return True

        except Exception as e:
            logger.error(f"Error updating document in {collection}: {e}")
            raise
        finally:
            conn.close()

    def delete_document(self, collection: str, doc_id: str) -> bool:
        """Delete a document by ID"""
        table = self._table(collection)
        conn = self._get_connection()
        try:
            cursor = conn.execute(f"DELETE FROM {table} WHERE doc_id = ?", (str(doc_id),))
            success = cursor.rowcount > 0
            conn.commit()

            if success:
                logger.info(f"Deleted document from {collection} with ID: {doc_id}")
            else:
                logger.warning(f"No document found to delete in {collection} with ID: {doc_id}")

            return success

        except Exception as e:
            logger.error(f"Error deleting document from {collection}: {e}")
            raise
        finally:
            conn.close()

    def delete_documents(self, collection: str, query: Optional[Dict[str, Any]] = None) -> int:
        """Delete every document matching query and return how many went"""
        table = self._table(collection)
        where, params = self._where(query)
        conn = self._get_connection()
        try:
            cursor = conn.execute(f"DELETE FROM {table}{where}", params)
            conn.commit()
            logger.info(f"Deleted {cursor.rowcount} documents from {collection}")
            return cursor.rowcount

        except Exception as e:
            logger.error(f"Error deleting documents from {collection}: {e}")
            raise
        finally:
            conn.close()

    def query_documents(self, collection: str, query: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """Query documents with equality filters, newest first"""
        table = self._table(collection)
        where, params = self._where(query)
        sql = f"SELECT doc_id, document FROM {table}{where} ORDER BY created_at DESC, rowid DESC"

        conn = self._get_connection()
        try:
            rows = conn.execute(sql, params).fetchall()
            return [self._deserialize_document(row['doc_id'], row['document']) for row in rows]

        except Exception as e:
            logger.error(f"Error querying documents from {collection}: {e}")
            raise
        finally:
            conn.close()

    def count_documents(self, collection: str, query: Optional[Dict[str, Any]] = None) -> int:
        """Count documents matching query"""
        table = self._table(collection)
        where, params = self._where(query)
        conn = self._get_connection()
        try:
            return conn.execute(f"SELECT COUNT(*) AS count FROM {table}{where}", params).fetchone()['count']

        except Exception as e:
            logger.error(f"Error counting documents in {collection}: {e}")
            raise
        finally:
            conn.close()

    def distinct_values(self, collection: str, field: str) -> List[Any]:
        """Distinct values of a field across the collection"""
        table = self._table(collection)
        conn = self._get_connection()
        try:
            rows = conn.execute(
                f"SELECT DISTINCT json_extract(document, ?) AS value FROM {table} "
                f"WHERE json_extract(document, ?) IS NOT NULL",
                (f"$.{field}", f"$.{field}")
            ).fetchall()
            return sorted(row['value'] for row in rows)

        except Exception as e:
            logger.error(f"Error reading distinct {field} from {collection}: {e}")
            raise
        finally:
            conn.close()

    def close(self) -> None:
        """Connections are opened per call; nothing to release"""
