"""
Document and blob storage adapters.

MongoAdapter / GridFSBlobStore back production deployments; NoSQLAdapter /
LocalBlobStore expose the same interface over SQLite and the local filesystem.
"""
