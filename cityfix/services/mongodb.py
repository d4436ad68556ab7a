# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
MongoDB service layer with connection pooling and document serialization.
"""

import os
import logging
from datetime import datetime
from typing import List, Dict, Optional, Any
from pymongo import MongoClient, ASCENDING, DESCENDING
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import ConnectionFailure, ServerSelectionTimeoutError
from pymongo.results import InsertOneResult, UpdateResult, DeleteResult
from bson import ObjectId
from bson.errors import InvalidId

logger = logging.getLogger(__name__)

DEFAULT_DATABASE = 'cityFixDB'

USERS = "users"
ISSUES = "issues"
PAYMENTS = "payments"


def build_connection_string() -> str:
    """Build the MongoDB URI from the environment."""
    uri = os.getenv('MONGODB_URI')
    if uri:
        return uri
    
    db_user = os.getenv('DB_USER')
    db_pass = os.getenv('DB_PASS')
    if db_user and db_pass:
        host = os.getenv('MONGODB_HOST', 'cluster0.mongodb.net')
        return f"mongodb+srv://{db_user}:{db_pass}@{host}/?retryWrites=true&w=majority"
    
    return 'mongodb://localhost:27017'


def serialize_document(value: Any) -> Any:
    """Convert ObjectIds and datetimes to JSON-friendly values, recursively.
    
    The top-level ``_id`` of a document is exposed as ``id``.
    """
    if isinstance(value, dict):
        result = {}
        for key, item in value.items():
            if key == "_id":
                result["id"] = str(item)
            else:
                result[key] = serialize_document(item)
        return result
    if isinstance(value, list):
        return [serialize_document(item) for item in value]
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def insert_result_to_dict(result: InsertOneResult) -> Dict[str, Any]:
    return {"acknowledged": result.acknowledged, "insertedId": str(result.inserted_id)}


def update_result_to_dict(result: Optional[UpdateResult]) -> Dict[str, Any]:
    """Mirror a driver update result; None stands for an unmatched id."""
    if result is None:
        return {"acknowledged": True, "matchedCount": 0, "modifiedCount": 0}
    return {
        "acknowledged": result.acknowledged,
        "matchedCount": result.matched_count,
        "modifiedCount": result.modified_count
    }


def delete_result_to_dict(result: Optional[DeleteResult]) -> Dict[str, Any]:
    if result is None:
        return {"acknowledged": True, "deletedCount": 0}
    return {"acknowledged": result.acknowledged, "deletedCount": result.deleted_count}


class MongoDBService:
    """MongoDB service with connection pooling shared by all repositories."""
    
    def __init__(self, connection_string: str = None, database_name: str = None,
                 client: Optional[MongoClient] = None):
        """
        Initialize MongoDB service with connection pooling.
        
        Args:
            connection_string: MongoDB URI, defaults to the environment
            database_name: Database name, defaults to ``cityFixDB``
            client: Prebuilt client (used by tests and scripts)
        """
        self.connection_string = connection_string or build_connection_string()
        self.database_name = database_name or os.getenv('MONGODB_DATABASE', DEFAULT_DATABASE)
        self._client: Optional[MongoClient] = client
        self._database: Optional[Database] = None
        
        # Connection pool settings
        self.max_pool_size = int(os.getenv('MONGODB_MAX_POOL_SIZE', '10'))
        self.min_pool_size = int(os.getenv('MONGODB_MIN_POOL_SIZE', '1'))
        self.max_idle_time_ms = int(os.getenv('MONGODB_MAX_IDLE_TIME_MS', '30000'))
        self.server_selection_timeout_ms = int(os.getenv('MONGODB_SERVER_SELECTION_TIMEOUT_MS', '5000'))
        
        logger.info(f"MongoDB service initialized for database: {self.database_name}")
    
    @property
    def client(self) -> MongoClient:
        """Get MongoDB client with connection pooling."""
        if self._client is None:
            try:
                self._client = MongoClient(
                    self.connection_string,
                    maxPoolSize=self.max_pool_size,
                    minPoolSize=self.min_pool_size,
                    maxIdleTimeMS=self.max_idle_time_ms,
                    serverSelectionTimeoutMS=self.server_selection_timeout_ms,
                    retryWrites=True,
                    retryReads=True
                )
                logger.info("MongoDB client created")
            except (ConnectionFailure, ServerSelectionTimeoutError) as e:
                logger.error(f"Failed to connect to MongoDB: {e}")
                raise
        
        return self._client
    
    @property
    def database(self) -> Database:
        """Get MongoDB database."""
        if self._database is None:
            self._database = self.client[self.database_name]
        return self._database
    
    def get_collection(self, collection_name: str) -> Collection:
        """Get MongoDB collection."""
        return self.database[collection_name]
    
    def close_connection(self) -> None:
        """Close MongoDB connection."""
        if self._client:
            self._client.close()
            self._client = None
            self._database = None
            logger.info("MongoDB connection closed")
    
    def health_check(self) -> Dict[str, Any]:
        """Check MongoDB connection health."""
        try:
            result = self.client.admin.command('ping')
            
            return {
                'status': 'healthy',
                'ping': result.get('ok') == 1,
                'database': self.database_name
            }
        except Exception as e:
            logger.error(f"MongoDB health check failed: {e}")
            return {
                'status': 'unhealthy',
                'error': str(e),
                'database': self.database_name
            }
    
    @staticmethod
    def parse_object_id(doc_id: str) -> Optional[ObjectId]:
        """Convert a string id to ObjectId; missing or malformed ids yield None."""
        if not isinstance(doc_id, str):
            return None
        try:
            return ObjectId(doc_id)
        except (InvalidId, TypeError):
            logger.debug(f"Invalid ObjectId format: {doc_id}")
            return None
    
    # Index Management
    
    def create_indexes(self) -> None:
        """Create the indexes the API queries rely on."""
        try:
            logger.info("Creating MongoDB indexes...")
            
            users = self.get_collection(USERS)
            users.create_index("email", unique=True)
            users.create_index("role")
            
            issues = self.get_collection(ISSUES)
            issues.create_index([("priority", ASCENDING), ("date", DESCENDING)])
            issues.create_index([("status", ASCENDING), ("priority", ASCENDING), ("date", DESCENDING)])
            issues.create_index("reporterEmail")
            issues.create_index("assignedStaff.email")
            issues.create_index("category")
            
            payments = self.get_collection(PAYMENTS)
            payments.create_index([("userEmail", ASCENDING), ("date", DESCENDING)])
            payments.create_index([("date", DESCENDING)])
            
            logger.info("MongoDB indexes created successfully")
            
        except Exception as e:
            logger.error(f"Failed to create MongoDB indexes: {e}")
            raise
    
    def list_indexes(self, collection: str) -> List[str]:
        """List index names of a collection."""
        return [index["name"] for index in self.get_collection(collection).list_indexes()]


# Singleton instance for scripts
_mongodb_service: Optional[MongoDBService] = None


def get_mongodb_service() -> MongoDBService:
    """Get singleton MongoDB service instance."""
    global _mongodb_service
    if _mongodb_service is None:
        _mongodb_service = MongoDBService()
    return _mongodb_service


def close_mongodb_connection() -> None:
    """Close MongoDB connection (for cleanup)."""
    global _mongodb_service
    if _mongodb_service:
        _mongodb_service.close_connection()
        _mongodb_service = None
