# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
User repository: identity and role store keyed by email.
"""

import logging
from typing import Any, Dict, List, Optional
from opentelemetry import trace

from ..models.entities import User
from ..models.enums import UserRole
from ..models.requests import RegisterUserRequest, UpdateProfileRequest, AdminUpdateUserRequest
from .mongodb import (
    MongoDBService, USERS, serialize_document, update_result_to_dict
)

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)


class UserRepository:
    """Reads and writes user documents."""
    
    def __init__(self, mongodb_service: MongoDBService):
        self.mongodb_service = mongodb_service
    
    @property
    def collection(self):
        return self.mongodb_service.get_collection(USERS)
    
    def find_by_email(self, email: Optional[str]) -> Optional[Dict[str, Any]]:
        """Find a user by email; None when absent."""
        if not email:
            return None
        
        with tracer.start_as_current_span("db.user.find_by_email") as span:
            document = self.collection.find_one({"email": email})
            span.set_attribute("db.found", document is not None)
            return serialize_document(document) if document else None
    
    def get_role(self, email: str) -> Optional[str]:
        """Return the stored role for an email, or None for unknown users."""
        user = self.find_by_email(email)
        return user.get("role") if user else None
    
    def register(self, request: RegisterUserRequest) -> Dict[str, Any]:
        """
        Insert a user unless one already exists with the same email.
        
        Uses a single upsert with ``$setOnInsert`` so concurrent registrations
        of the same email create at most one document.
        
        Returns:
            Insert result, or ``{"message": "user already exists", "insertedId": None}``
        """
        with tracer.start_as_current_span("db.user.register") as span:
            document = User(
                email=request.email,
                name=request.name,
                photo=request.photo,
                role=UserRole.CITIZEN
            ).to_document()
            document.pop("email")
            
            result = self.collection.update_one(
                {"email": request.email},
                {"$setOnInsert": document},
                upsert=True
            )
            
            if result.upserted_id is None:
                span.set_attribute("user.created", False)
                logger.debug("Registration skipped, user exists", extra={"email": request.email})
                return {"message": "user already exists", "insertedId": None}
            
            span.set_attribute("user.created", True)
            logger.info("User registered", extra={"email": request.email})
            return {"acknowledged": result.acknowledged, "insertedId": str(result.upserted_id)}
    
    def update_profile(self, email: str, request: UpdateProfileRequest) -> Dict[str, Any]:
        """Overwrite name and/or photo of the user with this email."""
        updates = request.model_dump(exclude_none=True)
        if not updates:
            return update_result_to_dict(None)
        
        result = self.collection.update_one({"email": email}, {"$set": updates})
        return update_result_to_dict(result)
    
    def list_all(self) -> List[Dict[str, Any]]:
        return [serialize_document(doc) for doc in self.collection.find()]
    
    def list_by_role(self, role: UserRole) -> List[Dict[str, Any]]:
        return [serialize_document(doc) for doc in self.collection.find({"role": role.value})]
    
    def admin_update(self, user_id: str, request: AdminUpdateUserRequest) -> Dict[str, Any]:
        """
        Apply an admin role/block change to the user with this id.
        
        ``role`` is set only when given and ``isBlocked`` only when it is a
        boolean; an empty change matches but modifies nothing.
        """
        object_id = self.mongodb_service.parse_object_id(user_id)
        if object_id is None:
            return update_result_to_dict(None)
        
        updates: Dict[str, Any] = {}
        if request.role:
            updates["role"] = request.role
        if isinstance(request.is_blocked, bool):
            updates["isBlocked"] = request.is_blocked
        
        if not updates:
            matched = 1 if self.collection.find_one({"_id": object_id}, {"_id": 1}) else 0
            return {"acknowledged": True, "matchedCount": matched, "modifiedCount": 0}
        
        result = self.collection.update_one({"_id": object_id}, {"$set": updates})
        logger.info(
            "User updated by admin",
            extra={"user_id": user_id, "changes": updates, "matched": result.matched_count}
        )
        return update_result_to_dict(result)
    
    def mark_verified(self, email: str) -> Dict[str, Any]:
        """Set the verified flag after a confirmed subscription payment."""
        result = self.collection.update_one({"email": email}, {"$set": {"isVerified": True}})
        return update_result_to_dict(result)
    
    def estimated_count(self) -> int:
        return self.collection.estimated_document_count()
