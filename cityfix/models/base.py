# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Base document models with common configuration.
"""

from datetime import datetime, timezone
from typing import Any, Dict
from pydantic import BaseModel, ConfigDict


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


class BaseDocument(BaseModel):
    """Base model for documents stored in MongoDB with camelCase keys."""
    
    model_config = ConfigDict(
        # Allow population by field name or alias
        populate_by_name=True,
        # Use enum values instead of enum objects
        use_enum_values=True,
        validate_assignment=True
    )
    
    def to_document(self) -> Dict[str, Any]:
        """Dump the model using its storage (alias) keys."""
        return self.model_dump(by_alias=True)


class BaseRequest(BaseModel):
    """Base model for request bodies; unknown keys are ignored."""
    
    model_config = ConfigDict(
        populate_by_name=True,
        use_enum_values=True,
        extra="ignore"
    )
