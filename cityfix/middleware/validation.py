# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Request validation helpers using Pydantic models.

Bodies are validated inside the route, after authentication, so an
unauthenticated request is rejected before its payload is looked at.
"""

from flask import request
from typing import Type, TypeVar, Dict, Any, List, Mapping
from pydantic import BaseModel, ValidationError
from opentelemetry import trace
import logging

from .error_handler import ValidationException

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def format_validation_errors(validation_error: ValidationError) -> List[Dict[str, Any]]:
    """
    Format Pydantic validation errors for API response.
    
    Args:
        validation_error: Pydantic ValidationError
        
    Returns:
        List of formatted error dictionaries
    """
    errors = []
    
    for error in validation_error.errors():
        field_path = ".".join(str(loc) for loc in error["loc"])
        errors.append({
            "field": field_path,
            "message": error["msg"],
            "type": error["type"]
        })
    
    return errors


def validate_data(model_class: Type[ModelT], data: Mapping[str, Any]) -> ModelT:
    """
    Validate a mapping against a Pydantic model.
    
    Raises:
        ValidationException: If validation fails
    """
    with tracer.start_as_current_span("validation.validate") as span:
        span.set_attribute("validation.model", model_class.__name__)
        try:
            validated = model_class.model_validate(dict(data))
            span.set_attribute("validation.result", "success")
            return validated
        except ValidationError as e:
            span.set_attribute("validation.result", "validation_error")
            validation_errors = format_validation_errors(e)
            logger.warning(
                "Request validation failed",
                extra={
                    "model": model_class.__name__,
                    "path": request.path,
                    "method": request.method,
                    "errors": validation_errors
                }
            )
            raise ValidationException(
                f"Request validation failed for {model_class.__name__}",
                validation_errors
            )


def validate_json_body(model_class: Type[ModelT], required: bool = True) -> ModelT:
    """
    Validate the JSON request body against a Pydantic model.
    
    Args:
        model_class: Pydantic model class for validation
        required: Whether an empty body is an error; otherwise ``{}`` is validated
        
    Raises:
        ValidationException: If the body is missing, not JSON or invalid
    """
    json_data = request.get_json(silent=True)
    
    if json_data is None:
        if required:
            raise ValidationException("Request body must be a JSON object")
        json_data = {}
    
    if not isinstance(json_data, dict):
        raise ValidationException("Request body must be a JSON object")
    
    return validate_data(model_class, json_data)


def validate_query(model_class: Type[ModelT]) -> ModelT:
    """Validate the query string against a Pydantic model."""
    return validate_data(model_class, request.args.to_dict())
