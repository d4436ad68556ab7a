# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Error handling middleware with structured problem responses.
Provides centralized error handling and formatting for Flask applications.
"""

from flask import Flask, request, jsonify
from werkzeug.exceptions import HTTPException
from typing import Dict, Any, List, Optional, Tuple
from opentelemetry import trace
import logging

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)

PROBLEM_BASE_URL = "https://api.cityfix.app/problems"


def build_problem(error_type: str, title: str, status: int, detail: str,
                  instance: str, errors: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
    """Build a problem-detail response body."""
    problem = {
        "type": f"{PROBLEM_BASE_URL}/{error_type}",
        "title": title,
        "status": status,
        "detail": detail,
        "instance": instance
    }
    if errors:
        problem["errors"] = errors
    return problem


class CustomException(Exception):
    """Base class for custom application exceptions."""
    
    title = "Application Error"
    
    def __init__(self, message: str, status_code: int = 500, error_type: str = "application-error"):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_type = error_type


class ValidationException(CustomException):
    """Exception for missing or malformed input."""
    
    title = "Validation Error"
    
    def __init__(self, message: str, validation_errors: list = None):
        super().__init__(message, 400, "validation-error")
        self.validation_errors = validation_errors or []


class AuthenticationException(CustomException):
    """Exception for missing or invalid credentials."""
    
    title = "Authentication Required"
    
    def __init__(self, message: str):
        super().__init__(message, 401, "authentication-required")


class AuthorizationException(CustomException):
    """Exception for insufficient role or ownership mismatch."""
    
    title = "Insufficient Permissions"
    
    def __init__(self, message: str):
        super().__init__(message, 403, "insufficient-permissions")


class ConflictException(CustomException):
    """Exception for a request that conflicts with current state (duplicate upvote)."""
    
    title = "Resource Conflict"
    
    def __init__(self, message: str):
        super().__init__(message, 400, "resource-conflict")


class ExternalServiceException(CustomException):
    """Exception for failures of an external service such as the payment gateway."""
    
    title = "External Service Error"
    
    def __init__(self, message: str):
        super().__init__(message, 500, "external-service-error")


class ErrorHandlerMiddleware:
    """Centralized error handling middleware with problem-detail formatting."""
    
    def __init__(self, app: Flask):
        self.app = app
        self.register_error_handlers()
    
    def register_error_handlers(self):
        """Register error handlers with Flask application."""
        
        @self.app.errorhandler(CustomException)
        def handle_custom_exception(error: CustomException):
            return self.handle_custom_exception(error)
        
        @self.app.errorhandler(HTTPException)
        def handle_http_exception(error: HTTPException):
            if error.code and error.code >= 500:
                return self.handle_server_error(error)
            return self.handle_client_error(error)
        
        @self.app.errorhandler(Exception)
        def handle_generic_exception(error):
            return self.handle_unexpected_error(error)
    
    def handle_custom_exception(self, error: CustomException) -> Tuple[Any, int]:
        """Render an application exception raised by a route or decorator."""
        with tracer.start_as_current_span("error_handler.custom_exception") as span:
            span.set_attributes({
                "error.type": error.error_type,
                "error.status": error.status_code,
                "http.method": request.method,
                "http.path": request.path
            })
            
            log = logger.error if error.status_code >= 500 else logger.warning
            log(
                f"Custom exception: {error.error_type}",
                extra={
                    "error_type": error.error_type,
                    "status_code": error.status_code,
                    "detail": error.message,
                    "path": request.path,
                    "method": request.method
                }
            )
            
            errors = error.validation_errors if isinstance(error, ValidationException) else None
            problem = build_problem(
                error.error_type,
                error.title,
                error.status_code,
                error.message,
                request.path,
                errors
            )
            return jsonify(problem), error.status_code
    
    def handle_client_error(self, error: HTTPException) -> Tuple[Any, int]:
        """
        Handle client errors (4xx status codes).
        
        Args:
            error: HTTP exception
            
        Returns:
            Tuple of (error response, status code)
        """
        title = error.name
        error_type = title.lower().replace(" ", "-")
        detail = str(error.description) if error.description else title
        
        logger.warning(
            f"Client error: {title}",
            extra={
                "error_type": error_type,
                "status_code": error.code,
                "path": request.path,
                "method": request.method,
                "ip_address": request.remote_addr
            }
        )
        
        return jsonify(build_problem(error_type, title, error.code, detail, request.path)), error.code
    
    def handle_server_error(self, error: HTTPException) -> Tuple[Any, int]:
        """
        Handle server errors (5xx status codes).
        
        Args:
            error: HTTP exception
            
        Returns:
            Tuple of (error response, status code)
        """
        title = error.name
        detail = str(error.description) if error.description else title
        
        logger.error(
            f"Server error: {title}",
            extra={
                "status_code": error.code,
                "path": request.path,
                "method": request.method
            },
            exc_info=True
        )
        
        # Don't expose internal error details in production
        if self.app.config.get('ENVIRONMENT') == 'production':
            detail = "An internal server error occurred"
        
        error_type = title.lower().replace(" ", "-")
        return jsonify(build_problem(error_type, title, error.code, detail, request.path)), error.code
    
    def handle_unexpected_error(self, error: Exception) -> Tuple[Any, int]:
        """
        Handle unexpected exceptions not caught by specific handlers.
        
        Args:
            error: Unexpected exception
            
        Returns:
            Tuple of (error response, status code)
        """
        with tracer.start_as_current_span("error_handler.unexpected_error") as span:
            span.set_attributes({
                "error.type": "unexpected-error",
                "error.class": error.__class__.__name__,
                "http.method": request.method,
                "http.path": request.path
            })
            span.record_exception(error)
            
            logger.error(
                f"Unexpected error: {error.__class__.__name__}",
                extra={
                    "error_class": error.__class__.__name__,
                    "error_message": str(error),
                    "path": request.path,
                    "method": request.method
                },
                exc_info=True
            )
            
            # Don't expose internal error details
            detail = "An unexpected error occurred"
            if self.app.config.get('ENVIRONMENT') != 'production':
                detail = f"{error.__class__.__name__}: {str(error)}"
            
            problem = build_problem(
                "internal-server-error",
                "Internal Server Error",
                500,
                detail,
                request.path
            )
            return jsonify(problem), 500
