# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
CORS (Cross-Origin Resource Sharing) middleware for the web client.
"""

from flask import Flask, request, make_response
from typing import List, Optional
import logging

logger = logging.getLogger(__name__)

DEFAULT_CLIENT_ORIGINS = [
    "http://localhost:5173",
    "https://city-fix-server-amber.vercel.app",
    "https://city-fix-316cb.web.app",
    "https://city-fix-316cb.firebaseapp.com"
]


def parse_origins(value: Optional[str]) -> List[str]:
    """Parse a comma separated origin list; empty input yields the defaults."""
    if not value:
        return list(DEFAULT_CLIENT_ORIGINS)
    return [origin.strip().rstrip('/') for origin in value.split(',') if origin.strip()]


class CORSMiddleware:
    """CORS middleware for Flask applications."""
    
    def __init__(
        self,
        app: Flask,
        allowed_origins: Optional[List[str]] = None,
        allowed_methods: Optional[List[str]] = None,
        allowed_headers: Optional[List[str]] = None,
        allow_credentials: bool = True,
        max_age: int = 86400  # 24 hours
    ):
        """
        Initialize CORS middleware.
        
        Args:
            app: Flask application
            allowed_origins: List of allowed origins
            allowed_methods: List of allowed HTTP methods
            allowed_headers: List of allowed headers
            allow_credentials: Whether to allow credentials
            max_age: Preflight cache duration in seconds
        """
        self.app = app
        self.allowed_origins = allowed_origins or list(DEFAULT_CLIENT_ORIGINS)
        self.allowed_methods = allowed_methods or [
            'GET', 'POST', 'PUT', 'DELETE', 'PATCH', 'OPTIONS', 'HEAD'
        ]
        self.allowed_headers = allowed_headers or [
            'Accept',
            'Authorization',
            'Content-Type',
            'X-Requested-With'
        ]
        self.allow_credentials = allow_credentials
        self.max_age = max_age
        
        self.register_cors_handlers()
    
    def is_origin_allowed(self, origin: Optional[str]) -> bool:
        """
        Check if origin is allowed.
        
        Args:
            origin: Request origin
            
        Returns:
            True if origin is allowed
        """
        if not origin:
            return False
        
        if origin in self.allowed_origins or '*' in self.allowed_origins:
            return True
        
        # Check wildcard patterns
        for allowed_origin in self.allowed_origins:
            if allowed_origin.endswith('*') and origin.startswith(allowed_origin[:-1]):
                return True
        
        return False
    
    def add_cors_headers(self, response, origin: str):
        """Add CORS headers for an allowed origin to a response."""
        response.headers['Access-Control-Allow-Origin'] = origin
        response.headers.add('Vary', 'Origin')
        
        if self.allow_credentials:
            response.headers['Access-Control-Allow-Credentials'] = 'true'
        
        response.headers['Access-Control-Allow-Methods'] = ', '.join(self.allowed_methods)
        response.headers['Access-Control-Allow-Headers'] = ', '.join(self.allowed_headers)
        response.headers['Access-Control-Max-Age'] = str(self.max_age)
        
        return response
    
    def register_cors_handlers(self):
        """Register CORS handlers with Flask application."""
        
        @self.app.before_request
        def handle_preflight():
            """Handle CORS preflight requests."""
            if request.method == 'OPTIONS':
                origin = request.headers.get('Origin')
                
                if not self.is_origin_allowed(origin):
                    logger.warning(f"CORS preflight rejected for origin: {origin}")
                    return make_response('', 403)
                
                return self.add_cors_headers(make_response('', 204), origin)
        
        @self.app.after_request
        def add_cors_headers_to_response(response):
            """Add CORS headers to all responses."""
            origin = request.headers.get('Origin')
            
            if request.method != 'OPTIONS' and self.is_origin_allowed(origin):
                self.add_cors_headers(response, origin)
            
            return response


def configure_cors(app: Flask, **kwargs) -> CORSMiddleware:
    """
    Configure CORS for Flask application.
    
    Args:
        app: Flask application
        **kwargs: CORS configuration options
        
    Returns:
        Configured CORSMiddleware instance
    """
    return CORSMiddleware(app, **kwargs)
