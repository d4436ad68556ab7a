# SPDX-License-Identifier: Apache-2.0

"""
Observability Middleware

Flask middleware for adding OpenTelemetry instrumentation and request logging
to all HTTP requests.
"""

import time
import logging
from flask import Flask, request, g
from opentelemetry import trace
from opentelemetry.instrumentation.flask import FlaskInstrumentor

logger = logging.getLogger(__name__)


def add_observability_middleware(app: Flask, instrument: bool = True):
    """Add OpenTelemetry instrumentation and request logging to Flask app."""
    
    if instrument:
        FlaskInstrumentor().instrument_app(app)
    
    @app.before_request
    def before_request():
        """Start timing and capture the trace id."""
        g.start_time = time.time()
        g.trace_id = None
        
        span = trace.get_current_span()
        if span.is_recording():
            g.trace_id = format(span.get_span_context().trace_id, "032x")
    
    @app.after_request
    def after_request(response):
        """Log request completion."""
        duration_ms = (time.time() - g.get('start_time', time.time())) * 1000
        
        span = trace.get_current_span()
        if span.is_recording():
            span.set_attribute("http.duration_ms", round(duration_ms, 2))
        
        logger.info(
            "HTTP request completed",
            extra={
                "method": request.method,
                "path": request.path,
                "status_code": response.status_code,
                "duration_ms": round(duration_ms, 2),
                "remote_addr": request.remote_addr,
                "trace_id": g.get('trace_id')
            }
        )
        
        # Add trace ID to response headers for debugging
        if g.get('trace_id'):
            response.headers['X-Trace-Id'] = g.trace_id
        
        return response
