"""
CityFix API - Flask Application Entry Point

This module builds the Flask application with OpenAPI 3.0 support, reads the
environment configuration, constructs the store and gateway collaborators once
and injects them into the route handlers.
"""

import os
from datetime import datetime, timezone
from typing import Any, Mapping, Optional
from dotenv import load_dotenv
from flask import jsonify
from flask_openapi3 import OpenAPI, Info, Tag
import logging

from .observability.config import setup_observability
from .observability.middleware import add_observability_middleware
from .middleware.cors import configure_cors, parse_origins
from .middleware.error_handler import ErrorHandlerMiddleware
from .middleware.auth import AuthMiddleware
from .services.mongodb import MongoDBService, build_connection_string, DEFAULT_DATABASE
from .services.auth import AuthService
from .services.users import UserRepository
from .services.issues import IssueRepository
from .services.payments import PaymentRepository, PaymentService, DEFAULT_CURRENCY
from .services.payment_gateway import StripeGateway, DEFAULT_API_BASE
from .services.stats import StatsService

logger = logging.getLogger(__name__)

SERVICE_NAME = "cityfix-api"
SERVICE_VERSION = "1.0.0"
DEV_TOKEN_SECRET = "dev-secret-key"

info = Info(
    title="CityFix API",
    version=SERVICE_VERSION,
    description="Municipal issue reporting, triage and payments API"
)


def load_config(overrides: Optional[Mapping[str, Any]] = None) -> dict:
    """Read configuration from the environment, then apply overrides."""
    environment = os.getenv('ENVIRONMENT', 'development')
    
    config = {
        'ENVIRONMENT': environment,
        'DEBUG': environment == 'development',
        # Security configuration
        'ACCESS_TOKEN_SECRET': os.getenv('ACCESS_TOKEN_SECRET', ''),
        # Database configuration
        'MONGODB_URI': build_connection_string(),
        'MONGODB_DATABASE': os.getenv('MONGODB_DATABASE', DEFAULT_DATABASE),
        # Payment gateway configuration
        'STRIPE_SECRET_KEY': os.getenv('STRIPE_SECRET_KEY', ''),
        'STRIPE_API_BASE': os.getenv('STRIPE_API_BASE', DEFAULT_API_BASE),
        'PAYMENT_CURRENCY': os.getenv('PAYMENT_CURRENCY', DEFAULT_CURRENCY),
        # Cross-origin clients
        'CLIENT_ORIGINS': parse_origins(os.getenv('CLIENT_ORIGINS')),
        # Feature flags
        'OTEL_ENABLED': os.getenv('OTEL_ENABLED', 'true').lower() == 'true'
    }
    
    if overrides:
        config.update(overrides)
    
    if not config['ACCESS_TOKEN_SECRET']:
        if config['ENVIRONMENT'] == 'production':
            raise RuntimeError("ACCESS_TOKEN_SECRET must be set in production")
        logger.warning("No ACCESS_TOKEN_SECRET found, using development secret")
        config['ACCESS_TOKEN_SECRET'] = DEV_TOKEN_SECRET
    
    return config


def create_app(config: Optional[Mapping[str, Any]] = None,
               mongodb_service: Optional[MongoDBService] = None,
               payment_gateway: Optional[StripeGateway] = None) -> OpenAPI:
    """
    Build the CityFix Flask application.
    
    Args:
        config: Configuration overrides applied after the environment
        mongodb_service: Prebuilt store connection (defaults to MONGODB_URI)
        payment_gateway: Prebuilt payment gateway (defaults to Stripe)
        
    Returns:
        Configured application
    """
    load_dotenv()
    settings = load_config(config)
    
    setup_observability(settings['ENVIRONMENT'], settings['OTEL_ENABLED'])
    
    app = OpenAPI(__name__, info=info)
    app.config.update(settings)
    
    add_observability_middleware(app, instrument=settings['OTEL_ENABLED'])
    
    # Initialize services
    mongodb_service = mongodb_service or MongoDBService(
        settings['MONGODB_URI'],
        settings['MONGODB_DATABASE']
    )
    payment_gateway = payment_gateway or StripeGateway(
        settings['STRIPE_SECRET_KEY'],
        settings['STRIPE_API_BASE']
    )
    auth_service = AuthService(settings['ACCESS_TOKEN_SECRET'])
    user_repository = UserRepository(mongodb_service)
    issue_repository = IssueRepository(mongodb_service)
    payment_repository = PaymentRepository(mongodb_service)
    payment_service = PaymentService(
        payment_repository,
        user_repository,
        issue_repository,
        payment_gateway,
        settings['PAYMENT_CURRENCY']
    )
    stats_service = StatsService(user_repository, issue_repository, payment_repository)
    
    # Initialize middleware
    ErrorHandlerMiddleware(app)
    configure_cors(app, allowed_origins=settings['CLIENT_ORIGINS'], allow_credentials=True)
    
    # Make services available to routes
    app.mongodb_service = mongodb_service
    app.auth_service = auth_service
    app.auth_middleware = AuthMiddleware(auth_service, user_repository)
    app.user_repository = user_repository
    app.issue_repository = issue_repository
    app.payment_repository = payment_repository
    app.payment_service = payment_service
    app.stats_service = stats_service
    
    # Register routes
    from .routes.auth import auth_bp
    from .routes.users import users_bp
    from .routes.issues import issues_bp
    from .routes.payments import payments_bp
    from .routes.admin import admin_bp
    
    app.register_api(auth_bp)
    app.register_api(users_bp)
    app.register_api(issues_bp)
    app.register_api(payments_bp)
    app.register_api(admin_bp)
    
    register_health_routes(app)
    
    logger.info(
        "CityFix API initialized",
        extra={"environment": settings['ENVIRONMENT'], "database": settings['MONGODB_DATABASE']}
    )
    return app


def register_health_routes(app: OpenAPI) -> None:
    """Liveness banner and store health check."""
    health_tag = Tag(name="Health", description="System health and status")
    
    @app.get('/', tags=[health_tag])
    def root():
        return "CityFix Server is Running"
    
    @app.get('/api/healthz', tags=[health_tag])
    def health_check():
        """Report store connectivity; 503 when the store is unreachable."""
        mongodb_health = app.mongodb_service.health_check()
        status = "healthy" if mongodb_health["status"] == "healthy" else "unhealthy"
        
        health_data = {
            "status": status,
            "service": SERVICE_NAME,
            "version": SERVICE_VERSION,
            "environment": app.config['ENVIRONMENT'],
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "dependencies": {"mongodb": mongodb_health}
        }
        return jsonify(health_data), 200 if status == "healthy" else 503


if __name__ == '__main__':
    # Development server
    application = create_app()
    application.run(
        host='0.0.0.0',
        port=int(os.getenv('PORT', 5000)),
        debug=application.config['DEBUG']
    )
