#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Script to create MongoDB indexes used by the CityFix API.

Run with ``python -m cityfix.scripts.create_indexes``.
"""

import sys
import logging

from dotenv import load_dotenv

from cityfix.services.mongodb import get_mongodb_service, close_mongodb_connection

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)


def main() -> int:
    """Create MongoDB indexes."""
    load_dotenv()
    try:
        logger.info("Starting MongoDB index creation...")
        
        mongodb_service = get_mongodb_service()
        
        health = mongodb_service.health_check()
        if health['status'] != 'healthy':
            logger.error(f"MongoDB is not healthy: {health}")
            return 1
        
        logger.info(f"Connected to MongoDB - Database: {health['database']}")
        
        mongodb_service.create_indexes()
        
        logger.info("MongoDB indexes created successfully!")
        return 0
        
    except Exception as e:
        logger.error(f"Failed to create indexes: {e}")
        return 1
    finally:
        close_mongodb_connection()


if __name__ == "__main__":
    sys.exit(main())
