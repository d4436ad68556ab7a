#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Grant a role to an existing user.

Registration always creates citizens; this script bootstraps the first admin
(and can promote staff) directly in the store:

    python -m cityfix.scripts.grant_role admin@example.com admin
"""

import sys
import argparse
import logging

from dotenv import load_dotenv

from cityfix.models.enums import UserRole
from cityfix.services.mongodb import MongoDBService, USERS, get_mongodb_service, close_mongodb_connection

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)


def grant_role(mongodb_service: MongoDBService, email: str, role: UserRole) -> bool:
    """Set ``role`` on the user with ``email``; False when no such user exists."""
    result = mongodb_service.get_collection(USERS).update_one(
        {"email": email},
        {"$set": {"role": role.value}}
    )
    return result.matched_count > 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Grant a role to a CityFix user")
    parser.add_argument("email", help="Email of an already registered user")
    parser.add_argument("role", choices=[role.value for role in UserRole])
    args = parser.parse_args(argv)
    
    load_dotenv()
    try:
        if not grant_role(get_mongodb_service(), args.email, UserRole(args.role)):
            logger.error(f"No user registered with email {args.email}")
            return 1
        logger.info(f"Granted role '{args.role}' to {args.email}")
        return 0
    finally:
        close_mongodb_connection()


if __name__ == "__main__":
    sys.exit(main())
