# SPDX-License-Identifier: Apache-2.0

"""
Domain logic package for the CityFix platform.

This package contains pure business logic functions with no side effects:
access-control tiers plus the issue lifecycle and payment rules.
"""
