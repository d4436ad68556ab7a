# SPDX-License-Identifier: Apache-2.0

"""
Middleware package for request processing.

This package contains the request-processing middleware of the CityFix API:
access control, body validation, CORS and problem-detail errors.
"""
