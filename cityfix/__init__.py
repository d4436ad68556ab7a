# SPDX-License-Identifier: Apache-2.0

"""
CityFix API - municipal issue tracking backend.
"""

__version__ = "1.0.0"
