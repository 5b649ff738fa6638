# vector_wire/__init__.py
# SPDX-License-Identifier: Apache-2.0

"""
Vector Wire

Minimal client for textual request/response exchanges with a local
vector-database service over raw TCP.
"""

__version__ = "0.1.0"
