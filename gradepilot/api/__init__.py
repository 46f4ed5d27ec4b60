"""
API module for the REST implementation.
"""

from .rest_api import GradePilotRestAPI

__all__ = [
    "GradePilotRestAPI",
]
