"""
HTTP surface for apiscout
"""

from .app import create_app
from .router import router, get_engine

__all__ = ['create_app', 'router', 'get_engine']
