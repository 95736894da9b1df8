"""
API Routes Package

Contains all FastAPI route handlers.
"""

from . import auth
from . import analysis
from . import thumbnails

__all__ = ['auth', 'analysis', 'thumbnails']
