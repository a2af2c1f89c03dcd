"""
Backend API access.
"""

from .client import OntologyAPIClient

__all__ = ['OntologyAPIClient']
