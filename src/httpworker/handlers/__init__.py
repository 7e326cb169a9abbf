"""
Filesystem-backed resources served by the workers.
"""

from .static import Resource, ResourceNotFoundError

__all__ = [
    "Resource",
    "ResourceNotFoundError",
]
