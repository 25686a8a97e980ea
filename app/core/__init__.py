"""
Shared building blocks for the chat and authentication apps.

Plain exports are re-exported here. Models and model mixins must be
imported from core.models and core.model_mixins, since importing them at
package load would touch the app registry too early.
"""

from .exceptions import (
    BaseApplicationError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from .services import BaseService

__all__ = [
    "BaseApplicationError",
    "BaseService",
    "NotFoundError",
    "PermissionDeniedError",
    "ValidationError",
]
