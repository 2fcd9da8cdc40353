"""Domain services."""

from src.domain.services.auth_service import AuthService
from src.domain.services.catalog import CatalogService

__all__ = [
    "AuthService",
    "CatalogService",
]
