"""Service catalog (provider services with platform pricing)."""

from .models import CatalogSyncReport, ServiceOffer
from .service import CatalogService, apply_markup

__all__ = ["CatalogService", "CatalogSyncReport", "ServiceOffer", "apply_markup"]
