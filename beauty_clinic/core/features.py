"""
Static router table.

Every router the API can serve is declared here once. Optional routers carry
the capability flag that enables them; flags are read from the settings when
the application is built and never re-evaluated.
"""
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from fastapi import APIRouter, FastAPI

from ..appointments.router import router as appointments_router
from ..auth.router import router as auth_router
from ..clinics.router import router as clinics_router
from ..config import Settings
from ..consents.router import router as consents_router
from ..dashboard.router import router as dashboard_router
from ..loyalty.router import router as loyalty_router
from ..professionals.router import router as professionals_router
from ..treatments.router import router as treatments_router
from ..users.router import router as profile_router
from ..vip.router import router as vip_router

API_PREFIX = "/api/v1"


class Feature(str, Enum):
    """
    Optional capabilities, each backed by a ``feature_*`` setting.
    """
    VIP = "vip"
    CONSENTS = "consents"
    LOYALTY = "loyalty"
    DASHBOARD = "dashboard"


@dataclass(frozen=True)
class RouteEntry:
    prefix: str
    router: APIRouter
    tags: List[str]
    feature: Optional[Feature] = None


ROUTE_TABLE: List[RouteEntry] = [
    RouteEntry("/auth", auth_router, ["Authentication"]),
    RouteEntry("/clinics", clinics_router, ["Clinics"]),
    RouteEntry("/professionals", professionals_router, ["Professionals"]),
    RouteEntry("/treatments", treatments_router, ["Treatments"]),
    RouteEntry("/appointments", appointments_router, ["Appointments"]),
    RouteEntry("/profile", profile_router, ["Profile"]),
    RouteEntry("/consents", consents_router, ["Consents"], Feature.CONSENTS),
    RouteEntry("/beauty-points", loyalty_router, ["Beauty Points"], Feature.LOYALTY),
    RouteEntry("/vip", vip_router, ["VIP"], Feature.VIP),
    RouteEntry("/dashboard", dashboard_router, ["Dashboard"], Feature.DASHBOARD),
]


def is_enabled(feature: Optional[Feature], settings: Settings) -> bool:
    """Core routers have no feature and are always on."""
    if feature is None:
        return True
    return bool(getattr(settings, f"feature_{feature.value}"))


def enabled_routes(settings: Settings) -> List[RouteEntry]:
    return [entry for entry in ROUTE_TABLE if is_enabled(entry.feature, settings)]


def include_routers(app: FastAPI, settings: Settings) -> List[RouteEntry]:
    """
    Mount every enabled router under ``/api/v1``.

    Returns:
        List[RouteEntry]: The entries that were mounted
    """
    mounted = enabled_routes(settings)
    for entry in mounted:
        app.include_router(entry.router, prefix=f"{API_PREFIX}{entry.prefix}", tags=entry.tags)
    return mounted
