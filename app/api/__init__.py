# ================================
# API PACKAGE INITIALIZATION (api/__init__.py)
# ================================

"""
API Package

Root package für alle API-Routen
"""

from fastapi import APIRouter

from app.api.v1 import reservations, properties, notifications, metrics, conversations, agents
from app.schemas.base import ErrorResponse

# Version Info
API_VERSION = "1.0.0"
API_TITLE = "Nam3Land Reservation API"
API_DESCRIPTION = """
Reservation lifecycle for the Nam3Land rental marketplace

## Features
- Viewing requests with one active reservation per customer and property
- Agent/admin status transitions with atomic unit inventory updates
- Customer self-cancellation of own reservations
- Customer/agent conversations
- Best-effort notifications
- Audit trail and status history

## Authentication
- JWT bearer tokens issued by the identity provider
"""

def _errors(descriptions: dict) -> dict:
    """OpenAPI error responses, all with the standard error body"""
    return {
        code: {"model": ErrorResponse, "description": description}
        for code, description in descriptions.items()
    }

# V1 Router mit allen Modulen
api_router = APIRouter()

api_router.include_router(
    reservations.router,
    prefix="/reservations",
    tags=["Reservations"],
    responses=_errors({
        401: "Authentication required",
        403: "Access denied",
        404: "Reservation not found",
        409: "Conflicting state"
    })
)

api_router.include_router(
    properties.router,
    prefix="/properties",
    tags=["Properties"],
    responses=_errors({
        401: "Authentication required",
        403: "Admin access required",
        404: "Property not found"
    })
)

api_router.include_router(
    conversations.router,
    prefix="/conversations",
    tags=["Conversations"],
    responses=_errors({
        401: "Authentication required",
        403: "Access denied",
        404: "Conversation not found",
        409: "Conversation closed"
    })
)

api_router.include_router(
    agents.router,
    prefix="/agents",
    tags=["Agents"],
    responses=_errors({
        401: "Authentication required",
        403: "Admin access required",
        404: "Agent not found"
    })
)

api_router.include_router(
    notifications.router,
    prefix="/notifications",
    tags=["Notifications"],
    responses=_errors({
        401: "Authentication required",
        403: "Access denied",
        404: "Notification not found"
    })
)

api_router.include_router(
    metrics.router,
    prefix="/metrics",
    tags=["Metrics"],
    responses=_errors({
        401: "Authentication required",
        403: "Access denied"
    })
)

__all__ = ["api_router", "API_VERSION", "API_TITLE", "API_DESCRIPTION"]
