# ================================
# RESERVATION LIFECYCLE RULES (services/reservation_lifecycle.py)
# ================================

"""
Decision logic for reservation status transitions.

Nothing in here touches the database: given the current reservation status
and the property's inventory snapshot, these functions decide whether a
transition is legal and what the inventory must look like afterwards.
ReservationService applies the result atomically.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict

from app.core.exceptions import InvalidTransition, MissingRejectionReason, NoUnitsAvailable
from app.schemas.property import InventorySnapshot

class ReservationStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"

class PropertyStatus(str, Enum):
    AVAILABLE = "available"
    RESERVED = "reserved"

class OversellPolicy(str, Enum):
    REJECT = "reject"  # refuse to confirm when no unit is free
    CLAMP = "clamp"  # confirm anyway, inventory stays at 0

ACTIVE_STATUSES = (ReservationStatus.PENDING, ReservationStatus.CONFIRMED)

# Valid status transitions
VALID_TRANSITIONS = {
    ReservationStatus.PENDING: {ReservationStatus.CONFIRMED, ReservationStatus.CANCELLED, ReservationStatus.COMPLETED},
    ReservationStatus.CONFIRMED: {ReservationStatus.CANCELLED, ReservationStatus.COMPLETED},
    ReservationStatus.CANCELLED: {ReservationStatus.COMPLETED},
    ReservationStatus.COMPLETED: set(),  # final
}

# Targets only an admin may move a reservation into
ADMIN_ONLY_TARGETS = {ReservationStatus.COMPLETED}

# Targets a customer may move their own reservation into
CUSTOMER_TARGETS = {ReservationStatus.CANCELLED}

class InventoryPlan(BaseModel):
    """Inventory outcome of a transition"""
    model_config = ConfigDict(frozen=True)

    units_available: Optional[int] = None
    status: str
    changed: bool = False
    oversold: bool = False

def derive_property_status(units_available: int) -> PropertyStatus:
    return PropertyStatus.AVAILABLE if units_available > 0 else PropertyStatus.RESERVED

def clamp_units(units_available: int, units_total: int) -> int:
    return max(0, min(units_available, units_total))

def validate_transition(
    current: ReservationStatus,
    new: ReservationStatus,
    rejection_reason: Optional[str] = None,
    actor_role: str = "agent"
) -> None:
    """Raise InvalidTransition / MissingRejectionReason for illegal requests"""
    if new not in VALID_TRANSITIONS[current]:
        raise InvalidTransition(current.value, new.value)

    # Rejecting a pending request needs a reason the customer can read,
    # withdrawing one's own request does not
    if actor_role == "customer":
        return

    if current == ReservationStatus.PENDING and new == ReservationStatus.CANCELLED:
        if not rejection_reason or not rejection_reason.strip():
            raise MissingRejectionReason()

def plan_inventory(
    snapshot: InventorySnapshot,
    current: ReservationStatus,
    new: ReservationStatus,
    policy: OversellPolicy = OversellPolicy.REJECT
) -> InventoryPlan:
    """
    Compute the property's inventory after moving a reservation from
    `current` to `new`.

    Confirming consumes one unit, cancelling a confirmed reservation releases
    one. The result always satisfies 0 <= units_available <= units_total.
    Properties without units_total are left alone.
    """
    if not snapshot.tracks_inventory:
        return InventoryPlan(units_available=snapshot.units_available, status=snapshot.status)

    units_total = snapshot.units_total
    stored = snapshot.units_available
    available = units_total if stored is None else stored
    oversold = False

    if new == ReservationStatus.CONFIRMED and current != ReservationStatus.CONFIRMED:
        if available > 0:
            available -= 1
        elif policy == OversellPolicy.REJECT:
            raise NoUnitsAvailable()
        else:
            oversold = True

    elif new == ReservationStatus.CANCELLED and current == ReservationStatus.CONFIRMED:
        if available < units_total:
            available += 1

    available = clamp_units(available, units_total)
    status = derive_property_status(available).value

    return InventoryPlan(
        units_available=available,
        status=status,
        changed=(available != stored or status != snapshot.status),
        oversold=oversold
    )
