"""
Service cycle de vie des voyages / Trip lifecycle service.
Transitions de statut, facturation, paiements et liaison des pleins diesel.
Status transitions, invoicing, payments and diesel fill linkage.

Toutes les fonctions retournent de nouvelles copies / All functions return new copies.
"""

import uuid

from fleetops.constants import DIESEL_REFERENCE_PREFIX, FUEL_COST_CATEGORY
from fleetops.schemas.common import Currency
from fleetops.schemas.diesel import DieselRecord
from fleetops.schemas.trip import (
    CostEntry,
    PaymentStatus,
    Trip,
    TripStatus,
)
from fleetops.utils.dates import now_iso

STATUS_ORDER = (TripStatus.ACTIVE, TripStatus.COMPLETED, TripStatus.INVOICED, TripStatus.PAID)


class TripTransitionError(ValueError):
    """Transition de statut interdite / Forbidden status transition."""


class TripLifecycleService:
    """Transitions monotones active -> completed -> invoiced -> paid / Monotonic transitions."""

    @staticmethod
    def rank(status: TripStatus | str) -> int:
        return STATUS_ORDER.index(TripStatus(status))

    @staticmethod
    def advance(trip: Trip, new_status: TripStatus, **fields) -> Trip:
        """Avancer le statut, jamais en arriere / Advance the status, never backwards."""
        current = TripLifecycleService.rank(trip.status)
        target = TripLifecycleService.rank(new_status)
        if target <= current:
            raise TripTransitionError(
                f"Cannot move trip {trip.id} from {TripStatus(trip.status).value} to {TripStatus(new_status).value}"
            )
        return trip.model_copy(update={"status": TripStatus(new_status).value, **fields})

    @staticmethod
    def complete(trip: Trip, completed_by: str = "Current User") -> Trip:
        return TripLifecycleService.advance(
            trip, TripStatus.COMPLETED, completed_at=now_iso(), completed_by=completed_by,
        )

    @staticmethod
    def reopen(trip: Trip) -> Trip:
        """Reouverture explicite d'un voyage termine / Explicit reopen of a completed trip."""
        if TripStatus(trip.status) != TripStatus.COMPLETED:
            raise TripTransitionError(f"Only completed trips can be reopened (trip {trip.id} is {trip.status})")
        return trip.model_copy(update={
            "status": TripStatus.ACTIVE.value,
            "completed_at": None,
            "completed_by": None,
        })

    @staticmethod
    def invoice(trip: Trip, invoice_number: str, invoice_date: str, invoice_due_date: str) -> Trip:
        if TripStatus(trip.status) != TripStatus.COMPLETED:
            raise TripTransitionError(f"Only completed trips can be invoiced (trip {trip.id} is {trip.status})")
        return TripLifecycleService.advance(
            trip,
            TripStatus.INVOICED,
            invoice_number=invoice_number,
            invoice_date=invoice_date,
            invoice_due_date=invoice_due_date,
            payment_status=PaymentStatus.UNPAID.value,
        )

    @staticmethod
    def record_payment(trip: Trip, payment: dict) -> Trip:
        """Mettre a jour le paiement ; paye => statut paid / Update payment; paid => status paid."""
        if TripLifecycleService.rank(trip.status) < TripLifecycleService.rank(TripStatus.INVOICED):
            raise TripTransitionError(f"Trip {trip.id} has not been invoiced")
        updated = trip.model_copy(update=payment)
        if payment.get("payment_status") == PaymentStatus.PAID and TripStatus(trip.status) != TripStatus.PAID:
            updated = TripLifecycleService.advance(updated, TripStatus.PAID)
        return updated

    # ─── Pleins diesel / Diesel fills ───

    @staticmethod
    def diesel_reference(record_id: str) -> str:
        return f"{DIESEL_REFERENCE_PREFIX}{record_id}"

    @staticmethod
    def allocate_diesel(record: DieselRecord, trip: Trip) -> tuple[DieselRecord, Trip]:
        """Lier un plein a un voyage et creer le cout carburant /
        Link a fill to a trip and create the fuel cost entry."""
        now = now_iso()
        reference = TripLifecycleService.diesel_reference(record.id)
        cost = CostEntry(
            id=str(uuid.uuid4()),
            trip_id=trip.id,
            category=FUEL_COST_CATEGORY,
            sub_category="Diesel",
            amount=record.total_cost,
            currency=record.currency or Currency.ZAR.value,
            reference_number=reference,
            date=record.date,
            notes=f"Diesel fill-up: {record.litres_filled:g} litres at {record.fuel_station or 'unknown station'}",
            created_at=now,
            updated_at=now,
        )
        # Un seul cout par plein / One cost entry per fill
        costs = [c for c in trip.costs if c.reference_number != reference]
        return (
            record.model_copy(update={"trip_id": trip.id}),
            trip.model_copy(update={"costs": costs + [cost]}),
        )

    @staticmethod
    def unallocate_diesel(record: DieselRecord, trip: Trip | None) -> tuple[DieselRecord, Trip | None]:
        """Delier un plein et retirer son cout / Unlink a fill and remove its cost entry."""
        reference = TripLifecycleService.diesel_reference(record.id)
        updated_trip = None
        if trip is not None:
            updated_trip = trip.model_copy(
                update={"costs": [c for c in trip.costs if c.reference_number != reference]}
            )
        return record.model_copy(update={"trip_id": None}), updated_trip
