"""
Service d'anciennete des factures / Invoice aging service.
Classe chaque facture impayee dans une tranche selon des seuils par devise.
Classifies each unpaid invoice into a bucket using per-currency thresholds.
"""

from collections.abc import Iterable, Mapping
from datetime import date, timedelta

from fleetops.constants import AGING_THRESHOLDS, FOLLOW_UP_THRESHOLDS
from fleetops.schemas.common import Currency
from fleetops.schemas.invoice import (
    AgingBand,
    AgingBucket,
    AgingBucketTotal,
    AgingSummary,
    InvoiceAging,
)
from fleetops.schemas.trip import PaymentStatus, Trip, TripStatus
from fleetops.utils.dates import parse_date

AgingTable = Mapping[Currency, Mapping[AgingBucket, AgingBand]]

_BUCKET_ORDER = (AgingBucket.CURRENT, AgingBucket.WARNING, AgingBucket.CRITICAL, AgingBucket.OVERDUE)


class InvoiceAgingService:
    """Anciennete des creances / Receivables aging."""

    @staticmethod
    def aging_days(invoice_date: date, today: date) -> int:
        """Jours entiers depuis la facture / Whole days since invoicing."""
        return (today - invoice_date).days

    @staticmethod
    def bucket_for(days: int, currency: Currency | str, thresholds: AgingTable = AGING_THRESHOLDS) -> AgingBucket:
        """Tranche pour un nombre de jours / Bucket for a day count.

        Une facture datee dans le futur est `current` / An invoice dated in the future is `current`.
        """
        bands = thresholds[Currency(currency)]
        if days < bands[AgingBucket.CURRENT].min:
            return AgingBucket.CURRENT
        for bucket in _BUCKET_ORDER:
            if bands[bucket].contains(days):
                return bucket
        return AgingBucket.OVERDUE

    @staticmethod
    def follow_up_required(
        trip: Trip,
        invoice_date: date,
        days: int,
        follow_up_thresholds: Mapping[Currency, int] = FOLLOW_UP_THRESHOLDS,
    ) -> bool:
        """
        Relance requise / Follow-up required.
        Seuil atteint et aucune relance datee du jour de franchissement ou apres.
        Threshold reached and no follow-up dated on or after the crossing day.
        """
        threshold = follow_up_thresholds[Currency(trip.revenue_currency)]
        if days < threshold:
            return False
        crossed_on = invoice_date + timedelta(days=threshold)
        for record in trip.follow_up_history:
            follow_up_date = parse_date(record.follow_up_date)
            if follow_up_date is not None and follow_up_date >= crossed_on:
                return False
        return True

    @staticmethod
    def outstanding_amount(trip: Trip) -> float:
        paid = trip.payment_amount if trip.payment_status == PaymentStatus.PARTIAL else 0.0
        return round(max(0.0, trip.base_revenue - (paid or 0.0)), 2)

    @staticmethod
    def classify(
        trip: Trip,
        today: date,
        thresholds: AgingTable = AGING_THRESHOLDS,
        follow_up_thresholds: Mapping[Currency, int] = FOLLOW_UP_THRESHOLDS,
    ) -> InvoiceAging | None:
        """Anciennete d'un voyage facture / Aging of an invoiced trip.

        None si paye, pas encore facture, ou sans date de facture / d'echeance.
        None when paid, not yet invoiced, or missing invoice / due date.
        """
        if trip.payment_status == PaymentStatus.PAID:
            return None
        if trip.status not in (TripStatus.INVOICED, TripStatus.PAID):
            return None
        invoice_date = parse_date(trip.invoice_date)
        due_date = parse_date(trip.invoice_due_date)
        if invoice_date is None or due_date is None:
            return None

        days = InvoiceAgingService.aging_days(invoice_date, today)
        return InvoiceAging(
            trip_id=trip.id,
            invoice_number=trip.invoice_number,
            client_name=trip.client_name,
            currency=Currency(trip.revenue_currency),
            invoice_date=invoice_date.isoformat(),
            invoice_due_date=due_date.isoformat(),
            aging_days=days,
            bucket=InvoiceAgingService.bucket_for(days, trip.revenue_currency, thresholds),
            outstanding_amount=InvoiceAgingService.outstanding_amount(trip),
            follow_up_required=InvoiceAgingService.follow_up_required(
                trip, invoice_date, days, follow_up_thresholds
            ),
        )

    @staticmethod
    def summarize(trips: Iterable[Trip], today: date) -> AgingSummary:
        """Synthese par devise et tranche / Summary per currency and bucket."""
        buckets = {
            c.value: {b.value: AgingBucketTotal() for b in _BUCKET_ORDER}
            for c in Currency
        }
        invoices: list[InvoiceAging] = []
        for trip in trips:
            aging = InvoiceAgingService.classify(trip, today)
            if aging is None:
                continue
            invoices.append(aging)
            total = buckets[Currency(aging.currency).value][AgingBucket(aging.bucket).value]
            total.count += 1
            total.outstanding_amount = round(total.outstanding_amount + aging.outstanding_amount, 2)

        return AgingSummary(
            as_of=today.isoformat(),
            buckets=buckets,
            follow_ups_required=sum(1 for i in invoices if i.follow_up_required),
            invoices=invoices,
        )
