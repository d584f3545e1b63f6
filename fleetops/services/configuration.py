"""
Configuration metier persistee / Persisted business configuration.
Normes diesel et taux de couts systeme, relus a chaque appel (aucun cache).
Diesel norms and system cost rates, re-read on every call (no caching).
"""

import logging

from fleetops.constants import (
    DEFAULT_DIESEL_NORMS,
    DEFAULT_SYSTEM_COST_RATES,
    DIESEL_NORMS,
    SYSTEM_COST_RATES,
)
from fleetops.schemas.common import Currency
from fleetops.schemas.cost_rates import SystemCostRates
from fleetops.schemas.diesel import DieselNorm
from fleetops.services.record_store import RecordStore
from fleetops.utils.dates import now_iso

log = logging.getLogger(__name__)


class ConfigurationStore:
    """Acces a la configuration via le RecordStore / Configuration access through the RecordStore."""

    def __init__(self, store: RecordStore):
        self.store = store

    # ─── Normes diesel / Diesel norms ───

    async def list_norms(self) -> list[DieselNorm]:
        return await self.store.load(DIESEL_NORMS, DieselNorm)

    async def save_norm(self, norm: DieselNorm, updated_by: str | None = None) -> DieselNorm:
        """Remplacer la norme d'une flotte / Replace a fleet's norm (one per fleet)."""
        norm = norm.model_copy(update={
            "last_updated": now_iso(),
            "updated_by": updated_by or norm.updated_by or "System",
        })
        saved = await self.store.upsert(DIESEL_NORMS, norm.fleet_number, norm.to_document(), merge=False)
        return DieselNorm.model_validate(saved)

    async def replace_norms(self, norms: list[DieselNorm], updated_by: str | None = None) -> list[DieselNorm]:
        """Remplacer toute la table, la derniere par flotte l'emporte /
        Replace the whole table, last per fleet wins."""
        latest: dict[str, DieselNorm] = {}
        for norm in norms:
            latest[norm.fleet_number] = norm
        for existing in await self.list_norms():
            if existing.fleet_number not in latest:
                await self.store.delete(DIESEL_NORMS, existing.fleet_number)
        now = now_iso()
        await self.store.upsert_many(
            DIESEL_NORMS,
            [
                (fleet, n.model_copy(update={"last_updated": now, "updated_by": updated_by or "System"}).to_document())
                for fleet, n in latest.items()
            ],
            merge=False,
        )
        return await self.list_norms()

    async def delete_norm(self, fleet_number: str) -> bool:
        return await self.store.delete(DIESEL_NORMS, fleet_number)

    # ─── Taux systeme / System cost rates ───

    async def list_cost_rates(self) -> list[SystemCostRates]:
        return await self.store.load(SYSTEM_COST_RATES, SystemCostRates)

    async def get_cost_rates(self, currency: Currency | str) -> SystemCostRates | None:
        raw = await self.store.get(SYSTEM_COST_RATES, Currency(currency).value)
        return SystemCostRates.model_validate(raw) if raw else None

    async def update_cost_rates(self, currency: Currency | str, rates: dict, updated_by: str | None = None) -> SystemCostRates:
        """Remplacer le jeu de taux actif ; les couts deja generes ne changent pas /
        Replace the active rate set; already generated costs are left as is."""
        currency = Currency(currency)
        now = now_iso()
        document = SystemCostRates.model_validate({
            **rates,
            "currency": currency.value,
            "effectiveDate": rates.get("effectiveDate") or now,
            "lastUpdated": now,
            "updatedBy": updated_by or rates.get("updatedBy") or "System",
        }).to_document()
        saved = await self.store.upsert(SYSTEM_COST_RATES, currency.value, document, merge=False)
        return SystemCostRates.model_validate(saved)

    # ─── Valeurs par defaut / Defaults ───

    async def seed_defaults(self) -> None:
        """Creer normes et taux par defaut si absents / Create default norms and rates when missing."""
        if not await self.store.list_collection(DIESEL_NORMS):
            now = now_iso()
            await self.store.upsert_many(
                DIESEL_NORMS,
                [
                    (n["fleetNumber"], {**n, "lastUpdated": now, "updatedBy": "System"})
                    for n in DEFAULT_DIESEL_NORMS
                ],
            )
            log.info("Seeded %d default diesel norms", len(DEFAULT_DIESEL_NORMS))

        for currency, rates in DEFAULT_SYSTEM_COST_RATES.items():
            if await self.get_cost_rates(currency) is None:
                await self.update_cost_rates(currency, rates)
                log.info("Seeded default %s system cost rates", currency.value)
