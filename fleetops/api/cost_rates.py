"""Routes taux de couts systeme / System cost rate routes."""

from fastapi import APIRouter, Depends, HTTPException

from fleetops.api.deps import get_config
from fleetops.schemas.common import Currency
from fleetops.schemas.cost_rates import SystemCostRates, SystemCostRatesUpdate
from fleetops.services.configuration import ConfigurationStore

router = APIRouter()


@router.get("/", response_model=list[SystemCostRates])
async def list_cost_rates(config: ConfigurationStore = Depends(get_config)):
    return await config.list_cost_rates()


@router.get("/{currency}", response_model=SystemCostRates)
async def get_cost_rates(currency: Currency, config: ConfigurationStore = Depends(get_config)):
    rates = await config.get_cost_rates(currency)
    if rates is None:
        raise HTTPException(status_code=404, detail=f"No system cost rates configured for {currency.value}")
    return rates


@router.put("/{currency}", response_model=SystemCostRates)
async def update_cost_rates(
    currency: Currency,
    data: SystemCostRatesUpdate,
    config: ConfigurationStore = Depends(get_config),
):
    """Remplacer les taux actifs ; les voyages existants gardent leurs couts /
    Replace the active rates; existing trips keep their generated costs."""
    return await config.update_cost_rates(currency, data.to_patch(), updated_by=data.updated_by)
