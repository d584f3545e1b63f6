"""Routes API / API routes."""

from fastapi import APIRouter

from fleetops.api import (
    trips,
    diesel,
    diesel_norms,
    cost_rates,
    driver_behavior,
    car_reports,
    action_items,
    missed_loads,
    imports,
)

api_router = APIRouter(prefix="/api")

api_router.include_router(trips.router, prefix="/trips", tags=["trips"])
api_router.include_router(diesel.router, prefix="/diesel", tags=["diesel"])
api_router.include_router(diesel_norms.router, prefix="/diesel-norms", tags=["diesel-norms"])
api_router.include_router(cost_rates.router, prefix="/cost-rates", tags=["cost-rates"])
api_router.include_router(driver_behavior.router, prefix="/driver-behavior", tags=["driver-behavior"])
api_router.include_router(car_reports.router, prefix="/car-reports", tags=["car-reports"])
api_router.include_router(action_items.router, prefix="/action-items", tags=["action-items"])
api_router.include_router(missed_loads.router, prefix="/missed-loads", tags=["missed-loads"])
api_router.include_router(imports.router, prefix="/imports", tags=["imports"])
