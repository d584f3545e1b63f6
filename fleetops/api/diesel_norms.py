"""Routes normes diesel / Diesel norm routes."""

from fastapi import APIRouter, Depends, HTTPException

from fleetops.api.deps import get_config
from fleetops.schemas.diesel import DieselNorm, DieselNormUpdate
from fleetops.services.configuration import ConfigurationStore

router = APIRouter()


@router.get("/", response_model=list[DieselNorm])
async def list_norms(config: ConfigurationStore = Depends(get_config)):
    return await config.list_norms()


@router.put("/", response_model=list[DieselNorm])
async def replace_norms(norms: list[DieselNorm], config: ConfigurationStore = Depends(get_config)):
    """Remplacer toute la table des normes / Replace the whole norm table."""
    return await config.replace_norms(norms)


@router.put("/{fleet_number}", response_model=DieselNorm)
async def save_norm(fleet_number: str, data: DieselNormUpdate, config: ConfigurationStore = Depends(get_config)):
    """Creer ou remplacer la norme d'une flotte / Create or replace a fleet's norm."""
    norm = DieselNorm.model_validate({**data.model_dump(exclude={"updated_by"}), "fleet_number": fleet_number})
    return await config.save_norm(norm, updated_by=data.updated_by)


@router.delete("/{fleet_number}", status_code=204)
async def delete_norm(fleet_number: str, config: ConfigurationStore = Depends(get_config)):
    if not await config.delete_norm(fleet_number):
        raise HTTPException(status_code=404, detail="Diesel norm not found")
