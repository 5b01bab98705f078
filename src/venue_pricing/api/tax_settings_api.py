"""
Tax Settings API - FastAPI router for tax, fee and service charge definitions.
"""
from typing import Optional, Union

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from ..services.catalog_store import CatalogStore
from .state import get_store

router = APIRouter(prefix="/api/tax-settings", tags=["tax-settings"])


# Pydantic models for API
class TaxSettingCreate(BaseModel):
    """Request model for creating a tax setting."""
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    name: str
    type: str  # tax, fee, service_charge
    calculation: str  # percentage, fixed
    value: Union[str, float, int]
    apply_to: str = Field(default="all", alias="applyTo")
    is_active: bool = Field(default=True, alias="isActive")
    is_taxable: bool = Field(default=False, alias="isTaxable")
    applicable_tax_ids: list[str] = Field(default_factory=list, alias="applicableTaxIds")
    description: Optional[str] = None


class TaxSettingUpdate(BaseModel):
    """Request model for updating a tax setting."""
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    type: Optional[str] = None
    calculation: Optional[str] = None
    value: Optional[Union[str, float, int]] = None
    apply_to: Optional[str] = Field(default=None, alias="applyTo")
    is_active: Optional[bool] = Field(default=None, alias="isActive")
    is_taxable: Optional[bool] = Field(default=None, alias="isTaxable")
    applicable_tax_ids: Optional[list[str]] = Field(default=None, alias="applicableTaxIds")
    description: Optional[str] = None


class ValidationResponse(BaseModel):
    """Response model for validation."""
    valid: bool
    errors: list[str]
    warnings: list[str]


# Endpoints

@router.get("")
async def list_tax_settings(include_inactive: bool = True, store: CatalogStore = Depends(get_store)):
    """List all tax settings."""
    return [d.to_dict() for d in store.list_definitions(include_inactive=include_inactive)]


@router.get("/{definition_id}")
async def get_tax_setting(definition_id: str, store: CatalogStore = Depends(get_store)):
    """Get a single tax setting by ID."""
    definition = store.get_definition(definition_id)
    if not definition:
        raise HTTPException(status_code=404, detail=f"Tax setting '{definition_id}' not found")
    return definition.to_dict()


@router.post("")
async def create_tax_setting(data: TaxSettingCreate, store: CatalogStore = Depends(get_store)):
    """Create a new tax setting."""
    record = data.model_dump()

    # Validate first
    validation = store.validate_definition(record)
    if not validation.valid:
        raise HTTPException(status_code=400, detail={"errors": validation.errors})

    try:
        return store.create_definition(record).to_dict()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


async def _update(definition_id: str, updates: TaxSettingUpdate, store: CatalogStore) -> dict:
    if store.get_definition(definition_id) is None:
        raise HTTPException(status_code=404, detail=f"Tax setting '{definition_id}' not found")

    # Only fields present in the request body are applied
    try:
        return store.update_definition(definition_id, updates.model_dump(exclude_unset=True)).to_dict()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.put("/{definition_id}")
async def update_tax_setting(definition_id: str, updates: TaxSettingUpdate, store: CatalogStore = Depends(get_store)):
    """Update an existing tax setting."""
    return await _update(definition_id, updates, store)


@router.patch("/{definition_id}")
async def patch_tax_setting(definition_id: str, updates: TaxSettingUpdate, store: CatalogStore = Depends(get_store)):
    """Partially update a tax setting (same semantics as PUT)."""
    return await _update(definition_id, updates, store)


@router.delete("/{definition_id}")
async def delete_tax_setting(definition_id: str, store: CatalogStore = Depends(get_store)):
    """Delete a tax setting."""
    try:
        store.delete_definition(definition_id)
        return {"success": True, "message": f"Tax setting '{definition_id}' deleted"}
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/validate", response_model=ValidationResponse)
async def validate_tax_setting(data: TaxSettingCreate, store: CatalogStore = Depends(get_store)):
    """Validate a tax setting without saving."""
    result = store.validate_definition(data.model_dump())
    return ValidationResponse(valid=result.valid, errors=result.errors, warnings=result.warnings)
