"""
Catalog API - FastAPI routers for packages and services.

Both collections share the same shape, so one router factory builds both.
"""
from typing import Optional, Union

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from ..services.catalog_store import CatalogStore
from .state import get_store


class ItemCreate(BaseModel):
    """Request model for creating a package or service."""
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    name: str = ""
    category: str = ""
    description: Optional[str] = None
    price: Optional[Union[str, float, int]] = None
    pricing_model: str = Field(default="fixed", alias="pricingModel")
    enabled_tax_ids: list[str] = Field(default_factory=list, alias="enabledTaxIds")
    enabled_fee_ids: list[str] = Field(default_factory=list, alias="enabledFeeIds")
    included_service_ids: list[str] = Field(default_factory=list, alias="includedServiceIds")
    is_active: bool = Field(default=True, alias="isActive")


class ItemUpdate(BaseModel):
    """Request model for updating a package or service."""
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    price: Optional[Union[str, float, int]] = None
    pricing_model: Optional[str] = Field(default=None, alias="pricingModel")
    enabled_tax_ids: Optional[list[str]] = Field(default=None, alias="enabledTaxIds")
    enabled_fee_ids: Optional[list[str]] = Field(default=None, alias="enabledFeeIds")
    included_service_ids: Optional[list[str]] = Field(default=None, alias="includedServiceIds")
    is_active: Optional[bool] = Field(default=None, alias="isActive")


def build_catalog_router(collection: str) -> APIRouter:
    """Build the CRUD + quote router for one collection ('packages' or 'services')."""
    router = APIRouter(prefix=f"/api/{collection}", tags=[collection])
    label = collection[:-1].capitalize()

    @router.get("")
    async def list_items(include_inactive: bool = True, store: CatalogStore = Depends(get_store)):
        return [i.to_dict() for i in store.list_items(collection, include_inactive=include_inactive)]

    @router.get("/{item_id}")
    async def get_item(item_id: str, store: CatalogStore = Depends(get_store)):
        item = store.get_item(collection, item_id)
        if not item:
            raise HTTPException(status_code=404, detail=f"{label} '{item_id}' not found")
        return item.to_dict()

    @router.post("")
    async def create_item(data: ItemCreate, store: CatalogStore = Depends(get_store)):
        record = data.model_dump()
        if collection != 'packages':
            record.pop('included_service_ids')

        validation = store.validate_item(record)
        if not validation.valid:
            raise HTTPException(status_code=400, detail={"errors": validation.errors})

        try:
            item = store.create_item(collection, record)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return {**item.to_dict(), "warnings": validation.warnings}

    @router.put("/{item_id}")
    async def update_item(item_id: str, updates: ItemUpdate, store: CatalogStore = Depends(get_store)):
        if store.get_item(collection, item_id) is None:
            raise HTTPException(status_code=404, detail=f"{label} '{item_id}' not found")
        try:
            return store.update_item(collection, item_id, updates.model_dump(exclude_unset=True)).to_dict()
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

    @router.delete("/{item_id}")
    async def delete_item(item_id: str, store: CatalogStore = Depends(get_store)):
        try:
            store.delete_item(collection, item_id)
            return {"success": True, "message": f"{label} '{item_id}' deleted"}
        except ValueError as e:
            raise HTTPException(status_code=404, detail=str(e))

    @router.get("/{item_id}/quote")
    async def quote_item(item_id: str, guest_count: int = 1, store: CatalogStore = Depends(get_store)):
        """Itemized price for a stored item with its enabled taxes and fees."""
        try:
            breakdown = store.quote_item(collection, item_id, guest_count=guest_count)
        except ValueError as e:
            raise HTTPException(status_code=404, detail=str(e))
        return {"itemId": item_id, "guestCount": guest_count, **breakdown.to_dict()}

    return router


packages_router = build_catalog_router('packages')
services_router = build_catalog_router('services')
