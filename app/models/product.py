from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class ApplianceCategory(str, Enum):
    SMALL_APPLIANCE = "small_appliance"
    LARGE_APPLIANCE = "large_appliance"
    DISHWASHER = "dishwasher"


class ProductRecord(BaseModel):
    """One product card, normalized and ready to be persisted."""

    external_id: Optional[str]
    title: str
    description: str  # "" or a single <ul>...</ul> shell
    product_url: str
    image_asset_key: Optional[str]
    image_source_url: str
    category: str
    price_amount: int = Field(ge=0, description="Price in minor currency units (cents).")
    price_currency: str


class CatalogEntry(ProductRecord):
    """A :class:`ProductRecord` as stored in the catalog."""

    id: int
    created_at: datetime
    updated_at: datetime
