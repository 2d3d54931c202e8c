from typing import Literal, Optional

from pydantic import BaseModel, Field

from app.models.product import ApplianceCategory

DEFAULT_BASE_URL = "https://www.appliancesdelivered.ie/search/small-appliances"

MissingIdPolicy = Literal["skip", "fail", "persist"]


class SyncConfig(BaseModel):
    base_url: str = DEFAULT_BASE_URL
    category: str = ApplianceCategory.SMALL_APPLIANCE.value
    currency: str = Field(default="EUR", pattern=r"^[A-Z]{3}$")
    max_pages: Optional[int] = Field(
        default=1000,
        ge=1,
        description="Safety cap on listing pages visited in one run (None disables it).",
    )
    missing_id_policy: MissingIdPolicy = "skip"
    """What to do with a product card whose URL carries no trailing digits.

    ``"skip"`` (default)
        Log a warning and move on to the next card.

    ``"fail"``
        Abort the run with :class:`~app.services.errors.MissingIdentifierError`.

    ``"persist"``
        Store the card with a null ``external_id``.  Every such card overwrites
        the same null-keyed catalog row.
    """
    skip_malformed: bool = False
