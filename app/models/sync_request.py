from typing import Optional

from pydantic import BaseModel, Field, HttpUrl

from app.models.sync_config import DEFAULT_BASE_URL, MissingIdPolicy, SyncConfig


class SyncRequest(BaseModel):
    base_url: HttpUrl = DEFAULT_BASE_URL
    category: Optional[str] = None
    currency: Optional[str] = Field(default=None, pattern=r"^[A-Z]{3}$")
    max_pages: Optional[int] = Field(
        default=None,
        ge=1,
        le=1000,
        description="Maximum number of listing pages to visit (1–1000).",
    )
    missing_id_policy: MissingIdPolicy = "skip"
    skip_malformed: bool = False

    def to_config(self) -> SyncConfig:
        overrides = {
            "base_url": str(self.base_url),
            "missing_id_policy": self.missing_id_policy,
            "skip_malformed": self.skip_malformed,
        }
        for name in ("category", "currency", "max_pages"):
            value = getattr(self, name)
            if value is not None:
                overrides[name] = value
        return SyncConfig(**overrides)
