from typing import List, Optional

from pydantic import BaseModel


class SyncResponse(BaseModel):
    base_url: str
    pages_visited: int
    items_processed: int
    items_skipped: int
    external_ids: List[Optional[str]]
    """Identifiers of the upserted catalog entries, in processing order."""
