from typing import List
from pydantic import BaseModel, Field, ConfigDict


class SyncResponse(BaseModel):
    success: bool
    message: str
    inserted_count: int = Field(0, alias="insertedCount")
    skipped_count: int = Field(0, alias="skippedCount")
    errors: List[str] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)
