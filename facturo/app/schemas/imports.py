"""Import summaries."""

from pydantic import BaseModel


class ImportSummary(BaseModel):
    created: int
    skipped: int
    total: int
