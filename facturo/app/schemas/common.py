"""Shared schema field types."""

from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator

from facturo.app.core.time import ensure_aware

# Naive values (SQLite hands them back that way) are read as UTC
UTCDateTime = Annotated[datetime, AfterValidator(ensure_aware)]
