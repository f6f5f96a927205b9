"""Serializable snapshot of a storage entry."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, model_validator


class EntryInfo(BaseModel):
    """
    Point-in-time metadata of a file or folder.

    Entries themselves always re-read the filesystem; an EntryInfo is what
    callers keep when they need a value that can be logged or sent as JSON.

    Examples:
        EntryInfo(path="reports/q1.csv", name="q1.csv", is_folder=False,
                  size=1024, last_updated=datetime.now(), file_type=".csv")
    """
    path: str  # Relative path inside the provider ('' for the root)
    name: str
    is_folder: bool
    size: int  # Bytes; recursive total for folders
    last_updated: datetime
    file_type: Optional[str] = None  # Extension for files, None for folders

    @model_validator(mode='after')
    def validate_entry_kind(self):
        """Folders carry no file type and sizes are never negative."""
        if self.is_folder and self.file_type is not None:
            raise ValueError("Folders cannot have a file_type")
        if self.size < 0:
            raise ValueError("size cannot be negative")
        return self
