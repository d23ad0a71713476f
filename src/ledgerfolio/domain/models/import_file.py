"""Import batch record."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ledgerfolio.domain.models.enums import ImportSource


@dataclass
class ImportFile:
    """One record per ingestion run; finalized once when the batch completes."""

    import_id: str
    filename: str
    file_hash: str
    source: ImportSource = ImportSource.FILE
    row_count: int = 0
    inserted_rows: int = 0
    skipped_rows: int = 0
    failed_rows: int = 0
    imported_at_est: Optional[datetime] = field(default=None)

    def __post_init__(self) -> None:
        if isinstance(self.source, str):
            self.source = ImportSource(self.source)
