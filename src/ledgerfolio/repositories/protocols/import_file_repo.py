"""Import file repository protocol."""

from typing import Protocol, Optional

from ledgerfolio.domain.models import ImportFile


class ImportFileRepository(Protocol):
    """Interface for ingestion batch records."""

    def create(self, import_file: ImportFile) -> ImportFile:
        ...

    def finalize(self, import_file: ImportFile) -> ImportFile:
        """Record the final counts of a batch."""
        ...

    def get_by_hash(self, file_hash: str) -> Optional[ImportFile]:
        """Most recent batch recorded for a content hash."""
        ...

    def list_recent(self, limit: int = 50) -> list[ImportFile]:
        ...
