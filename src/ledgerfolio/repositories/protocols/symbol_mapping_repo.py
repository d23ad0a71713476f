"""Symbol mapping repository protocol."""

from typing import Protocol, Optional

from ledgerfolio.domain.models import SymbolMapping


class SymbolMappingRepository(Protocol):
    """Interface for learned broker-code mappings."""

    def get(self, internal_code: str) -> Optional[SymbolMapping]:
        ...

    def save(self, mapping: SymbolMapping) -> SymbolMapping:
        """Store a mapping; an existing mapping for the code is kept."""
        ...
