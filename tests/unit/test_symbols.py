"""
Unit tests for broker symbol resolution.
"""

from datetime import datetime

from ledgerfolio.domain.models import SymbolMapping
from ledgerfolio.ingest import SymbolResolver, is_internal_code
from ledgerfolio.ingest.symbols import match_description


class TestInternalCodes:
    def test_internal_code_pattern(self):
        assert is_internal_code("H062990")
        assert is_internal_code("S029913")
        assert not is_internal_code("AAPL")
        assert not is_internal_code("VFV.TO")
        assert not is_internal_code(None)

    def test_description_patterns(self):
        assert match_description("INVESCO QQQ TRUST SERIES 1") == "QQQ"
        assert match_description("Vanguard Real Estate ETF") == "VNQ"
        assert match_description("UNKNOWN FUND") is None


class TestSymbolResolver:
    """Tests for SymbolResolver.resolve."""

    def test_regular_tickers_pass_through(self):
        resolver = SymbolResolver()

        assert resolver.resolve("AAPL") == "AAPL"
        assert resolver.resolve(None) is None

    def test_known_code_is_mapped_and_learned(self, mapping_repo):
        """
        GIVEN an internal code with a built-in mapping
        WHEN it is resolved
        THEN the ticker is returned and the mapping is stored
        """
        resolver = SymbolResolver(mapping_repo)

        assert resolver.resolve("H062990", "INVESCO QQQ TRUST") == "QQQ"
        stored = mapping_repo.get("H062990")
        assert stored is not None
        assert stored.symbol == "QQQ"

    def test_description_fallback_for_unlisted_code(self, mapping_repo):
        resolver = SymbolResolver(mapping_repo)

        assert resolver.resolve("X123456", "INVESCO DB COMMODITY INDEX") == "DBC"
        assert mapping_repo.get("X123456").symbol == "DBC"

    def test_stored_mapping_takes_precedence(self, mapping_repo):
        mapping_repo.save(
            SymbolMapping(
                internal_code="H062990",
                symbol="QQQM",
                description="manual override",
                created_at_est=datetime(2024, 1, 1),
            )
        )
        resolver = SymbolResolver(mapping_repo)

        assert resolver.resolve("H062990", "INVESCO QQQ TRUST") == "QQQM"

    def test_unresolvable_code_falls_back_to_raw_symbol(self, mapping_repo, caplog):
        resolver = SymbolResolver(mapping_repo)

        with caplog.at_level("WARNING"):
            assert resolver.resolve("Z999999", "MYSTERY HOLDINGS") == "Z999999"

        assert mapping_repo.get("Z999999") is None
        assert "Z999999" in caplog.text
