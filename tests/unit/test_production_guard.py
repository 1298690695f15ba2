"""Tests for the production configuration guard."""

from __future__ import annotations

import pytest

from bazaar.capabilities import InMemoryAssetDirectory, InMemoryFundsTransfer
from bazaar.config import BazaarConfig
from bazaar.core.production_guard import (
    ProductionConfigError,
    enforce_production_constraints,
)
from bazaar.marketplace import Marketplace


class TestEnforceProductionConstraints:
    def test_development_is_never_checked(self):
        enforce_production_constraints(
            BazaarConfig(environment="development", debug=True, enable_journal=False)
        )

    def test_clean_production_config_passes(self):
        enforce_production_constraints(BazaarConfig(environment="production"))

    def test_debug_is_refused_in_production(self):
        with pytest.raises(ProductionConfigError, match="debug=True"):
            enforce_production_constraints(
                BazaarConfig(environment="production", debug=True)
            )

    def test_disabled_journal_is_refused_in_production(self):
        with pytest.raises(ProductionConfigError, match="BAZAAR_ENABLE_JOURNAL"):
            enforce_production_constraints(
                BazaarConfig(environment="production", enable_journal=False)
            )

    def test_all_violations_reported_together(self):
        with pytest.raises(ProductionConfigError) as excinfo:
            enforce_production_constraints(
                BazaarConfig(environment="production", debug=True, enable_journal=False)
            )
        message = str(excinfo.value)
        assert "BAZAAR_DEBUG" in message
        assert "BAZAAR_ENABLE_JOURNAL" in message


class TestMarketplaceStartup:
    def test_from_config_refuses_unsafe_production(self, tmp_dir):
        config = BazaarConfig(
            environment="production",
            debug=True,
            registry_path=tmp_dir / "state.db",
            proceeds_path=tmp_dir / "state.db",
            journal_path=tmp_dir / "journal.db",
        )
        with pytest.raises(ProductionConfigError):
            Marketplace.from_config(
                config, InMemoryAssetDirectory(), InMemoryFundsTransfer()
            )
        assert not (tmp_dir / "state.db").exists()
