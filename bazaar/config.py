"""Runtime configuration — env-driven via pydantic-settings.

Reads from a .env file and BAZAAR_* environment variables.
"""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class BazaarConfig(BaseSettings):
    """Marketplace configuration with environment variable overrides.

    Examples
    --------
    Override via environment::

        export BAZAAR_ENVIRONMENT=staging
        export BAZAAR_LOG_LEVEL=DEBUG
        export BAZAAR_REGISTRY_PATH=/data/bazaar.db

    Or via .env file::

        BAZAAR_ENVIRONMENT=production
        BAZAAR_MARKETPLACE_OPERATOR=0xmarket
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="BAZAAR_",
        env_file_encoding="utf-8",
    )

    # Runtime environment
    environment: str = "development"
    log_level: str = "INFO"
    debug: bool = False

    # Storage paths; registry and proceeds may share one SQLite file
    registry_path: Path = Path(".bazaar/state.db")
    proceeds_path: Path = Path(".bazaar/state.db")
    journal_path: Path = Path(".bazaar/journal.db")
    events_path: Path = Path(".bazaar/events")

    # Identity the asset directory must approve before an item can be listed
    marketplace_operator: str = "bazaar-marketplace"

    # Notification routing
    enable_journal: bool = True
    enable_file_events: bool = False

    @property
    def is_production(self) -> bool:
        """Whether running in production mode."""
        return self.environment == "production"


# Module-level singleton: import as `from bazaar.config import config`
config = BazaarConfig()
