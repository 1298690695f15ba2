"""Production configuration guard.

Runs once at startup and refuses to continue when a production deployment
is configured unsafely.  Everything outside production passes untouched.
"""

from __future__ import annotations

import logging

from bazaar.config import BazaarConfig

logger = logging.getLogger(__name__)


class ProductionConfigError(RuntimeError):
    """The active configuration is not allowed in production."""


def enforce_production_constraints(config: BazaarConfig) -> None:
    """Validate production-only settings, collecting every violation.

    Constraints enforced
    --------------------
    1. Debug mode (rich tracebacks with local variables) must be off.
    2. The event journal must be enabled, so every sale and payout is
       recorded in the audit trail.

    Raises
    ------
    ProductionConfigError
        Listing all violations at once.
    """
    if not config.is_production:
        return

    violations: list[str] = []

    if config.debug:
        violations.append(
            "debug=True is not allowed in production. Set BAZAAR_DEBUG=false."
        )
    if not config.enable_journal:
        violations.append(
            "The event journal cannot be disabled in production. "
            "Set BAZAAR_ENABLE_JOURNAL=true."
        )

    if violations:
        msg = "Production configuration guard failed.\n" + "\n".join(
            f"  - {v}" for v in violations
        )
        logger.critical(msg)
        raise ProductionConfigError(msg)

    logger.info("Production configuration guard passed.")
