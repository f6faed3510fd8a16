"""Runtime settings for the Ordering domain, read from the environment.

Values are resolved on every call so tests can override them with
``monkeypatch.setenv`` without reloading modules.
"""

import os


def default_tax_rate() -> float:
    return float(os.getenv("DEFAULT_TAX_RATE", "0.08"))


def default_shipping_cost() -> float:
    return float(os.getenv("DEFAULT_SHIPPING_COST", "0"))


def estimated_delivery_days() -> int:
    return int(os.getenv("ESTIMATED_DELIVERY_DAYS", "3"))


def ledger_max_cas_attempts() -> int:
    """Upper bound on compare-and-set attempts for a single stock change."""
    return int(os.getenv("LEDGER_MAX_CAS_ATTEMPTS", "25"))


def catalogue_adapter() -> str:
    return os.getenv("CATALOGUE_ADAPTER", "store")
