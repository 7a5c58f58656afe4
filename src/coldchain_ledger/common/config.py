"""Cold-chain ledger configuration via pydantic-settings."""

import json
import warnings
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

_INSECURE_DEFAULTS = {
    "hmac_key": "insecure-journal-key-change-me",
}

BURN_PRINCIPAL = "SP000000000000000000002Q6VF78"


class ColdChainSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="COLDCHAIN_")

    environment: str = "development"
    log_level: str = "INFO"

    # Journal signing keyring: JSON dict mapping version (int) to key string.
    # When set, hmac_key is ignored.  When empty, hmac_key is used as version 0.
    hmac_key: str = "insecure-journal-key-change-me"
    hmac_keys: str = ""

    # Journal database
    db_url: str = "sqlite+aiosqlite:///./data/coldchain.db"

    # Identity that can never be bound as an authority
    burn_principal: str = BURN_PRINCIPAL

    # Batch registry
    max_batches: int = 100000
    mint_fee: int = 1000

    # Deviation alerts
    max_alerts: int = 10000
    alert_fee: int = 500

    # Incentive accounting
    genesis_supply: int = 100_000_000_000_000
    reward_rate: int = 100  # basis points
    lock_period: int = 20160  # blocks
    max_stakes: int = 50000

    @property
    def hmac_keyring(self) -> dict[int, str]:
        """Return the journal keyring as {version_int: key_str}."""
        if self.hmac_keys:
            try:
                raw = json.loads(self.hmac_keys)
            except (json.JSONDecodeError, TypeError) as exc:
                raise ValueError(
                    f"COLDCHAIN_HMAC_KEYS must be valid JSON (e.g. '{{\"0\": \"key\"}}'), got: {self.hmac_keys!r}"
                ) from exc
            return {int(k): v for k, v in raw.items()}
        return {0: self.hmac_key}

    @property
    def current_hmac_version(self) -> int:
        return max(self.hmac_keyring.keys())

    @property
    def current_hmac_key(self) -> str:
        ring = self.hmac_keyring
        return ring[max(ring.keys())]

    def validate_for_production(self) -> None:
        """Raise if insecure defaults are used in non-development environments."""
        insecure_fields = [
            field
            for field, default in _INSECURE_DEFAULTS.items()
            if getattr(self, field) == default and not self.hmac_keys
        ]

        if self.environment != "development" and insecure_fields:
            env_vars = ", ".join(f"COLDCHAIN_{f.upper()}" for f in insecure_fields)
            raise RuntimeError(
                f"Insecure default values detected in '{self.environment}' environment. "
                f"Set these environment variables to secure values: {env_vars}."
            )

        if insecure_fields:
            warnings.warn(
                "Using insecure default journal key, set COLDCHAIN_HMAC_KEY for production",
                UserWarning,
                stacklevel=2,
            )


@lru_cache
def get_settings() -> ColdChainSettings:
    settings = ColdChainSettings()
    settings.validate_for_production()
    return settings
