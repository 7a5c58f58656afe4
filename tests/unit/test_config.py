"""Tests for settings loading and production guards."""

import pytest

from coldchain_ledger.common.config import ColdChainSettings, get_settings


class TestSettings:
    def test_defaults(self):
        settings = ColdChainSettings()
        assert settings.max_batches == 100000
        assert settings.mint_fee == 1000
        assert settings.max_alerts == 10000
        assert settings.alert_fee == 500
        assert settings.genesis_supply == 100_000_000_000_000
        assert settings.reward_rate == 100
        assert settings.lock_period == 20160
        assert settings.max_stakes == 50000

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("COLDCHAIN_MINT_FEE", "2500")
        monkeypatch.setenv("COLDCHAIN_LOCK_PERIOD", "10")
        get_settings.cache_clear()
        try:
            settings = get_settings()
            assert settings.mint_fee == 2500
            assert settings.lock_period == 10
        finally:
            get_settings.cache_clear()

    def test_keyring_from_json(self):
        settings = ColdChainSettings(hmac_keys='{"0": "old", "3": "new"}')
        assert settings.hmac_keyring == {0: "old", 3: "new"}
        assert settings.current_hmac_version == 3
        assert settings.current_hmac_key == "new"

    def test_keyring_rejects_bad_json(self):
        with pytest.raises(ValueError):
            ColdChainSettings(hmac_keys="not-json").hmac_keyring

    def test_insecure_production_rejected(self):
        with pytest.raises(RuntimeError):
            ColdChainSettings(environment="production").validate_for_production()

    def test_secure_production_accepted(self):
        ColdChainSettings(environment="production", hmac_key="a-real-secret").validate_for_production()

    def test_development_warns(self):
        with pytest.warns(UserWarning):
            ColdChainSettings().validate_for_production()
