# tests/test_settings.py
from qurbani.config.settings import Settings


def test_defaults():
    """Test: Valores por defecto sin variables de entorno."""
    settings = Settings()
    assert settings.app_name == "qurbani-share-service"
    assert settings.request_timeout == 10.0
    assert settings.currency == "INR"


def test_env_prefix(monkeypatch):
    """Test: Las variables QURBANI_ sobreescriben los defaults."""
    monkeypatch.setenv("QURBANI_CUSTOMERS_SERVICE_URL", "http://customers.internal:3000")
    monkeypatch.setenv("QURBANI_MUMBAI_RATE", "15000")

    settings = Settings()

    assert settings.customers_service_url == "http://customers.internal:3000"
    assert settings.mumbai_rate == 15000
