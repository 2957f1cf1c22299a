"""Settings tests."""

import pytest
from pydantic import ValidationError

from stockscan.core.config import Settings


def test_defaults():
    settings = Settings(_env_file=None)
    assert settings.sap_base_api_url is None
    assert settings.sap_configured is False
    assert settings.sap_product_filter_field == "ProductStandardID"
    assert settings.warehouse_storage_location == "FG01"
    assert settings.warehouse_stock_type == "01"
    assert settings.barcode_length == 13
    assert settings.enforce_barcode_length is False
    assert settings.sap_request_timeout is None


def test_env_names(monkeypatch):
    monkeypatch.setenv("SAP_BASE_API_URL", "https://erp.example.com")
    monkeypatch.setenv("SAP_API_KEY_HEADER", "APIKey")
    monkeypatch.setenv("SAP_API_KEY_VALUE", "abc")
    settings = Settings(_env_file=None)
    assert settings.sap_configured
    assert settings.sap_api_key_header == "APIKey"
    assert settings.sap_api_key_value == "abc"


def test_blank_values_are_unset():
    settings = Settings(_env_file=None, sap_base_api_url=" ", sap_api_token="")
    assert settings.sap_base_api_url is None
    assert settings.sap_api_token is None


def test_barcode_length_must_be_positive():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, barcode_length=0)


def test_production_requires_secret_key():
    with pytest.raises(ValidationError, match="SECRET_KEY"):
        Settings(_env_file=None, debug=False, secret_key="change-me-in-production")


def test_cors_origins_list():
    settings = Settings(_env_file=None, cors_origins="https://a.example.com, https://b.example.com")
    assert settings.cors_origins_list == ["https://a.example.com", "https://b.example.com"]
