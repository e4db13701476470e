"""API key fallback and gateway environment selection."""

from pixpay.common.config import CommonSettings


def make_settings(**overrides):
    return CommonSettings(postgres_dsn="sqlite+pysqlite://", _env_file=None, **overrides)


def test_sandbox_is_default():
    config = make_settings(asaas_api_key_sandbox="sandbox-key").gateway_config()

    assert config.environment == "sandbox"
    assert config.api_base_url == "https://sandbox.asaas.com/api/v3"
    assert config.api_key == "sandbox-key"


def test_production_key_and_url():
    config = make_settings(
        use_asaas_production=True,
        asaas_api_key_sandbox="sandbox-key",
        asaas_api_key_production="prod-key",
    ).gateway_config()

    assert config.environment == "production"
    assert config.api_base_url == "https://api.asaas.com/v3"
    assert config.api_key == "prod-key"


def test_shared_key_is_the_fallback():
    settings = make_settings(use_asaas_production=True, asaas_api_key=" shared-key ")

    assert settings.resolve_api_key() == "shared-key"


def test_no_key_resolves_to_empty():
    assert make_settings().gateway_config().api_key == ""
