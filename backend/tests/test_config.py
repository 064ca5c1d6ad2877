from slaguard.config import Settings, get_settings


def test_settings_defaults_and_env(monkeypatch):
    for name in ("SLA_REPOSITORY", "SLA_CHECK_PERIOD", "SLA_NOTIFIERS", "SLA_EXTERNAL_IDS", "ENVIRONMENT"):
        monkeypatch.delenv(name, raising=False)

    defaults = Settings(_env_file=None)
    assert defaults.environment == "local"
    assert defaults.repository == "memory"
    assert defaults.check_period == 60
    assert defaults.external_ids is False
    assert defaults.notifier_names == ["log"]

    monkeypatch.setenv("SLA_REPOSITORY", "sql")
    monkeypatch.setenv("SLA_CHECK_PERIOD", "15")
    monkeypatch.setenv("SLA_EXTERNAL_IDS", "true")
    monkeypatch.setenv("SLA_NOTIFIERS", " Log, webhook ,,store")
    monkeypatch.setenv("ENVIRONMENT", "dev")

    settings = Settings(_env_file=None)
    assert settings.repository == "sql"
    assert settings.check_period == 15
    assert settings.external_ids is True
    assert settings.environment == "dev"
    assert settings.notifier_names == ["log", "webhook", "store"]


def test_settings_accept_field_names():
    settings = Settings(_env_file=None, adapter="prometheus", max_delta=0.5)
    assert settings.adapter == "prometheus"
    assert settings.max_delta == 0.5


def test_cached_settings_instance():
    get_settings.cache_clear()
    a = get_settings()
    b = get_settings()
    assert a is b
