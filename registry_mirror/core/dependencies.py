from typing import Optional

from registry_mirror.core.config import Settings
from registry_mirror.data.registries import create_sources, load_registries_config
from registry_mirror.domain.models import RegistriesConfig
from registry_mirror.services.fetcher import Fetcher
from registry_mirror.services.updater import RegistrySources

_settings: Optional[Settings] = None
_registries_config: Optional[RegistriesConfig] = None
_sources: Optional[RegistrySources] = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
        _settings.data_dir.mkdir(parents=True, exist_ok=True)
    return _settings


def get_registries_config() -> RegistriesConfig:
    global _registries_config
    if _registries_config is None:
        _registries_config = load_registries_config(get_settings().registries_file)
    return _registries_config


def get_sources() -> RegistrySources:
    global _sources
    if _sources is None:
        settings = get_settings()
        fetcher = Fetcher(timeout=settings.http_timeout, retries=settings.http_retries)
        _sources = RegistrySources(
            create_sources(get_registries_config(), settings.registry_prefix, fetcher)
        )
    return _sources


def reset() -> None:
    """Forget cached settings and sources, e.g. after the environment changed."""
    global _settings, _registries_config, _sources
    _settings = None
    _registries_config = None
    _sources = None
