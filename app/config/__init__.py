"""Configuration package for runtime settings and startup validation."""

from .settings import (
	AppSettings,
	SettingsLoadError,
	config_load_database_url,
	config_load_settings,
	config_plugin_urls,
)

__all__ = ["AppSettings", "SettingsLoadError", "config_load_settings", "config_load_database_url", "config_plugin_urls"]
