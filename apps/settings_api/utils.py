from django.core.cache import cache

from .models import SystemSettings

CACHE_KEY = 'system_settings'
CACHE_TIMEOUT = 300


def get_system_config():
    """Obtener configuraciones del sistema con cache"""
    config = cache.get(CACHE_KEY)
    if config is None:
        config = SystemSettings.get_settings()
        cache.set(CACHE_KEY, config, CACHE_TIMEOUT)
    return config


def clear_system_config_cache():
    cache.delete(CACHE_KEY)
