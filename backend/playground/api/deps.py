from functools import lru_cache
from playground.core.config import get_settings
from playground.services.templates import LanguageRegistry, build_templates


@lru_cache
def get_registry() -> LanguageRegistry:
    return LanguageRegistry(build_templates(get_settings()))
