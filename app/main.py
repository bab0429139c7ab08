from functools import partial
from typing import Dict, Optional
from dotenv import load_dotenv
from sqlmodel import Session
import logging

# Load environment variables as early as possible
load_dotenv()

from .core.config import Settings, get_settings
from .database import create_db_and_tables, engine
from .application.ports.kv_cache import KeyValueCache
from .application.services.field_registry import FieldRegistry
from .application.services.birthdate_service import BirthdateService, local_today
from .application.services.birthdate_validator import BirthdateValidator
from .application.services.profile_service import ProfileService
from .infrastructure.cache.memory_kv_cache import InMemoryKeyValueCache
from .infrastructure.cache.redis_kv_cache import RedisKeyValueCache
from .infrastructure.cache.sql_kv_cache import SqlKeyValueCache
from .infrastructure.config.settings_provider import SettingsConfigProvider
from .infrastructure.persistence.sqlalchemy.repositories.field_repository_sql import (
    SqlFieldOptionRepository,
    SqlFieldRepository,
)
from .infrastructure.persistence.sqlalchemy.repositories.user_repository_sql import SqlUserRepository

logger = logging.getLogger(__name__)

_memory_cache = InMemoryKeyValueCache()


def build_cache(session: Session, settings: Settings) -> KeyValueCache:
    backend = (settings.CACHE_BACKEND or "sql").lower()
    if backend == "redis":
        if not settings.REDIS_URL:
            raise ValueError("CACHE_BACKEND=redis requires REDIS_URL")
        return RedisKeyValueCache(settings.REDIS_URL, prefix=settings.REDIS_PREFIX)
    if backend == "memory":
        return _memory_cache
    return SqlKeyValueCache(session)


def build_field_registry(session: Session, settings: Optional[Settings] = None) -> FieldRegistry:
    settings = settings or get_settings()
    config_provider = SettingsConfigProvider(settings)
    fields = SqlFieldRepository(session)
    options = SqlFieldOptionRepository(session, has_position=fields.capabilities.option_position) \
        if fields.capabilities.options else None
    return FieldRegistry(
        fields=fields,
        options=options,
        cache=build_cache(session, settings),
        config_provider=config_provider,
        today=partial(local_today, config_provider.get().timezone),
    )


def build_birthdate_service(session: Session, settings: Optional[Settings] = None) -> BirthdateService:
    registry = build_field_registry(session, settings)
    return BirthdateService(registry=registry, today=registry.today)


def build_validator(session: Session, settings: Optional[Settings] = None) -> BirthdateValidator:
    registry = build_field_registry(session, settings)
    return BirthdateValidator(registry=registry, config_provider=registry.config_provider, today=registry.today)


def build_profile_service(session: Session, settings: Optional[Settings] = None) -> ProfileService:
    return ProfileService(user_repo=SqlUserRepository(session), validator=build_validator(session, settings))


def bootstrap(settings: Optional[Settings] = None, bind=None) -> Dict[str, int]:
    """Prepare storage and make sure the birthdate fields exist.

    Never raises: a failed reconciliation is logged and whatever mapping could
    be resolved is returned.
    """
    settings = settings or get_settings()
    bind = bind or engine

    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format=settings.LOG_FORMAT
    )

    try:
        create_db_and_tables(bind)
    except Exception:
        logger.exception("hbp_birthdate: database initialization failed")
        return {}

    if not SettingsConfigProvider(settings).get().feature_enabled:
        logger.info("hbp_birthdate: disabled, skipping field setup")
        return {}

    with Session(bind) as session:
        registry = None
        try:
            registry = build_field_registry(session, settings)
            mapping = registry.ensure_fields()
            logger.info(f"hbp_birthdate: fields ready {mapping}")
            return mapping
        except Exception:
            logger.exception("hbp_birthdate: ensure_fields failed")
            session.rollback()

        if registry is None:
            return {}
        try:
            return registry.resolve_mapping()
        except Exception:
            logger.exception("hbp_birthdate: could not resolve field ids")
            return {}


if __name__ == "__main__":
    bootstrap()
