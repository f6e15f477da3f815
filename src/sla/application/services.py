"""
SLA Application Services
=========================

Application services orchestrate business logic and coordinate between
domain objects and the configuration stores.

Following SOLID principles:
- Single Responsibility: cache, resolution and evaluation are separate
- Dependency Inversion: depend on store abstractions, not implementations
"""

import threading
import time
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Tuple

from src.complaints.domain import Complaint
from src.config import CATALOG_CACHE_KEY, ConfigSource, settings
from src.core import ConfigUnavailableException
from src.shared.infrastructure.logging import get_logger
from src.sla.domain import (
    ComplaintTypeConfig,
    ConfigCacheEntry,
    ResolvedConfig,
    SLACalculator,
    SLAEvaluation,
    TypeCatalog,
    coerce_sla_hours,
)

logger = get_logger(__name__)

WARNING_WINDOW_KEY = "SLA_WARNING_WINDOW_HOURS"


# ========== Store Interfaces (Dependency Inversion) ==========

class IConfigStore(ABC):
    """Interface for the live configuration store."""

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """
        Read one key. For a complaint-type key this is the type's SLA hours.

        Raises:
            ConfigUnavailableException: the store cannot be reached
        """

    @abstractmethod
    async def load_type_catalog(self) -> List[ComplaintTypeConfig]:
        """Structured catalog entries first, then legacy keyed entries."""

    @abstractmethod
    async def upsert(self, key: str, value: Any, description: Optional[str] = None) -> None:
        """Write one key."""


class ISeedProvider(ABC):
    """Interface for the static seed table shipped with the deployment."""

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """Seed value for ``key``, or None."""

    @abstractmethod
    def type_catalog(self) -> List[ComplaintTypeConfig]:
        """Seeded complaint types."""


# ========== Cache ==========

class ConfigCache:
    """
    Process-wide cache of resolved configuration values.

    Shared by every caller; writes are last-writer-wins. Entries expire
    ``ttl_seconds`` after they were fetched, checked on read.
    """

    def __init__(self, ttl_seconds: float = 300, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, ConfigCacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[ConfigCacheEntry]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.is_expired(self._clock(), self.ttl_seconds):
                del self._entries[key]
                return None
            return entry

    def set(self, key: str, value: Any, source: ConfigSource) -> ConfigCacheEntry:
        if source in (ConfigSource.DEFAULT, ConfigSource.CACHE):
            raise ValueError(f"refusing to cache a value from source '{source.value}'")
        entry = ConfigCacheEntry(key=key, value=value, source=source, fetched_at=self._clock())
        with self._lock:
            self._entries[key] = entry
        return entry

    def invalidate(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def invalidate_aliases(self, keys: Iterable[str]) -> None:
        """Drop every entry whose key matches one of ``keys``, ignoring case."""
        folded = {key.casefold() for key in keys}
        with self._lock:
            for cached in [k for k in self._entries if k.casefold() in folded]:
                del self._entries[cached]

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


# ========== Resolver ==========

Strategy = Callable[[str], Awaitable[Optional[ResolvedConfig]]]


class ConfigurationResolver:
    """
    Resolves configuration keys through cache -> store -> seed -> default.

    Each step is a strategy returning a ResolvedConfig ("resolved") or None
    ("next"). Store failures never escape a read; they degrade to the seed.
    Defaults are returned but never cached.
    """

    def __init__(self, store: IConfigStore, seed: ISeedProvider, cache: ConfigCache):
        self._store = store
        self._seed = seed
        self._cache = cache

    @property
    def cache(self) -> ConfigCache:
        return self._cache

    def value_strategies(self) -> List[Strategy]:
        return [self._from_cache, self._value_from_store, self._value_from_seed]

    def catalog_strategies(self) -> List[Strategy]:
        return [self._from_cache, self._catalog_from_store, self._catalog_from_seed]

    async def resolve(self, key: str, default: Any = None) -> ResolvedConfig:
        """Resolve a single key."""
        return await self._run(key, self.value_strategies(), default)

    async def resolve_catalog(self) -> Tuple[TypeCatalog, ConfigSource]:
        """Resolve the full complaint-type catalog."""
        resolved = await self._run(CATALOG_CACHE_KEY, self.catalog_strategies(), TypeCatalog.build([]))
        return resolved.value, resolved.source

    async def update(self, key: str, value: Any, description: Optional[str] = None) -> None:
        """
        Write ``key`` to the live store and drop affected cache entries.

        Raises:
            ConfigUnavailableException: the store is down; nothing changes
        """
        seeded = TypeCatalog.build(self._seed.type_catalog()).lookup(key)
        if seeded is not None and not isinstance(value, dict):
            # A seeded type is written whole so the store can create it
            value = {**seeded.to_dict(), "sla_hours": value}
            value.pop("id", None)
        await self._store.upsert(key, value, description)

        stale = await self._aliases_of(key)
        self._cache.invalidate_aliases(stale)
        self._cache.invalidate(CATALOG_CACHE_KEY)
        logger.info("Configuration updated", extra={"config_key": key, "invalidated": list(stale)})

    async def _aliases_of(self, key: str) -> Tuple[str, ...]:
        """
        Every key a cached value for the same type may sit under: its
        canonical key, display name and id, in the seed, the cached catalog
        and the store's current catalog.
        """
        catalogs = [TypeCatalog.build(self._seed.type_catalog())]
        cached = self._cache.get(CATALOG_CACHE_KEY)
        if cached is not None:
            catalogs.append(cached.value)
        try:
            catalogs.append(TypeCatalog.build(await self._store.load_type_catalog()))
        except ConfigUnavailableException as e:
            logger.warning("Configuration store unavailable", extra={"config_key": key, "error": e.message})

        aliases = [key]
        for catalog in catalogs:
            aliases.extend(catalog.aliases(key))
        return tuple(dict.fromkeys(aliases))

    async def _run(self, key: str, strategies: List[Strategy], default: Any) -> ResolvedConfig:
        for strategy in strategies:
            resolved = await strategy(key)
            if resolved is not None:
                return resolved
        logger.debug("Configuration default used", extra={"config_key": key})
        return ResolvedConfig(key=key, value=default, source=ConfigSource.DEFAULT)

    # ---- strategies ----

    async def _from_cache(self, key: str) -> Optional[ResolvedConfig]:
        entry = self._cache.get(key)
        if entry is None:
            return None
        return ResolvedConfig(key=key, value=entry.value, source=ConfigSource.CACHE)

    async def _value_from_store(self, key: str) -> Optional[ResolvedConfig]:
        try:
            value = await self._store.get(key)
        except ConfigUnavailableException as e:
            logger.warning("Configuration store unavailable", extra={"config_key": key, "error": e.message})
            return None
        if value is None:
            return None
        return self._remember(key, value, ConfigSource.STORE)

    async def _value_from_seed(self, key: str) -> Optional[ResolvedConfig]:
        value = self._seed.get(key)
        if value is None:
            return None
        logger.info("Configuration resolved from seed", extra={"config_key": key})
        return self._remember(key, value, ConfigSource.SEED)

    async def _catalog_from_store(self, key: str) -> Optional[ResolvedConfig]:
        try:
            entries = await self._store.load_type_catalog()
        except ConfigUnavailableException as e:
            logger.warning("Configuration store unavailable", extra={"config_key": key, "error": e.message})
            return None
        if not entries:
            return None
        # Seed entries only answer for keys the store does not know
        catalog = TypeCatalog.build(list(entries) + self._seed.type_catalog())
        return self._remember(key, catalog, ConfigSource.STORE)

    async def _catalog_from_seed(self, key: str) -> Optional[ResolvedConfig]:
        entries = self._seed.type_catalog()
        if not entries:
            return None
        return self._remember(key, TypeCatalog.build(entries), ConfigSource.SEED)

    def _remember(self, key: str, value: Any, source: ConfigSource) -> ResolvedConfig:
        self._cache.set(key, value, source)
        return ResolvedConfig(key=key, value=value, source=source)


# ========== SLA Evaluation ==========

class SLAService:
    """
    Evaluates single complaints for detail views.

    Uses the same catalog and calculator as the report engine, so a
    complaint is classified identically everywhere.
    """

    def __init__(
        self,
        resolver: ConfigurationResolver,
        default_warning_hours: float = settings.sla_warning_window_hours,
        now_provider: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self._resolver = resolver
        self._default_warning_hours = default_warning_hours
        self._now = now_provider

    async def warning_window(self) -> timedelta:
        """Warning window tunable, resolved through the config chain."""
        resolved = await self._resolver.resolve(WARNING_WINDOW_KEY, self._default_warning_hours)
        try:
            hours = float(resolved.value)
        except (TypeError, ValueError):
            hours = self._default_warning_hours
        if hours < 0:
            hours = self._default_warning_hours
        return timedelta(hours=hours)

    async def catalog(self) -> TypeCatalog:
        catalog, _ = await self._resolver.resolve_catalog()
        return catalog

    async def sla_hours_for(self, type_key: Optional[str]) -> Tuple[Optional[float], ConfigSource]:
        catalog, source = await self._resolver.resolve_catalog()
        return catalog.sla_hours(type_key), source

    async def evaluate(self, complaint: Complaint, now: Optional[datetime] = None) -> SLAEvaluation:
        now = now or self._now()
        catalog, source = await self._resolver.resolve_catalog()
        window = await self.warning_window()
        return evaluate_complaint(complaint, catalog, now, window, catalog_source=source)


def evaluate_complaint(
    complaint: Complaint,
    catalog: TypeCatalog,
    now: datetime,
    warning_window: timedelta,
    catalog_source: Optional[ConfigSource] = None,
) -> SLAEvaluation:
    """Deadline and classification of one complaint against a resolved catalog."""
    sla_hours = catalog.sla_hours(complaint.type)
    deadline = SLACalculator.compute_deadline(complaint, sla_hours)
    status = SLACalculator.classify(complaint, deadline, now, warning_window)
    return SLAEvaluation(
        complaint_id=complaint.id,
        status=status,
        historical_status=SLACalculator.historical_status(status),
        evaluated_at=now,
        start=SLACalculator.start_instant(complaint),
        deadline=deadline,
        sla_hours=coerce_sla_hours(sla_hours),
        sla_source=catalog_source if sla_hours is not None else None,
    )
