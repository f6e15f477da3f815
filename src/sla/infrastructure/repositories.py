"""
SLA Infrastructure Repositories
=================================

Concrete configuration stores and seed providers.

- SQLAlchemyConfigStore: the live store (complaint_types + system_config)
- StaticSeedProvider / YAMLSeedProvider: the static seed table
"""

import json
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

import yaml
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.config import LEGACY_TYPE_PREFIX, Priority
from src.core import ConfigUnavailableException, ValidationException
from src.shared.infrastructure.logging import get_logger
from src.sla.application.services import IConfigStore, ISeedProvider
from src.sla.domain import ComplaintTypeConfig, TypeCatalog, coerce_sla_hours
from src.sla.infrastructure.models import ComplaintTypeModel, SystemConfigModel

logger = get_logger(__name__)


# ========== Parsing helpers ==========

def parse_priority(value: Any) -> Optional[Priority]:
    if not value:
        return None
    try:
        return Priority(str(value).strip().upper())
    except ValueError:
        return None


def decode_value(raw: Optional[str]) -> Any:
    """Stored values are JSON when they parse as JSON, plain text otherwise."""
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except (TypeError, ValueError):
        return raw


def encode_value(value: Any) -> str:
    return json.dumps(value)


def parse_legacy_type(key: str, value: Any) -> Optional[ComplaintTypeConfig]:
    """
    Read a legacy ``COMPLAINT_TYPE_<KEY>`` record.

    The value is a JSON object with ``name``, ``slaHours`` and ``priority``.
    Returns None when the record is not a usable type definition.
    """
    if not key.startswith(LEGACY_TYPE_PREFIX):
        return None
    type_key = key[len(LEGACY_TYPE_PREFIX):]
    if not type_key:
        return None
    if isinstance(value, str):
        value = decode_value(value)
    if not isinstance(value, dict):
        return None
    hours = value.get("slaHours", value.get("sla_hours"))
    return ComplaintTypeConfig(
        key=type_key,
        name=value.get("name") or type_key,
        sla_hours=coerce_sla_hours(hours),
        priority=parse_priority(value.get("priority")),
    )


def type_from_mapping(data: Dict[str, Any]) -> Optional[ComplaintTypeConfig]:
    """Build a catalog entry from a seed mapping; None if it has no key."""
    key = data.get("key")
    if not key:
        return None
    return ComplaintTypeConfig(
        key=str(key),
        name=str(data.get("name") or key),
        sla_hours=coerce_sla_hours(data.get("sla_hours", data.get("slaHours"))),
        priority=parse_priority(data.get("priority")),
        id=str(data["id"]) if data.get("id") is not None else None,
    )


# ========== Live store ==========

class SQLAlchemyConfigStore(IConfigStore):
    """
    Configuration store backed by the relational database.

    Opens a short-lived session per call so one instance can be shared by
    the process-wide resolver. Any database failure surfaces as
    ConfigUnavailableException.
    """

    def __init__(self, session_factory: Callable[[], AsyncSession]):
        self._session_factory = session_factory

    async def get(self, key: str) -> Optional[Any]:
        try:
            async with self._session_factory() as session:
                entry = TypeCatalog.build(await self._load_types(session)).lookup(key)
                if entry is not None:
                    return coerce_sla_hours(entry.sla_hours)

                row = await session.get(SystemConfigModel, key)
                if row is None or not row.is_active:
                    return None
                return decode_value(row.value)
        except (SQLAlchemyError, OSError) as e:
            raise ConfigUnavailableException(details={"key": key, "error": str(e)}) from e

    async def load_type_catalog(self) -> List[ComplaintTypeConfig]:
        try:
            async with self._session_factory() as session:
                return await self._load_types(session)
        except (SQLAlchemyError, OSError) as e:
            raise ConfigUnavailableException(details={"error": str(e)}) from e

    async def upsert(self, key: str, value: Any, description: Optional[str] = None) -> None:
        """
        Write a key.

        A key naming a known complaint type (structured or legacy) updates
        that type; a mapping value with a ``name`` creates a structured
        type; anything else is stored as a system_config row.
        """
        try:
            async with self._session_factory() as session:
                await self._upsert(session, key, value, description)
                await session.commit()
        except (SQLAlchemyError, OSError) as e:
            raise ConfigUnavailableException(details={"key": key, "error": str(e)}) from e

    async def _upsert(self, session: AsyncSession, key: str, value: Any, description: Optional[str]) -> None:
        folded = key.casefold()
        result = await session.execute(select(ComplaintTypeModel))
        for model in result.scalars().all():
            if folded in {model.key.casefold(), model.id.casefold(), model.name.casefold()}:
                self._apply_type_update(model, value)
                return

        legacy_key = key if key.startswith(LEGACY_TYPE_PREFIX) else f"{LEGACY_TYPE_PREFIX}{key}"
        legacy = await session.get(SystemConfigModel, legacy_key)
        if legacy is not None:
            document = decode_value(legacy.value)
            if isinstance(document, dict):
                document.update(self._legacy_fields(value))
                legacy.value = encode_value(document)
                if description is not None:
                    legacy.description = description
                return

        if isinstance(value, dict) and value.get("name"):
            hours = self._require_hours(value.get("sla_hours", value.get("slaHours")))
            session.add(ComplaintTypeModel(
                key=str(value.get("key") or key),
                name=str(value["name"]),
                sla_hours=hours,
                priority=getattr(parse_priority(value.get("priority")), "value", None),
            ))
            return

        row = await session.get(SystemConfigModel, key)
        if row is None:
            session.add(SystemConfigModel(key=key, value=encode_value(value), description=description))
        else:
            row.value = encode_value(value)
            row.is_active = True
            if description is not None:
                row.description = description

    def _apply_type_update(self, model: ComplaintTypeModel, value: Any) -> None:
        if isinstance(value, dict):
            if "sla_hours" in value or "slaHours" in value:
                model.sla_hours = self._require_hours(value.get("sla_hours", value.get("slaHours")))
            if value.get("name"):
                model.name = str(value["name"])
            if "priority" in value:
                model.priority = getattr(parse_priority(value["priority"]), "value", None)
        else:
            model.sla_hours = self._require_hours(value)

    def _legacy_fields(self, value: Any) -> Dict[str, Any]:
        if not isinstance(value, dict):
            return {"slaHours": self._require_hours(value)}
        fields: Dict[str, Any] = {}
        if "sla_hours" in value or "slaHours" in value:
            fields["slaHours"] = self._require_hours(value.get("sla_hours", value.get("slaHours")))
        if value.get("name"):
            fields["name"] = value["name"]
        if "priority" in value:
            fields["priority"] = value["priority"]
        return fields

    @staticmethod
    def _require_hours(value: Any) -> float:
        hours = coerce_sla_hours(value)
        if hours is None:
            raise ValidationException(
                "SLA hours must be a finite number greater than zero",
                {"value": str(value)}
            )
        return hours

    @staticmethod
    async def _load_types(session: AsyncSession) -> List[ComplaintTypeConfig]:
        """Structured catalog rows first, then legacy keyed rows."""
        structured = await session.execute(
            select(ComplaintTypeModel)
            .where(ComplaintTypeModel.is_active.is_(True))
            .order_by(ComplaintTypeModel.key)
        )
        entries = [
            ComplaintTypeConfig(
                key=model.key,
                name=model.name,
                sla_hours=coerce_sla_hours(model.sla_hours),
                priority=parse_priority(model.priority),
                id=model.id,
            )
            for model in structured.scalars().all()
        ]

        legacy = await session.execute(
            select(SystemConfigModel)
            .where(SystemConfigModel.key.startswith(LEGACY_TYPE_PREFIX))
            .where(SystemConfigModel.is_active.is_(True))
            .order_by(SystemConfigModel.key)
        )
        for row in legacy.scalars().all():
            entry = parse_legacy_type(row.key, row.value)
            if entry is None:
                logger.debug("Skipping malformed legacy type record", extra={"config_key": row.key})
                continue
            entries.append(entry)
        return entries


# ========== Seed ==========

class StaticSeedProvider(ISeedProvider):
    """Seed table held in memory."""

    def __init__(
        self,
        system_config: Optional[Dict[str, Any]] = None,
        complaint_types: Optional[Iterable[ComplaintTypeConfig]] = None,
    ):
        self._load(system_config or {}, list(complaint_types or []))

    def _load(self, system_config: Dict[str, Any], complaint_types: List[ComplaintTypeConfig]) -> None:
        self._system_config = dict(system_config)
        types = list(complaint_types)
        for key, value in self._system_config.items():
            legacy = parse_legacy_type(key, value)
            if legacy is not None:
                types.append(legacy)
        self._types = types
        self._catalog = TypeCatalog.build(types)

    def get(self, key: str) -> Optional[Any]:
        entry = self._catalog.lookup(key)
        if entry is not None:
            return coerce_sla_hours(entry.sla_hours)
        return self._system_config.get(key)

    def type_catalog(self) -> List[ComplaintTypeConfig]:
        return list(self._types)


class YAMLSeedProvider(StaticSeedProvider):
    """
    Seed table loaded from a YAML file.

    A missing file gives an empty seed.
    """

    def __init__(self, seed_path: Union[str, Path]):
        self._seed_path = Path(seed_path)
        super().__init__()
        self.reload()

    def reload(self) -> None:
        """Load seed values from the YAML file."""
        if not self._seed_path.exists():
            logger.warning("Configuration seed file not found", extra={"path": str(self._seed_path)})
            self._load({}, [])
            return

        with open(self._seed_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        types = []
        for item in data.get("complaint_types") or []:
            entry = type_from_mapping(item) if isinstance(item, dict) else None
            if entry is not None:
                types.append(entry)

        self._load(data.get("system_config") or {}, types)
        logger.info(
            "Configuration seed loaded",
            extra={"path": str(self._seed_path), "types": len(types)}
        )
