"""
Report Filter Normalization
============================

Turns raw query values into an immutable AggregationFilter and applies
the caller's role scope on top of it.

Malformed values are rejected here, before any query is issued.
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Callable, Dict, Mapping, Optional, Tuple, Type, TypeVar

from src.complaints.domain import ensure_utc
from src.config import ComplaintStatus, Priority, UserRole, settings
from src.core import MalformedFilterException
from src.reporting.domain import Actor, AggregationFilter
from src.sla.domain import TypeCatalog

E = TypeVar("E", ComplaintStatus, Priority)

_ANY = {"", "all", "any", "*"}


def _is_any(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip().lower() in _ANY)


def _squash(value: str) -> str:
    return value.strip().upper().replace("_", "").replace("-", "").replace(" ", "")


def _enum_lookup(enum_cls: Type[E]) -> Dict[str, E]:
    return {_squash(member.value): member for member in enum_cls}


_STATUS_LOOKUP = _enum_lookup(ComplaintStatus)
_PRIORITY_LOOKUP = _enum_lookup(Priority)


class FilterNormalizer:
    """
    Parses report query parameters.

    Accepted keys: ``from``, ``to``, ``ward``, ``sub_zone``, ``type``,
    ``status``, ``priority``, ``page``, ``limit``. ``"all"`` or an empty
    value means "no constraint".
    """

    def __init__(
        self,
        catalog: Optional[TypeCatalog] = None,
        default_window_days: int = settings.default_report_window_days,
        max_page_size: int = settings.max_page_size,
        now_provider: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self._catalog = catalog or TypeCatalog.build([])
        self._default_window = timedelta(days=default_window_days)
        self._max_page_size = max_page_size
        self._now = now_provider

    def parse(self, raw: Mapping[str, Any]) -> AggregationFilter:
        from_date, to_date = self._window(raw.get("from"), raw.get("to"))
        type_key, aliases = self._type(raw.get("type"))

        return AggregationFilter(
            from_date=from_date,
            to_date=to_date,
            ward_id=None if _is_any(raw.get("ward")) else str(raw["ward"]).strip(),
            sub_zone_id=None if _is_any(raw.get("sub_zone")) else str(raw["sub_zone"]).strip(),
            type_key=type_key,
            type_aliases=aliases,
            status=self._member("status", raw.get("status"), _STATUS_LOOKUP),
            priority=self._member("priority", raw.get("priority"), _PRIORITY_LOOKUP),
            page=self._int("page", raw.get("page"), default=1, minimum=1),
            limit=self._int("limit", raw.get("limit"), default=None, minimum=1, maximum=self._max_page_size),
        )

    # ---- fields ----

    def _window(self, raw_from: Any, raw_to: Any) -> Tuple[datetime, datetime]:
        to_date = self._instant("to", raw_to, end_of_day=True) if not _is_any(raw_to) else None
        from_date = self._instant("from", raw_from, end_of_day=False) if not _is_any(raw_from) else None

        if to_date is None:
            to_date = self._now()
        if from_date is None:
            from_date = to_date - self._default_window
        if from_date > to_date:
            raise MalformedFilterException("from", raw_from, "start of range is after its end")
        return from_date, to_date

    @staticmethod
    def _instant(field: str, value: Any, end_of_day: bool) -> datetime:
        """ISO date or datetime; a bare date on ``to`` means the end of that UTC day."""
        if isinstance(value, datetime):
            return ensure_utc(value)
        if isinstance(value, date):
            day = value
        else:
            text = str(value).strip()
            try:
                if len(text) == 10:
                    day = date.fromisoformat(text)
                else:
                    if text.endswith(("Z", "z")):
                        text = text[:-1] + "+00:00"
                    return ensure_utc(datetime.fromisoformat(text))
            except ValueError:
                raise MalformedFilterException(field, value, "expected an ISO date or datetime")
        bound = time.max if end_of_day else time.min
        return datetime.combine(day, bound, tzinfo=timezone.utc)

    def _type(self, value: Any) -> Tuple[Optional[str], Tuple[str, ...]]:
        if _is_any(value):
            return None, ()
        text = str(value).strip()
        return self._catalog.canonical_key(text), self._catalog.aliases(text)

    @staticmethod
    def _member(field: str, value: Any, lookup: Dict[str, E]) -> Optional[E]:
        if _is_any(value):
            return None
        member = lookup.get(_squash(str(value)))
        if member is None:
            raise MalformedFilterException(field, value, "unknown value")
        return member

    @staticmethod
    def _int(
        field: str,
        value: Any,
        default: Optional[int],
        minimum: int,
        maximum: Optional[int] = None,
    ) -> Optional[int]:
        if value is None or (isinstance(value, str) and value.strip() == ""):
            return default
        try:
            number = int(value)
        except (TypeError, ValueError):
            raise MalformedFilterException(field, value, "expected an integer")
        if number < minimum or (maximum is not None and number > maximum):
            raise MalformedFilterException(field, value, f"out of range {minimum}..{maximum or 'inf'}")
        return number


def apply_role_scope(window: AggregationFilter, actor: Actor) -> AggregationFilter:
    """
    Restrict ``window`` to what ``actor`` may see.

    Runs after parsing. Region and ownership constraints are replaced, not
    merged, so a requested ward outside the actor's scope is overridden.

    Raises:
        MalformedFilterException: the actor's scope cannot be determined
    """
    if actor.role == UserRole.ADMINISTRATOR:
        return window.replace(cross_region=True, assigned_to_id=None, submitted_by_id=None)

    if actor.role == UserRole.WARD_OFFICER:
        if not actor.ward_id:
            raise MalformedFilterException("ward", None, "ward officer has no ward assignment")
        sub_zone = window.sub_zone_id if window.ward_id in (None, actor.ward_id) else None
        return window.replace(
            ward_id=actor.ward_id,
            sub_zone_id=sub_zone,
            cross_region=False,
            assigned_to_id=None,
            submitted_by_id=None,
        )

    if not actor.user_id:
        raise MalformedFilterException("user", None, f"{actor.role.value} requires a user id")

    if actor.role == UserRole.MAINTENANCE_TEAM:
        return window.replace(cross_region=False, assigned_to_id=actor.user_id, submitted_by_id=None)

    return window.replace(cross_region=False, submitted_by_id=actor.user_id, assigned_to_id=None)
