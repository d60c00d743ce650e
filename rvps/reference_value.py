"""Reference values as stored by the service."""

from __future__ import annotations

import calendar
import dataclasses
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping

REFERENCE_VALUE_VERSION = "0.1.0"
MONTHS_BEFORE_EXPIRATION = 12
EXPIRATION_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def _add_months(moment: datetime, months: int) -> datetime:
    """Add calendar months, clamping the day to the end of the target month."""
    years, month_index = divmod(moment.month - 1 + months, 12)
    year = moment.year + years
    month = month_index + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def _normalize(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).replace(microsecond=0)


def _default_expiration() -> datetime:
    now = datetime.now(timezone.utc).replace(microsecond=0)
    return _add_months(now, MONTHS_BEFORE_EXPIRATION)


def _parse_expiration(raw: Any) -> datetime:
    if raw is None:
        raise ValueError("missing expiration time")
    if not isinstance(raw, str):
        raise ValueError(f"expiration must be a string, got {type(raw).__name__}")
    try:
        parsed = datetime.strptime(raw, EXPIRATION_FORMAT)
    except ValueError as err:
        raise ValueError(f"invalid expiration time {raw!r}: {err}") from err
    return parsed.replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class ReferenceValue:
    """A named reference value with a version and an expiration time.

    The expiration is always held in UTC with whole seconds.
    """

    name: str = ""
    value: Any = None
    expiration: datetime = field(default_factory=_default_expiration)
    version: str = REFERENCE_VALUE_VERSION

    def __post_init__(self) -> None:
        object.__setattr__(self, "expiration", _normalize(self.expiration))

    @classmethod
    def create(cls, name: str = "", value: Any = None) -> ReferenceValue:
        """Create a value that expires twelve months from now."""
        return cls(name=name, value=value)

    def with_expiration(self, expiration: datetime) -> ReferenceValue:
        """Return a copy expiring at ``expiration`` (sub-second part dropped)."""
        return dataclasses.replace(self, expiration=expiration)

    def expired(self) -> bool:
        """Whether the expiration time lies in the past."""
        return datetime.now(timezone.utc) > self.expiration

    def to_dict(self) -> dict[str, Any]:
        """Serialize into a JSON-compatible mapping."""
        return {
            "version": self.version,
            "name": self.name,
            "expiration": self.expiration.strftime(EXPIRATION_FORMAT),
            "value": self.value,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ReferenceValue:
        """Build a value from its serialized mapping.

        Raises ``ValueError`` when a required field is missing or malformed.
        """
        if not isinstance(data, Mapping):
            raise ValueError("reference value must be a JSON object")
        for required in ("name", "expiration", "value"):
            if required not in data:
                raise ValueError(f"missing field `{required}`")
        name = data["name"]
        if not isinstance(name, str):
            raise ValueError("field `name` must be a string")
        version = data.get("version", REFERENCE_VALUE_VERSION)
        if not isinstance(version, str):
            raise ValueError("field `version` must be a string")
        return cls(
            name=name,
            value=data["value"],
            expiration=_parse_expiration(data["expiration"]),
            version=version,
        )


@dataclass
class TrustedDigest:
    """Digests of an artifact that have been verified and can be trusted."""

    name: str = ""
    hash_values: list[str] = field(default_factory=list)