from __future__ import annotations

from dataclasses import dataclass
from typing import Dict


@dataclass(frozen=True)
class StatusDefinition:
    value: str
    label: str
    owned: bool


NOT_STARTED = "Not Started"
IN_PROGRESS = "In Progress"
COMPLETED = "Completed"
WISHLIST = "Wishlist"
ABANDONED = "Abandoned"

_STATUS_DEFINITIONS: tuple[StatusDefinition, ...] = (
    StatusDefinition(
        value=NOT_STARTED,
        label="Not started",
        owned=True,
    ),
    StatusDefinition(
        value=IN_PROGRESS,
        label="In progress",
        owned=True,
    ),
    StatusDefinition(
        value=COMPLETED,
        label="Completed",
        owned=True,
    ),
    StatusDefinition(
        value=WISHLIST,
        label="Wishlist",
        owned=False,
    ),
    StatusDefinition(
        value=ABANDONED,
        label="Abandoned",
        owned=True,
    ),
)

STATUS_BY_VALUE: Dict[str, StatusDefinition] = {
    definition.value: definition for definition in _STATUS_DEFINITIONS
}

STATUS_VALUES: tuple[str, ...] = tuple(STATUS_BY_VALUE.keys())

DEFAULT_STATUS = NOT_STARTED

_STATUS_ALIASES: Dict[str, str] = {
    value.lower().replace(" ", "_"): value for value in STATUS_VALUES
}
_STATUS_ALIASES.update({value.lower(): value for value in STATUS_VALUES})
_STATUS_ALIASES.update(
    {
        "backlog": NOT_STARTED,
        "playing": IN_PROGRESS,
        "finished": COMPLETED,
        "dropped": ABANDONED,
    }
)


def normalize_status_value(value: str | None) -> str:
    """Normalize a raw status string into a canonical value."""

    if value is None:
        return DEFAULT_STATUS
    raw = value.strip()
    if not raw:
        return DEFAULT_STATUS
    lowered = raw.lower()
    return _STATUS_ALIASES.get(lowered, _STATUS_ALIASES.get(lowered.replace("-", "_"), raw))


def validate_status(value: str | None) -> str:
    """Ensure the provided status maps to a supported value."""

    normalized = normalize_status_value(value)
    if normalized not in STATUS_BY_VALUE:
        allowed = ", ".join(STATUS_VALUES)
        raise ValueError(f"Status must be one of {allowed}.")
    return normalized


def is_owned(status: str) -> bool:
    definition = STATUS_BY_VALUE.get(status)
    return definition.owned if definition else True

