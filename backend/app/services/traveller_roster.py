"""
Traveller roster: the in-memory side of the booking aggregate.

A booking stores its travellers as an ordered JSON array. All changes to
that array go through TravellerRoster, which enforces the two aggregate
invariants before anything is persisted:

  1. a booking always keeps at least one traveller
  2. no two travellers in a booking share a dedup key
     (case-folded first name, case-folded last name, date of birth)

The roster works on a private copy of the list, so a rejected operation
leaves the caller's data untouched. traveller_service persists
`roster.to_list()` as one conditional UPDATE.

The same dedup key feeds build_traveller_directory(), the read-side view
that merges a user's travellers across bookings.
"""

import uuid
from datetime import date, datetime
from typing import Any, Iterable, Mapping, Optional

from app.core.exceptions import ConflictError, NotFoundError, PreconditionError
from app.services.booking_rules import ensure_utc

TRAVELLER_FIELDS = (
    "first_name",
    "last_name",
    "date_of_birth",
    "gender",
    "passport_number",
    "nationality",
)

TravellerKey = tuple[str, str, str]


def normalize_birth_date(value: Any) -> str:
    """
    Day-granularity ISO date; the one canonical form used for storage and keys.
    Timestamps are read on the UTC calendar, naive ones taken as UTC.
    """
    if isinstance(value, datetime):
        return ensure_utc(value).date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, str):
        # Accept both "1990-01-01" and full timestamps
        if "T" in value:
            return normalize_birth_date(datetime.fromisoformat(value.replace("Z", "+00:00")))
        return date.fromisoformat(value).isoformat()
    raise TypeError(f"Unsupported date_of_birth value: {value!r}")


def traveller_key(traveller: Mapping[str, Any]) -> TravellerKey:
    return (
        str(traveller["first_name"]).strip().casefold(),
        str(traveller["last_name"]).strip().casefold(),
        normalize_birth_date(traveller["date_of_birth"]),
    )


def _clean(data: Mapping[str, Any]) -> dict:
    record = {k: data[k] for k in TRAVELLER_FIELDS if k in data}
    if "date_of_birth" in record:
        record["date_of_birth"] = normalize_birth_date(record["date_of_birth"])
    return record


class TravellerRoster:
    """Ordered travellers of one booking, mutated only by id."""

    def __init__(self, travellers: Optional[Iterable[Mapping[str, Any]]] = None):
        self._travellers = [dict(t) for t in (travellers or [])]

    def __len__(self) -> int:
        return len(self._travellers)

    def to_list(self) -> list[dict]:
        return [dict(t) for t in self._travellers]

    def index_of(self, traveller_id: str) -> Optional[int]:
        for index, traveller in enumerate(self._travellers):
            if traveller.get("id") == traveller_id:
                return index
        return None

    def _collides(self, key: TravellerKey, skip_index: Optional[int] = None) -> bool:
        return any(
            traveller_key(t) == key
            for i, t in enumerate(self._travellers)
            if i != skip_index
        )

    def add(self, data: Mapping[str, Any]) -> dict:
        """Append a traveller with a fresh id; Conflict if the key is taken."""
        record = _clean(data)
        if self._collides(traveller_key(record)):
            raise ConflictError("Traveller already exists in this booking")

        record = {"id": uuid.uuid4().hex, **record}
        self._travellers.append(record)
        return dict(record)

    def update(self, traveller_id: str, data: Mapping[str, Any]) -> dict:
        """Overwrite the given fields in place, keeping id and position."""
        index = self.index_of(traveller_id)
        if index is None:
            raise NotFoundError("Traveller not found in this booking")

        candidate = {**self._travellers[index], **_clean(data)}
        if self._collides(traveller_key(candidate), skip_index=index):
            raise ConflictError("A traveller with these details already exists in this booking")

        self._travellers[index] = candidate
        return dict(candidate)

    def remove(self, traveller_id: str) -> dict:
        """Drop a traveller; refused when it is the last one."""
        if len(self._travellers) <= 1:
            raise PreconditionError("Cannot delete the last traveller from a booking")

        index = self.index_of(traveller_id)
        if index is None:
            raise NotFoundError("Traveller not found in this booking")

        return self._travellers.pop(index)


def build_traveller_directory(
    bookings: Iterable[tuple[str, Iterable[Mapping[str, Any]]]],
) -> list[dict]:
    """
    Merge travellers across bookings into one entry per person.

    `bookings` yields (booking_reference, travellers) pairs. Entries keep the
    fields of the first sighting and list every booking reference the person
    appears in, both in first-seen order.
    """
    directory: dict[TravellerKey, dict] = {}

    for reference, travellers in bookings:
        for traveller in travellers:
            key = traveller_key(traveller)
            entry = directory.get(key)
            if entry is None:
                directory[key] = {**traveller, "booking_references": [reference]}
            elif reference not in entry["booking_references"]:
                entry["booking_references"].append(reference)

    return list(directory.values())
