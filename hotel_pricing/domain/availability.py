"""Room availability aggregated over a stay"""
from datetime import timedelta
from typing import Any, Dict, Iterable, List

from hotel_pricing.domain.entities import AvailabilityRecord, parse_availability, parse_room_types
from hotel_pricing.domain.rate_plans import DateLike
from hotel_pricing.domain.results import RoomTypeAvailability
from hotel_pricing.domain.value_objects import nights_between, stay_nights, to_calendar_date

IndexedAvailability = Dict[str, Dict[str, AvailabilityRecord]]


def index_availability(records: Iterable[Any]) -> IndexedAvailability:
    """Index availability records by room type id and ISO date"""
    indexed: IndexedAvailability = {}
    for record in parse_availability(records):
        indexed.setdefault(record.room_type_id, {})[record.date.isoformat()] = record
    return indexed


def compute_availability(
    arrival_date: DateLike,
    departure_date: DateLike,
    guest_count: int,
    room_types: Iterable[Any],
    indexed_availability: IndexedAvailability,
) -> List[RoomTypeAvailability]:
    """Aggregate the quantity of every room type available for a whole stay.

    The quantity is the lowest one across the nights of the stay, the
    departure day taking part as a single room. It is None when a record of any night or of the departure day is missing,
    and 0 when the party does not fit the room type occupancy or when the
    arrival day forbids arrival or the departure day forbids departure.
    """
    arrival_date = to_calendar_date(arrival_date)
    departure_date = to_calendar_date(departure_date)
    nights = nights_between(arrival_date, departure_date)

    result = []
    for room_type in parse_room_types(room_types):
        quantity = _room_type_quantity(
            room_type, arrival_date, nights, guest_count,
            indexed_availability.get(room_type.id),
        )
        result.append(RoomTypeAvailability(room_type_id=room_type.id, quantity=quantity))
    return result


def _room_type_quantity(room_type, arrival_date, nights, guest_count, daily_records):
    if not daily_records:
        return None
    if room_type.occupancy and not room_type.occupancy.admits(guest_count):
        return 0

    quantities = []
    for night, day in enumerate(stay_nights(arrival_date, nights)):
        record = daily_records.get(day.isoformat())
        if record is None:
            continue
        if night == 0 and record.no_arrival:
            return 0
        quantities.append(record.quantity)

    # The departure day counts as a single room whatever its own quantity
    departure_record = daily_records.get((arrival_date + timedelta(days=nights)).isoformat())
    if departure_record is not None and departure_record.no_departure:
        return 0
    if departure_record is None or len(quantities) < nights:
        return None
    quantities.append(1)
    return min(quantities)
