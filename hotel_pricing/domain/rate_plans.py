"""Rate plan and modifier selection.

Rate plans are narrowed down per room type and booking request, modifiers
per night and per guest. Both selections are pure filters over caller
owned data.
"""
import logging
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any, Iterable, List, Optional, Union

from hotel_pricing.domain.entities import Modifier, RatePlan, parse_modifiers, parse_rate_plans
from hotel_pricing.domain.value_objects import nights_between, to_calendar_date, to_decimal

logger = logging.getLogger(__name__)

DateLike = Union[str, date, datetime]


# ==================== RATE PLANS ====================
def _rate_plan_rejection(
    rate_plan: RatePlan,
    room_type_id: str,
    booking_date: date,
    arrival_date: date,
    departure_date: date,
    nights: int,
    fallback_currency: str,
    preferred_currency: Optional[str],
) -> Optional[str]:
    """Return the reason a rate plan cannot be used, None if it can"""
    if room_type_id not in rate_plan.room_type_ids:
        return "not tied to room type"

    if preferred_currency and rate_plan.effective_currency(fallback_currency) != preferred_currency:
        return "different currency than requested"

    if rate_plan.available_for_reservation and not rate_plan.available_for_reservation.contains(booking_date):
        return "not available for reservation on booking date"

    # Coarse check only, single nights are verified when the stay is priced
    if rate_plan.available_for_travel and not rate_plan.available_for_travel.overlaps(arrival_date, departure_date):
        return "travel window outside of stay"

    restrictions = rate_plan.restrictions
    if restrictions is None:
        return None

    cut_off = restrictions.booking_cut_off
    if cut_off:
        if cut_off.min and arrival_date - timedelta(days=cut_off.min) < booking_date:
            return "booked too close to arrival"
        if cut_off.max and arrival_date - timedelta(days=cut_off.max) > booking_date:
            return "booked too far ahead of arrival"

    stay_bounds = restrictions.length_of_stay
    if stay_bounds:
        if stay_bounds.min and stay_bounds.min > nights:
            return "stay too short"
        if stay_bounds.max and stay_bounds.max < nights:
            return "stay too long"

    return None


def select_applicable_rate_plans(
    room_type_id: str,
    rate_plans: Iterable[Any],
    booking_date: DateLike,
    arrival_date: DateLike,
    departure_date: DateLike,
    fallback_currency: str,
    preferred_currency: Optional[str] = None,
) -> List[RatePlan]:
    """Filter out rate plans that cannot be used for the given booking.

    Input order is preserved. ``preferred_currency`` limits the result to
    plans priced in that currency, plans without a currency being priced
    in ``fallback_currency``.
    """
    booking_date = to_calendar_date(booking_date)
    arrival_date = to_calendar_date(arrival_date)
    departure_date = to_calendar_date(departure_date)
    nights = nights_between(arrival_date, departure_date)

    applicable = []
    for rate_plan in parse_rate_plans(rate_plans):
        reason = _rate_plan_rejection(
            rate_plan, room_type_id, booking_date, arrival_date, departure_date,
            nights, fallback_currency, preferred_currency,
        )
        if reason:
            logger.debug("Rate plan %s rejected for room type %s: %s", rate_plan.id, room_type_id, reason)
            continue
        applicable.append(rate_plan)
    return applicable


# ==================== MODIFIERS ====================
def _is_satisfied(modifier: Modifier, day: date, nights: int, guest_count: int) -> bool:
    """Check the stay-wide conditions of a modifier on its own"""
    if not modifier.is_usable():
        return False
    conditions = modifier.conditions
    if not conditions.covers(day):
        return False
    if conditions.min_length_of_stay and conditions.min_length_of_stay > nights:
        return False
    if conditions.min_occupants and conditions.min_occupants > guest_count:
        return False
    return True


def _most_specific(group: List[Modifier], threshold) -> Optional[Modifier]:
    """Member with the highest threshold, the first one on ties"""
    if not group:
        return None
    return max(group, key=threshold)


def select_applicable_modifiers(
    modifiers: Optional[Iterable[Any]],
    day: DateLike,
    length_of_stay: int,
    guest_count: int,
) -> List[Modifier]:
    """Pick the modifiers applicable to a single night of a stay.

    Modifiers without a known type or without conditions never apply.
    Among the satisfied modifiers conditioned on length of stay only the
    one with the highest ``minLengthOfStay`` survives, and the same holds
    for ``minOccupants``. Age conditions are left for
    :func:`select_best_guest_modifier`.
    """
    day = to_calendar_date(day)
    candidates = [
        modifier for modifier in parse_modifiers(modifiers)
        if _is_satisfied(modifier, day, length_of_stay, guest_count)
    ]

    by_length_of_stay = [m for m in candidates if m.conditions.min_length_of_stay]
    by_occupants = [
        m for m in candidates
        if not m.conditions.min_length_of_stay and m.conditions.min_occupants
    ]
    survivors = [
        _most_specific(by_length_of_stay, lambda m: m.conditions.min_length_of_stay),
        _most_specific(by_occupants, lambda m: m.conditions.min_occupants),
    ]

    grouped = by_length_of_stay + by_occupants
    return [
        modifier for modifier in candidates
        if not any(modifier is member for member in grouped)
        or any(modifier is survivor for survivor in survivors)
    ]


def select_best_guest_modifier(
    base_price: Union[Decimal, int, float, str],
    modifiers: Iterable[Any],
    guest_age: Optional[float],
) -> Optional[Modifier]:
    """Select the modifier most in favour of a guest of the given age.

    Age specific modifiers the guest qualifies for take precedence; the
    one with the most negative change wins, a tighter age limit breaks
    ties. Without a qualifying age specific modifier the generic modifier
    with the most negative change is used. Remaining ties keep input
    order. Returns None if nothing applies.
    """
    base_price = to_decimal(base_price)
    usable = [modifier for modifier in parse_modifiers(modifiers) if modifier.is_usable()]

    age_specific = [
        modifier for modifier in usable
        if modifier.is_age_specific()
        and guest_age is not None
        and modifier.conditions.max_age >= guest_age
    ]
    if age_specific:
        return min(
            age_specific,
            key=lambda m: (m.change_for(base_price), m.conditions.max_age),
        )

    generic = [modifier for modifier in usable if not modifier.is_age_specific()]
    if generic:
        return min(generic, key=lambda m: m.change_for(base_price))
    return None
