"""Cancellation fee schedules.

Declared cancellation policies are clamped to the interval between the
booking date and the arrival date, the highest fee wins on every day and
days without any policy fall back to the hotel default. Consecutive days
with the same fee are then merged into periods.
"""
from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Dict, Iterable, List, NamedTuple, Optional, Union

from hotel_pricing.domain.entities import parse_cancellation_policies
from hotel_pricing.domain.rate_plans import DateLike
from hotel_pricing.domain.results import FeePeriod
from hotel_pricing.domain.value_objects import to_calendar_date, to_decimal


class NormalizedPolicy(NamedTuple):
    from_: date
    to: date
    amount: Decimal


class DailyFee(NamedTuple):
    day: date
    amount: Decimal


def normalize_policy_dates(
    booking_date: date,
    arrival_date: date,
    policies: Iterable[Any],
) -> List[NormalizedPolicy]:
    """Resolve the real interval of every policy by applying its deadline"""
    normalized = []
    for policy in parse_cancellation_policies(policies):
        if policy.from_ and policy.from_ > arrival_date:
            continue
        if policy.to and policy.to < booking_date:
            continue

        from_options = [booking_date, arrival_date - timedelta(days=policy.deadline)]
        if policy.from_:
            from_options.append(policy.from_)
        eligible = [option for option in from_options if option <= arrival_date]
        if not eligible:
            continue

        to = arrival_date
        if policy.to and policy.to < arrival_date:
            to = policy.to
        normalized.append(NormalizedPolicy(max(eligible), to, policy.amount))
    return normalized


def create_fee_schedule(
    booking_date: date,
    arrival_date: date,
    normalized_policies: Iterable[NormalizedPolicy],
    default_amount: Decimal,
) -> List[DailyFee]:
    """Determine the fee of every day from booking to arrival, both inclusive"""
    fees: Dict[date, Decimal] = {}
    for policy in normalized_policies:
        day = policy.from_
        while day <= policy.to:
            if day in fees:
                fees[day] = max(fees[day], policy.amount)
            else:
                fees[day] = policy.amount
            day += timedelta(days=1)

    day = booking_date
    while day <= arrival_date:
        fees.setdefault(day, default_amount)
        day += timedelta(days=1)

    return [DailyFee(day, amount) for day, amount in sorted(fees.items())]


def reduce_fee_schedule(schedule: List[DailyFee]) -> List[FeePeriod]:
    """Compact an ordered fee schedule into periods with the same fee"""
    if not schedule:
        return []
    periods = []
    start = schedule[0]
    previous = schedule[0]
    for daily_fee in schedule[1:]:
        if daily_fee.amount != start.amount:
            periods.append(FeePeriod(from_=start.day, to=previous.day, amount=start.amount))
            start = daily_fee
        previous = daily_fee
    periods.append(FeePeriod(from_=start.day, to=previous.day, amount=start.amount))
    return periods


def compute_cancellation_fees(
    booking_date: DateLike,
    arrival_date: DateLike,
    policies: Optional[Iterable[Any]],
    default_amount: Union[Decimal, int, float, str],
) -> List[FeePeriod]:
    """Determine the cancellation fees from the booking date until arrival"""
    booking_date = to_calendar_date(booking_date)
    arrival_date = to_calendar_date(arrival_date)
    default_amount = to_decimal(default_amount)
    policies = parse_cancellation_policies(policies)

    if not policies:
        return [FeePeriod(from_=booking_date, to=arrival_date, amount=default_amount)]

    normalized = normalize_policy_dates(booking_date, arrival_date, policies)
    return reduce_fee_schedule(create_fee_schedule(booking_date, arrival_date, normalized, default_amount))
