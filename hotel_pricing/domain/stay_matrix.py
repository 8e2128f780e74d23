"""Daily prices and the per-currency stay matrix.

For every night of a stay and every candidate rate plan the price of the
whole party is computed. Entries are grouped by currency; a currency that
cannot price every single night is dropped, rate plans in different
currencies are never combined.
"""
import logging
from collections.abc import Mapping
from decimal import Decimal
from typing import Any, Dict, Iterable, Iterator, List, Tuple

from hotel_pricing.domain.entities import RatePlan, parse_guests, parse_rate_plans
from hotel_pricing.domain.rate_plans import DateLike, select_applicable_modifiers, select_best_guest_modifier
from hotel_pricing.domain.results import DailyRatePlanPrice, GuestPriceLine
from hotel_pricing.domain.value_objects import Money, nights_between, stay_nights, to_calendar_date

logger = logging.getLogger(__name__)


def compute_daily_price(
    guests: Iterable[Any],
    length_of_stay: int,
    day: DateLike,
    rate_plan: Any,
    currency: str,
) -> List[GuestPriceLine]:
    """Price a single night for every guest under one rate plan.

    The most favourable modifier is picked for each guest separately. A
    modifier that does not change the price is not reported. Resulting
    prices are not clamped, a modifier may push them below zero.
    """
    guests = parse_guests(guests)
    if not isinstance(rate_plan, RatePlan):
        rate_plan = RatePlan.model_validate(rate_plan)
    day = to_calendar_date(day)

    applicable_modifiers = select_applicable_modifiers(
        rate_plan.modifiers, day, length_of_stay, len(guests)
    )
    base_price = Money.of(rate_plan.price, currency)

    lines = []
    for guest in guests:
        modifier = select_best_guest_modifier(rate_plan.price, applicable_modifiers, guest.age)
        change = modifier.change_for(rate_plan.price) if modifier else Decimal(0)
        if not change:
            modifier = None
        delta = Money.of(change, currency)
        lines.append(GuestPriceLine(
            guest_id=guest.id,
            rate_plan_id=rate_plan.id,
            currency=currency,
            base_price=base_price,
            resulting_price=base_price.add(delta),
            modifier=modifier,
            change=delta if modifier else None,
        ))
    return lines


class StayMatrix(Mapping):
    """Candidate daily prices indexed by currency and night.

    Read-only mapping of ``currency -> [night][entries]``. Slots are kept
    in an arena keyed by ``(currency, night index)`` so that whole-stay
    coverage can be checked per currency in one place.
    """

    def __init__(self, length_of_stay: int):
        self.length_of_stay = length_of_stay
        self._currencies: List[str] = []
        self._slots: Dict[Tuple[str, int], List[DailyRatePlanPrice]] = {}

    def _open(self, currency: str) -> None:
        if currency not in self._currencies:
            self._currencies.append(currency)

    def _add(self, currency: str, night: int, entry: DailyRatePlanPrice) -> None:
        self._slots.setdefault((currency, night), []).append(entry)

    def _drop(self, currency: str) -> None:
        self._currencies.remove(currency)
        for night in range(self.length_of_stay):
            self._slots.pop((currency, night), None)

    @classmethod
    def build(cls, length_of_stay: int, priced_nights: Iterable[Tuple[str, int, Any]]) -> "StayMatrix":
        """Build a matrix out of ``(currency, night, entry)`` triples.

        A None entry only registers the currency. Every currency left with
        an uncovered night is dropped.
        """
        matrix = cls(length_of_stay)
        for currency, night, entry in priced_nights:
            matrix._open(currency)
            if entry is not None:
                matrix._add(currency, night, entry)

        for currency in list(matrix):
            if not matrix.covers_stay(currency):
                logger.debug("Dropping %s, rate plans do not cover all %d nights", currency, length_of_stay)
                matrix._drop(currency)
        return matrix

    # ==================== QUERY METHODS ====================
    def entries(self, currency: str, night: int) -> Tuple[DailyRatePlanPrice, ...]:
        return tuple(self._slots.get((currency, night), ()))

    def covers_stay(self, currency: str) -> bool:
        """Check if every night has at least one candidate in the currency"""
        return all(self._slots.get((currency, night)) for night in range(self.length_of_stay))

    def __getitem__(self, currency: str) -> List[List[DailyRatePlanPrice]]:
        if currency not in self._currencies:
            raise KeyError(currency)
        return [list(self.entries(currency, night)) for night in range(self.length_of_stay)]

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._currencies))

    def __len__(self) -> int:
        return len(self._currencies)

    def __repr__(self) -> str:
        return f"StayMatrix(length_of_stay={self.length_of_stay}, currencies={self._currencies!r})"


def compute_daily_rate_plans(
    arrival_date: DateLike,
    departure_date: DateLike,
    guests: Iterable[Any],
    fallback_currency: str,
    rate_plans: Iterable[Any],
) -> StayMatrix:
    """Compute every usable daily price of every night of a stay.

    A rate plan without a travel window is considered valid for each night
    on its own, plans with a window only for the nights inside it. This
    lets a stay move from one rate plan to another mid-stay.
    """
    arrival_date = to_calendar_date(arrival_date)
    departure_date = to_calendar_date(departure_date)
    guests = parse_guests(guests)
    rate_plans = parse_rate_plans(rate_plans)
    nights = nights_between(arrival_date, departure_date)
    return StayMatrix.build(nights, _price_nights(arrival_date, nights, guests, fallback_currency, rate_plans))


def _price_nights(arrival_date, nights, guests, fallback_currency, rate_plans):
    for night, day in enumerate(stay_nights(arrival_date, nights)):
        for rate_plan in rate_plans:
            currency = rate_plan.effective_currency(fallback_currency)
            if not rate_plan.is_available_for_travel_on(day):
                yield currency, night, None
                continue
            guest_prices = compute_daily_price(guests, nights, day, rate_plan, currency)
            total = Money.zero(currency)
            for line in guest_prices:
                total = total.add(line.resulting_price)
            yield currency, night, DailyRatePlanPrice(
                date=day,
                rate_plan=rate_plan,
                total=total,
                guest_prices=tuple(guest_prices),
            )
