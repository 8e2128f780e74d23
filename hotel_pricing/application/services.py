"""Application Services - price resolution strategies"""
import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from hotel_pricing.domain.entities import RatePlan, RoomType, parse_guests, parse_rate_plans, parse_room_types
from hotel_pricing.domain.errors import PriceComputerError
from hotel_pricing.domain.rate_plans import DateLike, select_applicable_rate_plans
from hotel_pricing.domain.results import (
    BestPrice,
    DailyRatePlanPrice,
    PossiblePrices,
    PriceComponents,
    RatePlanPrice,
    RoomTypePrices,
    SingleRatePlanPrice,
    StayComponent,
)
from hotel_pricing.domain.stay_matrix import StayMatrix, compute_daily_rate_plans
from hotel_pricing.domain.value_objects import Money, to_calendar_date

logger = logging.getLogger(__name__)

PricingStrategy = Callable[[StayMatrix], List[Any]]


# ==================== STRATEGY HELPERS ====================
def _sum_totals(entries: Iterable[DailyRatePlanPrice], currency: str) -> Money:
    total = Money.zero(currency)
    for entry in entries:
        total = total.add(entry.total)
    return total


def _stay_components(entries: Iterable[DailyRatePlanPrice], currency: str) -> PriceComponents:
    stay = []
    for entry in entries:
        subtotal = Money.zero(currency)
        for line in entry.guest_prices:
            subtotal = subtotal.add(line.resulting_price)
        stay.append(StayComponent(
            date=entry.date.isoformat(),
            subtotal=subtotal,
            guests=entry.guest_prices,
        ))
    return PriceComponents(stay=tuple(stay))


def _rate_plans_covering_stay(matrix: StayMatrix, currency: str) -> List[RatePlanPrice]:
    """Price every rate plan that alone covers each night of the stay"""
    occurrences: Dict[str, Tuple[RatePlan, List[DailyRatePlanPrice]]] = {}
    for night in range(matrix.length_of_stay):
        for entry in matrix.entries(currency, night):
            occurrences.setdefault(entry.rate_plan.id, (entry.rate_plan, []))[1].append(entry)

    return [
        RatePlanPrice(
            rate_plan=rate_plan,
            total=_sum_totals(entries, currency),
            components=_stay_components(entries, currency),
        )
        for rate_plan, entries in occurrences.values()
        if len(entries) == matrix.length_of_stay
    ]


def _best_price(matrix: StayMatrix) -> List[BestPrice]:
    prices = []
    for currency in matrix:
        daily_bests = [
            min(matrix.entries(currency, night), key=lambda entry: entry.total.amount)
            for night in range(matrix.length_of_stay)
        ]
        prices.append(BestPrice(
            currency=currency,
            total=_sum_totals(daily_bests, currency),
            components=_stay_components(daily_bests, currency),
        ))
    return prices


def _best_single_rate_plan(matrix: StayMatrix) -> List[SingleRatePlanPrice]:
    prices = []
    for currency in matrix:
        candidates = _rate_plans_covering_stay(matrix, currency)
        if not candidates:
            logger.debug("No single rate plan covers the whole stay in %s", currency)
            continue
        best = min(candidates, key=lambda candidate: candidate.total.amount)
        prices.append(SingleRatePlanPrice(
            currency=currency,
            rate_plan=best.rate_plan,
            total=best.total,
            components=best.components,
        ))
    return prices


def _possible_single_rate_plans(matrix: StayMatrix) -> List[PossiblePrices]:
    return [
        PossiblePrices(currency=currency, rate_plans=tuple(_rate_plans_covering_stay(matrix, currency)))
        for currency in matrix
    ]


class PriceComputer:
    """Service computing hotel stay prices with several resolution strategies.

    Room types, rate plans and the default currency are fixed at
    construction. Every strategy returns one :class:`RoomTypePrices` per
    room type; an empty ``prices`` tuple means no offer is available.
    """

    def __init__(self, room_types: Iterable[Any], rate_plans: Iterable[Any], default_currency: str):
        if room_types is None:
            raise PriceComputerError("Missing roomTypes")
        if rate_plans is None:
            raise PriceComputerError("Missing ratePlans")
        if not default_currency:
            raise PriceComputerError("Missing defaultCurrency")
        self._room_types: Tuple[RoomType, ...] = tuple(parse_room_types(room_types))
        self._rate_plans: Tuple[RatePlan, ...] = tuple(parse_rate_plans(rate_plans))
        self._default_currency = default_currency

    @property
    def room_types(self) -> Tuple[RoomType, ...]:
        return self._room_types

    @property
    def rate_plans(self) -> Tuple[RatePlan, ...]:
        return self._rate_plans

    @property
    def default_currency(self) -> str:
        return self._default_currency

    def _determine_prices(
        self,
        booking_date: DateLike,
        arrival_date: DateLike,
        departure_date: DateLike,
        guests: Iterable[Any],
        currency: Optional[str],
        room_type_id: Optional[str],
        strategy: PricingStrategy,
    ) -> List[RoomTypePrices]:
        """Build the stay matrix of every room type and reduce it with a strategy"""
        booking_date = to_calendar_date(booking_date)
        arrival_date = to_calendar_date(arrival_date)
        departure_date = to_calendar_date(departure_date)
        guests = parse_guests(guests)
        room_types = [
            room_type for room_type in self._room_types
            if room_type_id is None or room_type.id == room_type_id
        ]

        result = []
        for room_type in room_types:
            applicable_rate_plans = select_applicable_rate_plans(
                room_type.id, self._rate_plans, booking_date, arrival_date, departure_date,
                self._default_currency, currency,
            )
            if not applicable_rate_plans:
                logger.debug("No applicable rate plan for room type %s", room_type.id)
                result.append(RoomTypePrices(id=room_type.id))
                continue

            matrix = compute_daily_rate_plans(
                arrival_date, departure_date, guests, self._default_currency, applicable_rate_plans
            )
            result.append(RoomTypePrices(id=room_type.id, prices=tuple(strategy(matrix))))
        return result

    # ==================== PRICE STRATEGIES ====================
    def get_best_price(
        self,
        booking_date: DateLike,
        arrival_date: DateLike,
        departure_date: DateLike,
        guests: Iterable[Any],
        currency: Optional[str] = None,
        room_type_id: Optional[str] = None,
    ) -> List[RoomTypePrices]:
        """Cheapest price per currency, picking the best rate plan for every night.

        Different nights may be priced by different rate plans, but all
        guests of one night share the same rate plan.
        """
        return self._determine_prices(
            booking_date, arrival_date, departure_date, guests, currency, room_type_id, _best_price
        )

    def get_best_price_with_single_rate_plan(
        self,
        booking_date: DateLike,
        arrival_date: DateLike,
        departure_date: DateLike,
        guests: Iterable[Any],
        currency: Optional[str] = None,
        room_type_id: Optional[str] = None,
    ) -> List[RoomTypePrices]:
        """Cheapest single rate plan per currency covering the whole stay"""
        return self._determine_prices(
            booking_date, arrival_date, departure_date, guests, currency, room_type_id,
            _best_single_rate_plan,
        )

    def get_possible_prices_with_single_rate_plan(
        self,
        booking_date: DateLike,
        arrival_date: DateLike,
        departure_date: DateLike,
        guests: Iterable[Any],
        currency: Optional[str] = None,
        room_type_id: Optional[str] = None,
    ) -> List[RoomTypePrices]:
        """All single rate plans per currency covering the whole stay"""
        return self._determine_prices(
            booking_date, arrival_date, departure_date, guests, currency, room_type_id,
            _possible_single_rate_plans,
        )
