"""Computation results returned by the pricing algorithms"""
from decimal import Decimal
from typing import Optional, Tuple, Union

from pydantic import Field

from hotel_pricing.domain.entities import Modifier, RatePlan
from hotel_pricing.domain.value_objects import CalendarDate, HotelDataModel, Money


class GuestPriceLine(HotelDataModel):
    """Price of a single night for a single guest under one rate plan"""
    guest_id: Optional[Union[str, int]] = None
    rate_plan_id: str
    currency: str
    base_price: Money
    resulting_price: Money
    modifier: Optional[Modifier] = None
    change: Optional[Money] = None


class DailyRatePlanPrice(HotelDataModel):
    """Candidate price of a whole party for one night under one rate plan"""
    date: CalendarDate
    rate_plan: RatePlan
    total: Money
    guest_prices: Tuple[GuestPriceLine, ...]


class StayComponent(HotelDataModel):
    """One night of a priced stay"""
    date: str
    subtotal: Money
    guests: Tuple[GuestPriceLine, ...]


class PriceComponents(HotelDataModel):
    stay: Tuple[StayComponent, ...] = ()


class BestPrice(HotelDataModel):
    """Cheapest combination of rate plans in one currency, picked per night"""
    currency: str
    total: Money
    components: PriceComponents


class RatePlanPrice(HotelDataModel):
    """Price of a whole stay under a single rate plan"""
    rate_plan: RatePlan
    total: Money
    components: PriceComponents


class SingleRatePlanPrice(RatePlanPrice):
    """Cheapest single rate plan covering the whole stay in one currency"""
    currency: str


class PossiblePrices(HotelDataModel):
    """All single rate plans covering the whole stay in one currency"""
    currency: str
    rate_plans: Tuple[RatePlanPrice, ...] = ()


class RoomTypePrices(HotelDataModel):
    """Prices of a room type; an empty list means no offer is available"""
    id: str
    prices: Tuple[Union[BestPrice, SingleRatePlanPrice, PossiblePrices], ...] = ()


class RoomTypeAvailability(HotelDataModel):
    """Rooms available for a whole stay; None when the data is incomplete"""
    room_type_id: str
    quantity: Optional[int] = None

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


class FeePeriod(HotelDataModel):
    """Cancellation fee valid between two dates, both inclusive"""
    from_: CalendarDate = Field(alias="from")
    to: CalendarDate
    amount: Decimal
