"""Domain Entities - hotel data consumed by the pricing algorithms"""
from datetime import date
from decimal import Decimal
from typing import Annotated, Any, Iterable, List, Optional, Tuple

from pydantic import AliasChoices, BeforeValidator, Field, TypeAdapter

from hotel_pricing.domain.enums import ModifierType
from hotel_pricing.domain.value_objects import (
    AvailabilityRestrictions,
    BookingRestrictions,
    CalendarDate,
    DateWindow,
    Guest,
    HotelDataModel,
    ModifierConditions,
    Occupancy,
    to_decimal,
)


def _known_modifier_type(value: Any) -> Optional[ModifierType]:
    """Map unrecognized modifier types to None"""
    if isinstance(value, ModifierType):
        return value
    try:
        return ModifierType(value)
    except ValueError:
        return None


class RoomType(HotelDataModel):
    """Room type offered by a hotel"""
    id: str
    occupancy: Optional[Occupancy] = None


class Modifier(HotelDataModel):
    """Conditional price adjustment attached to a rate plan"""
    type: Annotated[Optional[ModifierType], BeforeValidator(_known_modifier_type)] = Field(
        default=None,
        validation_alias=AliasChoices("type", "unit"),
    )
    adjustment: Decimal = Decimal(0)
    conditions: Optional[ModifierConditions] = None

    # ==================== QUERY METHODS ====================
    def is_usable(self) -> bool:
        """Check if the modifier has a known type and declared conditions"""
        return self.type is not None and self.conditions is not None

    def is_age_specific(self) -> bool:
        return self.conditions is not None and self.conditions.max_age is not None

    def change_for(self, base_price: Decimal) -> Decimal:
        """Absolute price change this modifier causes for a base price"""
        if self.type == ModifierType.PERCENTAGE:
            return self.adjustment / 100 * to_decimal(base_price)
        return self.adjustment


class RatePlan(HotelDataModel):
    """Priced, conditionally available offer for one or more room types"""
    id: str
    price: Decimal
    currency: Optional[str] = None
    room_type_ids: Tuple[str, ...] = ()
    available_for_reservation: Optional[DateWindow] = None
    available_for_travel: Optional[DateWindow] = None
    restrictions: Optional[BookingRestrictions] = None
    modifiers: Tuple[Modifier, ...] = ()

    def effective_currency(self, fallback_currency: str) -> str:
        return self.currency or fallback_currency

    def is_available_for_travel_on(self, day: date) -> bool:
        """Check a single night; plans without a travel window fit any night"""
        if self.available_for_travel is None:
            return True
        return self.available_for_travel.contains(day)


class CancellationPolicy(HotelDataModel):
    """Cancellation fee applicable within a window before arrival"""
    from_: Optional[CalendarDate] = Field(default=None, alias="from")
    to: Optional[CalendarDate] = None
    deadline: int = 0
    amount: Decimal


class AvailabilityRecord(HotelDataModel):
    """Available quantity of a room type on a single day"""
    room_type_id: str
    date: CalendarDate
    quantity: int = Field(ge=0)
    restrictions: Optional[AvailabilityRestrictions] = None

    @property
    def no_arrival(self) -> bool:
        return bool(self.restrictions and self.restrictions.no_arrival)

    @property
    def no_departure(self) -> bool:
        return bool(self.restrictions and self.restrictions.no_departure)


# ==================== COERCION HELPERS ====================
_room_types_adapter = TypeAdapter(List[RoomType])
_rate_plans_adapter = TypeAdapter(List[RatePlan])
_modifiers_adapter = TypeAdapter(List[Modifier])
_guests_adapter = TypeAdapter(List[Guest])
_policies_adapter = TypeAdapter(List[CancellationPolicy])
_availability_adapter = TypeAdapter(List[AvailabilityRecord])


def _coerce(adapter: TypeAdapter, model: type, items: Iterable[Any]) -> list:
    """Validate raw items, lists already made of ``model`` pass through untouched"""
    items = list(items)
    if all(isinstance(item, model) for item in items):
        return items
    return adapter.validate_python(items)


def parse_room_types(items: Iterable[Any]) -> List[RoomType]:
    return _coerce(_room_types_adapter, RoomType, items)


def parse_rate_plans(items: Iterable[Any]) -> List[RatePlan]:
    return _coerce(_rate_plans_adapter, RatePlan, items)


def parse_modifiers(items: Optional[Iterable[Any]]) -> List[Modifier]:
    return _coerce(_modifiers_adapter, Modifier, items or ())


def parse_guests(items: Iterable[Any]) -> List[Guest]:
    return _coerce(_guests_adapter, Guest, items)


def parse_cancellation_policies(items: Optional[Iterable[Any]]) -> List[CancellationPolicy]:
    return _coerce(_policies_adapter, CancellationPolicy, items or ())


def parse_availability(items: Iterable[Any]) -> List[AvailabilityRecord]:
    return _coerce(_availability_adapter, AvailabilityRecord, items)
