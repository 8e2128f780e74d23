"""Domain Value Objects"""
from datetime import date, datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from functools import total_ordering
from typing import Annotated, Any, Iterator, Optional, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel

from hotel_pricing.domain.errors import CurrencyMismatchError
from hotel_pricing.infrastructure.settings import get_settings


def _coerce_calendar_date(value: Any) -> Any:
    """Reduce datetimes and ISO timestamps to their calendar day"""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str) and len(value) > 10:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    return value


CalendarDate = Annotated[date, BeforeValidator(_coerce_calendar_date)]

_calendar_date_adapter = TypeAdapter(CalendarDate)


def to_calendar_date(value: Union[str, date, datetime]) -> date:
    """Parse anything date-like into a calendar date"""
    return _calendar_date_adapter.validate_python(value)


def nights_between(arrival_date: date, departure_date: date) -> int:
    """Number of nights between arrival and departure"""
    return abs((departure_date - arrival_date).days)


def stay_nights(arrival_date: date, nights: int) -> Iterator[date]:
    """Yield the date of every night of a stay"""
    for offset in range(nights):
        yield arrival_date + timedelta(days=offset)


class HotelDataModel(BaseModel):
    """Base for immutable records accepting camelCase hotel data"""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_dict(self) -> dict:
        """Serialize into the camelCase JSON shape"""
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


@total_ordering
class Money(BaseModel):
    """Value Object for exact-decimal monetary amounts"""
    amount: Decimal
    currency: str

    model_config = ConfigDict(frozen=True)

    @classmethod
    def of(cls, amount: Union[Decimal, int, float, str], currency: str,
           decimal_places: Optional[int] = None) -> "Money":
        """Create money rounded to the configured number of decimal places"""
        if decimal_places is None:
            decimal_places = get_settings().decimal_places
        exponent = Decimal(1).scaleb(-decimal_places)
        quantized = to_decimal(amount).quantize(exponent, rounding=ROUND_HALF_UP)
        return cls(amount=quantized, currency=currency)

    @classmethod
    def zero(cls, currency: str) -> "Money":
        return cls.of(0, currency)

    def add(self, other: "Money") -> "Money":
        self._check_currency(other)
        return Money.of(self.amount + other.amount, self.currency)

    def subtract(self, other: "Money") -> "Money":
        self._check_currency(other)
        return Money.of(self.amount - other.amount, self.currency)

    def multiply(self, factor: Union[Decimal, int, float, str]) -> "Money":
        return Money.of(self.amount * to_decimal(factor), self.currency)

    def _check_currency(self, other: "Money") -> None:
        if other.currency != self.currency:
            raise CurrencyMismatchError(self.currency, other.currency)

    def __add__(self, other: "Money") -> "Money":
        return self.add(other)

    def __sub__(self, other: "Money") -> "Money":
        return self.subtract(other)

    def __lt__(self, other: "Money") -> bool:
        self._check_currency(other)
        return self.amount < other.amount

    def __str__(self) -> str:
        return f"{self.amount} {self.currency}"


def to_decimal(value: Union[Decimal, int, float, str]) -> Decimal:
    """Convert a number to Decimal without binary float artifacts"""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(repr(value))
    return Decimal(value)


class DateWindow(HotelDataModel):
    """Value Object for an inclusive date interval, open where a bound is missing"""
    from_: Optional[CalendarDate] = Field(default=None, alias="from")
    to: Optional[CalendarDate] = None

    def contains(self, day: date) -> bool:
        if self.from_ is not None and day < self.from_:
            return False
        if self.to is not None and day > self.to:
            return False
        return True

    def overlaps(self, start: date, end: date) -> bool:
        """Check if the window shares at least one day with [start, end]"""
        if self.to is not None and self.to < start:
            return False
        if self.from_ is not None and self.from_ > end:
            return False
        return True


class Bounds(HotelDataModel):
    """Value Object for an optional numeric min/max pair"""
    min: Optional[int] = None
    max: Optional[int] = None


class Occupancy(Bounds):
    """Value Object for the permitted guest count of a room type"""

    def admits(self, guest_count: int) -> bool:
        if self.min and self.min > guest_count:
            return False
        if self.max and self.max < guest_count:
            return False
        return True


class BookingRestrictions(HotelDataModel):
    """Value Object for rate plan booking restrictions"""
    booking_cut_off: Optional[Bounds] = None
    length_of_stay: Optional[Bounds] = None


class ModifierConditions(HotelDataModel):
    """Value Object for the conditions under which a modifier applies"""
    from_: Optional[CalendarDate] = Field(default=None, alias="from")
    to: Optional[CalendarDate] = None
    min_length_of_stay: Optional[int] = None
    min_occupants: Optional[int] = None
    max_age: Optional[float] = None

    def covers(self, day: date) -> bool:
        return DateWindow(from_=self.from_, to=self.to).contains(day)


class AvailabilityRestrictions(HotelDataModel):
    """Value Object for arrival/departure restrictions of a single day"""
    no_arrival: bool = False
    no_departure: bool = False


class Guest(HotelDataModel):
    """Value Object for a guest taking part in a stay"""
    id: Optional[Union[str, int]] = None
    age: Optional[float] = None
