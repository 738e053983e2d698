from datetime import date
from enum import Enum
from typing import Any

from pydantic import Field

from quotedesk.schemas.common import CamelModel


class TravelClass(str, Enum):
    ECONOMY = "ECONOMY"
    PREMIUM_ECONOMY = "PREMIUM_ECONOMY"
    BUSINESS = "BUSINESS"
    FIRST = "FIRST"


class FlightSearchRequest(CamelModel):
    """Search form input. Required fields are checked by the proxy, not here."""

    origin_location_code: str | None = None
    destination_location_code: str | None = None
    departure_date: date | None = None
    return_date: date | None = None
    adults: int | None = None
    children: int | None = Field(None, ge=0)
    infants: int | None = Field(None, ge=0)
    travel_class: TravelClass | None = None
    non_stop: bool | None = None
    currency_code: str | None = None
    max_price: int | None = Field(None, gt=0)
    max: int | None = Field(None, ge=1)


class FlightPrice(CamelModel):
    total: float
    currency: str
    formatted_total: str
    display_total: float
    formatted_display_total: str


class FlightPoint(CamelModel):
    airport: str | None = None
    time: str | None = None


class SegmentPoint(CamelModel):
    iata_code: str
    terminal: str | None = None
    at: str


class FlightSegment(CamelModel):
    departure: SegmentPoint
    arrival: SegmentPoint
    airline: str
    flight_number: str
    duration: str | None = None
    aircraft: str | None = None


class FlightOffer(CamelModel):
    id: str
    price: FlightPrice
    duration: str | None = None
    duration_minutes: int = 0
    stops: int
    is_non_stop: bool
    departure: FlightPoint
    arrival: FlightPoint
    airline: str | None = None
    segments: list[FlightSegment]
    bookable_seats: int | None = None
    instant_ticketing: bool = False
    last_ticketing_date: str | None = None


class PassengerCounts(CamelModel):
    adults: int
    children: int = 0
    infants: int = 0


class FlightSearchParams(CamelModel):
    origin: str
    destination: str
    departure_date: date
    return_date: date | None = None
    passengers: PassengerCounts
    travel_class: TravelClass | None = None
    non_stop: bool | None = None


class FlightSearchMeta(CamelModel):
    count: int
    search_params: FlightSearchParams


class FlightSearchResult(CamelModel):
    offers: list[FlightOffer]
    meta: FlightSearchMeta
    dictionaries: dict[str, Any] | None = None
