"""Lead payloads posted by the site forms, one model per email kind."""

from datetime import date, datetime
from typing import Annotated, Any, Literal, Union

from pydantic import EmailStr, Field, model_validator

from quotedesk.schemas.common import CamelModel
from quotedesk.schemas.flight import FlightPoint, FlightSearchRequest
from quotedesk.schemas.hotel import HotelAddress


def _require_contact(email: str | None, phone: str | None) -> None:
    if not email and not (phone and phone.strip()):
        raise ValueError("Au moins un email ou téléphone est requis")


class ContactInfo(CamelModel):
    email: EmailStr | None = None
    phone: str | None = None

    @model_validator(mode="after")
    def _has_channel(self):
        _require_contact(self.email, self.phone)
        return self


class SelectedPrice(CamelModel):
    total: float
    currency: str
    # The browser sends the formatted label ("568.60 EUR"), API callers may send the number
    display_total: float | str | None = None

    @property
    def label(self) -> str:
        if isinstance(self.display_total, str) and self.display_total:
            return self.display_total
        if isinstance(self.display_total, (int, float)):
            return f"{self.display_total:.2f} {self.currency}"
        return f"{self.total:.2f} {self.currency}"


class SelectedFlight(CamelModel):
    id: str | None = None
    price: SelectedPrice
    departure: FlightPoint
    arrival: FlightPoint
    airline: str | None = None
    duration: str | None = None
    stops: int = 0
    bookable_seats: int | None = None
    instant_ticketing: bool | None = None
    last_ticketing_date: str | None = None
    raw_offer: dict[str, Any] | None = None


class QuoteRequest(CamelModel):
    kind: Literal["quote_request"] = "quote_request"
    full_name: str = Field(..., min_length=1)
    phone: str
    email: EmailStr
    departure_city: str
    destination: str
    departure_date: date
    return_date: date | None = None
    passengers: str | None = None
    adults: int | None = None
    children: int | None = None
    infants: int | None = None
    travel_class: str | None = None
    preferred_airline: str | None = None
    budget: str | None = None
    additional_info: str | None = None

    @property
    def passengers_label(self) -> str:
        if self.adults is None:
            return self.passengers or "Non spécifié"
        parts = [f"{self.adults} adulte(s)"]
        if self.children:
            parts.append(f"{self.children} enfant(s)")
        if self.infants:
            parts.append(f"{self.infants} bébé(s)")
        return ", ".join(parts)


class FlightSearchOutcome(CamelModel):
    """A search made on the site, with the flight the client picked or the search error."""

    kind: Literal["flight_search"] = "flight_search"
    origin_location_code: str
    destination_location_code: str
    departure_date: date
    return_date: date | None = None
    adults: int = 1
    children: int | None = None
    infants: int | None = None
    travel_class: str | None = None
    non_stop: bool | None = None
    email: EmailStr | None = None
    phone: str | None = None
    selected_flight: SelectedFlight | None = None
    search_error: str | None = None

    @model_validator(mode="after")
    def _has_contact(self):
        _require_contact(self.email, self.phone)
        return self


class FoundHotel(CamelModel):
    """A hotel as returned by the hotel search endpoint, or a hand-written summary."""

    id: str
    name: str
    address: HotelAddress | str | None = None
    rating: float | None = None
    distance: dict[str, Any] | None = None
    contact: dict[str, Any] | None = None
    amenities: list[str] = []


class HotelSearchOutcome(CamelModel):
    kind: Literal["hotel_search"] = "hotel_search"
    country: str
    city: str
    budget: float
    phone: str = Field(..., min_length=1)
    check_in_date: date | None = None
    check_out_date: date | None = None
    adults: int | None = None
    radius: int | None = None
    found_hotels: list[FoundHotel] | None = None
    search_error: str | None = None


class FlightBookingRequest(CamelModel):
    """Client asked the team to book a specific offer."""

    kind: Literal["flight_booking"] = "flight_booking"
    search_data: FlightSearchRequest
    selected_offer: SelectedFlight
    contact_info: ContactInfo


class CarRentalRequest(CamelModel):
    kind: Literal["car_rental"] = "car_rental"
    brand: str = Field(..., min_length=1)
    model: str = Field(..., min_length=1)
    budget_per_day: float = Field(..., gt=0)
    phone: str
    location: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    driver_age: int | None = Field(None, ge=18)
    requested_at: datetime | None = None

    @model_validator(mode="after")
    def _dates_in_order(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("La date de fin doit être postérieure à la date de début")
        return self

    @property
    def estimated_days(self) -> int | None:
        if not self.start_date or not self.end_date:
            return None
        return (self.end_date - self.start_date).days

    @property
    def total_budget(self) -> float | None:
        days = self.estimated_days
        if days is None:
            return None
        return days * self.budget_per_day


NotificationPayload = Annotated[
    Union[QuoteRequest, FlightSearchOutcome, HotelSearchOutcome, FlightBookingRequest, CarRentalRequest],
    Field(discriminator="kind"),
]
