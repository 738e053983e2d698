from pydantic import Field

from quotedesk.schemas.common import CamelModel


class HotelSearchRequest(CamelModel):
    city_code: str | None = None
    radius: int | None = Field(None, gt=0)
    radius_unit: str | None = None  # KM or MILE
    chain_codes: str | None = None
    amenities: str | None = None
    ratings: str | None = None
    hotel_source: str | None = None


class GeoLocation(CamelModel):
    latitude: float | None = None
    longitude: float | None = None


class HotelAddress(CamelModel):
    lines: list[str] = []
    postal_code: str | None = None
    city_name: str | None = None
    country_code: str | None = None


class HotelContact(CamelModel):
    phone: str | None = None
    fax: str | None = None
    email: str | None = None
    www: str | None = None


class Distance(CamelModel):
    value: float
    unit: str


class Hotel(CamelModel):
    id: str
    name: str
    chain_code: str | None = None
    city_code: str | None = None
    location: GeoLocation
    address: HotelAddress
    contact: HotelContact | None = None
    description: str | None = None
    amenities: list[str] = []
    rating: str | None = None
    distance: Distance | None = None
    last_update: str | None = None


class HotelSearchParams(CamelModel):
    city_code: str
    radius: int | None = None
    radius_unit: str | None = None


class HotelSearchMeta(CamelModel):
    count: int
    search_params: HotelSearchParams


class HotelSearchResult(CamelModel):
    hotels: list[Hotel]
    meta: HotelSearchMeta
