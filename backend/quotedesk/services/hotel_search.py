"""Hotel search proxy over the Amadeus hotel list (by city) endpoint."""

import logging

from quotedesk.errors import InvalidRequestError, TransportError
from quotedesk.schemas.hotel import (
    Distance,
    GeoLocation,
    Hotel,
    HotelAddress,
    HotelContact,
    HotelSearchMeta,
    HotelSearchParams,
    HotelSearchRequest,
    HotelSearchResult,
)
from quotedesk.services.amadeus_client import AmadeusClient

logger = logging.getLogger(__name__)

HOTELS_BY_CITY_PATH = "/v1/reference-data/locations/hotels/by-city"

MISSING_CITY_MESSAGE = "Code de ville requis pour la recherche d'hôtels"
INVALID_PARAMS_MESSAGE = "Paramètres de recherche d'hôtel invalides. Vérifiez le code de ville."
SEARCH_FAILED_MESSAGE = "Erreur lors de la recherche d'hôtels. Veuillez réessayer."

# request field -> Amadeus query parameter
OPTIONAL_PARAMS = {
    "radius": "radius",
    "radius_unit": "radiusUnit",
    "chain_codes": "chainCodes",
    "amenities": "amenities",
    "ratings": "ratings",
    "hotel_source": "hotelSource",
}


class HotelSearchService:
    def __init__(self, client: AmadeusClient):
        self._client = client

    @staticmethod
    def build_query(req: HotelSearchRequest) -> dict[str, str]:
        if not req.city_code or not req.city_code.strip():
            raise InvalidRequestError(MISSING_CITY_MESSAGE)

        params = {"cityCode": req.city_code.strip().upper()}
        for field, param in OPTIONAL_PARAMS.items():
            value = getattr(req, field)
            if value:
                params[param] = str(value)
        return params

    async def search_hotels(self, req: HotelSearchRequest) -> HotelSearchResult:
        params = self.build_query(req)
        logger.info(f"Hotel search in {params['cityCode']}")

        data = await self._client.get(
            HOTELS_BY_CITY_PATH,
            params,
            invalid_message=INVALID_PARAMS_MESSAGE,
            failure_message=SEARCH_FAILED_MESSAGE,
        )

        hotels = [self.parse_hotel(h) for h in data.get("data", [])]
        meta = data.get("meta") or {}
        return HotelSearchResult(
            hotels=hotels,
            meta=HotelSearchMeta(
                count=meta.get("count", len(hotels)),
                search_params=HotelSearchParams(
                    city_code=params["cityCode"],
                    radius=req.radius,
                    radius_unit=req.radius_unit,
                ),
            ),
        )

    @staticmethod
    def parse_hotel(raw: dict) -> Hotel:
        """Flatten one Amadeus hotel record, defaulting absent optional fields."""
        try:
            geo = raw.get("geoCode") or {}
            address = raw.get("address") or {}
            contact = raw.get("contact")
            description = raw.get("description") or {}
            distance = raw.get("hotelDistance")

            return Hotel(
                id=raw["hotelId"],
                name=raw["name"],
                chain_code=raw.get("chainCode"),
                city_code=raw.get("cityCode"),
                location=GeoLocation(
                    latitude=geo.get("latitude"),
                    longitude=geo.get("longitude"),
                ),
                address=HotelAddress(
                    lines=address.get("lines") or [],
                    postal_code=address.get("postalCode"),
                    city_name=address.get("cityName"),
                    country_code=address.get("countryCode"),
                ),
                contact=HotelContact(**contact) if contact else None,
                description=description.get("text"),
                amenities=raw.get("amenities") or [],
                rating=str(raw["rating"]) if raw.get("rating") is not None else None,
                distance=Distance(
                    value=distance["distance"],
                    unit=distance["distanceUnit"],
                ) if distance else None,
                last_update=raw.get("lastUpdate"),
            )
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.error(f"Malformed Amadeus hotel record: {e}")
            raise TransportError(detail=f"malformed hotel record: {e}") from e
