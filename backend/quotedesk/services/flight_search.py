"""Flight search proxy: form input to Amadeus flight-offers query and back."""

import logging

from quotedesk.errors import InvalidRequestError, TransportError
from quotedesk.schemas.flight import (
    FlightOffer,
    FlightPoint,
    FlightPrice,
    FlightSearchMeta,
    FlightSearchParams,
    FlightSearchRequest,
    FlightSearchResult,
    FlightSegment,
    PassengerCounts,
    SegmentPoint,
)
from quotedesk.services.amadeus_client import AmadeusClient

logger = logging.getLogger(__name__)

FLIGHT_OFFERS_PATH = "/v2/shopping/flight-offers"

MISSING_PARAMS_MESSAGE = (
    "Paramètres requis manquants: ville de départ, destination, "
    "date de départ et nombre d'adultes"
)
INVALID_PARAMS_MESSAGE = (
    "Paramètres de recherche invalides. Vérifiez les codes d'aéroport et les dates."
)
SEARCH_FAILED_MESSAGE = "Erreur lors de la recherche de vols. Veuillez réessayer."


def parse_duration(duration_str: str | None) -> int:
    """Parse ISO 8601 duration (PT2H30M, P1DT2H) to minutes."""
    if not duration_str or not duration_str.startswith("P"):
        return 0
    days = 0
    rest = duration_str[1:]
    if "T" in rest:
        day_part, rest = rest.split("T", 1)
    else:
        day_part, rest = rest, ""
    if day_part.endswith("D"):
        days = int(day_part[:-1] or 0)
    hours = 0
    minutes = 0
    if "H" in rest:
        h_part, rest = rest.split("H")
        hours = int(h_part)
    if "M" in rest:
        m_part = rest.split("M")[0]
        if m_part:
            minutes = int(m_part)
    return days * 24 * 60 + hours * 60 + minutes


class FlightSearchService:
    def __init__(
        self,
        client: AmadeusClient,
        *,
        display_fee: float = 0.0,
        fee_currency: str = "EUR",
        default_results: int = 10,
        max_results: int = 50,
    ):
        self._client = client
        self.display_fee = display_fee
        self.fee_currency = fee_currency.upper()
        self.default_results = default_results
        self.max_results = max_results

    def build_query(self, req: FlightSearchRequest) -> dict[str, str]:
        """Validate ``req`` and return the Amadeus query parameters.

        Raises InvalidRequestError when a required field is missing.
        """
        if (
            not req.origin_location_code
            or not req.destination_location_code
            or not req.departure_date
            or not req.adults
            or req.adults < 1
        ):
            raise InvalidRequestError(MISSING_PARAMS_MESSAGE)

        params = {
            "originLocationCode": req.origin_location_code.strip().upper(),
            "destinationLocationCode": req.destination_location_code.strip().upper(),
            "departureDate": req.departure_date.isoformat(),
            "adults": str(req.adults),
        }

        if req.return_date:
            if req.return_date < req.departure_date:
                raise InvalidRequestError(
                    "La date de retour doit être postérieure à la date de départ."
                )
            params["returnDate"] = req.return_date.isoformat()
        if req.children:
            params["children"] = str(req.children)
        if req.infants:
            params["infants"] = str(req.infants)
        if req.travel_class:
            params["travelClass"] = req.travel_class.value
        if req.non_stop:
            params["nonStop"] = "true"
        if req.currency_code:
            params["currencyCode"] = req.currency_code.upper()
        if req.max_price:
            params["maxPrice"] = str(req.max_price)

        params["max"] = str(min(req.max or self.default_results, self.max_results))
        return params

    async def search_flights(self, req: FlightSearchRequest) -> FlightSearchResult:
        params = self.build_query(req)
        logger.info(
            f"Flight search {params['originLocationCode']} -> "
            f"{params['destinationLocationCode']} on {params['departureDate']}"
        )

        data = await self._client.get(
            FLIGHT_OFFERS_PATH,
            params,
            invalid_message=INVALID_PARAMS_MESSAGE,
            failure_message=SEARCH_FAILED_MESSAGE,
        )

        offers = []
        for raw in data.get("data", []):
            offer = self.parse_offer(raw)
            if offer is not None:
                offers.append(offer)
        # sorted() is stable, equal prices keep provider order
        offers = sorted(offers, key=lambda o: o.price.total)

        meta = data.get("meta") or {}
        return FlightSearchResult(
            offers=offers,
            meta=FlightSearchMeta(
                count=meta.get("count", len(offers)),
                search_params=FlightSearchParams(
                    origin=params["originLocationCode"],
                    destination=params["destinationLocationCode"],
                    departure_date=req.departure_date,
                    return_date=req.return_date,
                    passengers=PassengerCounts(
                        adults=req.adults,
                        children=req.children or 0,
                        infants=req.infants or 0,
                    ),
                    travel_class=req.travel_class,
                    non_stop=req.non_stop,
                ),
            ),
            dictionaries=data.get("dictionaries"),
        )

    def parse_offer(self, raw: dict) -> FlightOffer | None:
        """Reshape one Amadeus offer. Returns None when it has no segments."""
        try:
            itineraries = raw.get("itineraries") or [{}]
            itin = itineraries[0]
            segments = itin.get("segments") or []
            if not segments:
                logger.warning(f"Skipping offer {raw.get('id')} without segments")
                return None

            first_seg = segments[0]
            last_seg = segments[-1]

            price = raw["price"]
            total = float(price["total"])
            currency = price["currency"]
            # The fee is a fixed amount in fee_currency; other currencies show the raw total
            fee = self.display_fee if currency.upper() == self.fee_currency else 0.0
            display_total = round(total + fee, 2)

            validating = raw.get("validatingAirlineCodes") or []

            return FlightOffer(
                id=str(raw["id"]),
                price=FlightPrice(
                    total=total,
                    currency=currency,
                    formatted_total=f"{price['total']} {currency}",
                    display_total=display_total,
                    formatted_display_total=f"{display_total:.2f} {currency}",
                ),
                duration=itin.get("duration"),
                duration_minutes=parse_duration(itin.get("duration")),
                stops=len(segments) - 1,
                is_non_stop=len(segments) == 1,
                departure=FlightPoint(
                    airport=first_seg["departure"]["iataCode"],
                    time=first_seg["departure"]["at"],
                ),
                arrival=FlightPoint(
                    airport=last_seg["arrival"]["iataCode"],
                    time=last_seg["arrival"]["at"],
                ),
                airline=validating[0] if validating else None,
                segments=[self._parse_segment(s) for s in segments],
                bookable_seats=raw.get("numberOfBookableSeats"),
                instant_ticketing=bool(raw.get("instantTicketingRequired", False)),
                last_ticketing_date=raw.get("lastTicketingDate"),
            )
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.error(f"Malformed Amadeus offer: {e}")
            raise TransportError(detail=f"malformed flight offer: {e}") from e

    @staticmethod
    def _parse_segment(seg: dict) -> FlightSegment:
        return FlightSegment(
            departure=SegmentPoint(
                iata_code=seg["departure"]["iataCode"],
                terminal=seg["departure"].get("terminal"),
                at=seg["departure"]["at"],
            ),
            arrival=SegmentPoint(
                iata_code=seg["arrival"]["iataCode"],
                terminal=seg["arrival"].get("terminal"),
                at=seg["arrival"]["at"],
            ),
            airline=seg["carrierCode"],
            flight_number=f"{seg['carrierCode']}{seg['number']}",
            duration=seg.get("duration"),
            aircraft=(seg.get("aircraft") or {}).get("code"),
        )
