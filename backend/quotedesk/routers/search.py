"""Search router: flight and hotel proxies over Amadeus."""

from fastapi import APIRouter, Depends

from quotedesk.dependencies import get_flight_search, get_hotel_search
from quotedesk.schemas.flight import FlightSearchRequest
from quotedesk.schemas.hotel import HotelSearchRequest
from quotedesk.services.flight_search import FlightSearchService
from quotedesk.services.hotel_search import HotelSearchService

router = APIRouter()


@router.post("/flight-search")
async def search_flights(
    req: FlightSearchRequest,
    service: FlightSearchService = Depends(get_flight_search),
):
    """Search flight offers, cheapest first."""
    result = await service.search_flights(req)
    return {"success": True, "data": result.model_dump(mode="json", by_alias=True)}


@router.post("/hotel-search")
async def search_hotels(
    req: HotelSearchRequest,
    service: HotelSearchService = Depends(get_hotel_search),
):
    """List hotels in a city."""
    result = await service.search_hotels(req)
    return {"success": True, "data": result.model_dump(mode="json", by_alias=True)}
