from fastapi import Request

from quotedesk.services.flight_search import FlightSearchService
from quotedesk.services.hotel_search import HotelSearchService
from quotedesk.services.notification_service import NotificationDispatcher


def get_flight_search(request: Request) -> FlightSearchService:
    return request.app.state.flight_search


def get_hotel_search(request: Request) -> HotelSearchService:
    return request.app.state.hotel_search


def get_dispatcher(request: Request) -> NotificationDispatcher:
    return request.app.state.dispatcher
