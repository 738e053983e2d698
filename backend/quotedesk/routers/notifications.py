"""Lead notification router: one endpoint per site form."""

from datetime import datetime

from fastapi import APIRouter, Depends
from pydantic import RootModel

from quotedesk.dependencies import get_dispatcher
from quotedesk.schemas.common import CamelModel
from quotedesk.schemas.notification import (
    CarRentalRequest,
    FlightBookingRequest,
    FlightSearchOutcome,
    HotelSearchOutcome,
    NotificationPayload,
    QuoteRequest,
)
from quotedesk.services.notification_service import DeliveryResult, NotificationDispatcher

router = APIRouter()


class AnyNotification(RootModel[NotificationPayload]):
    pass


class CarRentalSubmission(CamelModel):
    car_rental_data: CarRentalRequest
    timestamp: datetime | None = None


def _response(result: DeliveryResult, message: str) -> dict:
    return {
        "success": True,
        "message": message,
        "messageId": result.message_id,
        "clientConfirmationSent": result.client_confirmation_sent,
    }


@router.post("/send-quote")
async def send_quote(
    req: QuoteRequest,
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    """Quote request form: email the team, confirm to the client."""
    result = await dispatcher.notify(req)
    return _response(result, "Demande envoyée avec succès")


@router.post("/flight-search-request")
async def flight_search_request(
    req: FlightSearchOutcome,
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    """Report a site flight search (selected offer or search error) to the team."""
    result = await dispatcher.notify(req)
    return _response(result, "Demande envoyée avec succès")


@router.post("/hotel-search-request")
async def hotel_search_request(
    req: HotelSearchOutcome,
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    result = await dispatcher.notify(req)
    return _response(result, "Demande envoyée avec succès")


@router.post("/flight-search-team")
async def flight_search_team(
    req: FlightBookingRequest,
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    """Booking request for a chosen offer."""
    result = await dispatcher.notify(req)
    return _response(result, "Demande envoyée avec succès à notre équipe")


@router.post("/car-rental-team")
async def car_rental_team(
    req: CarRentalSubmission,
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    payload = req.car_rental_data
    if req.timestamp and payload.requested_at is None:
        payload = payload.model_copy(update={"requested_at": req.timestamp})
    result = await dispatcher.notify(payload)
    return _response(result, "Demande de location de voiture envoyée avec succès à notre équipe")


@router.post("/notify")
async def notify(
    req: AnyNotification,
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    """Generic entry point taking any payload kind."""
    result = await dispatcher.notify(req.root)
    return _response(result, "Demande envoyée avec succès")
