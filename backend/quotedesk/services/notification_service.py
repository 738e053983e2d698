"""Notification dispatcher: renders lead emails and sends them to the team and client."""

import logging
from dataclasses import dataclass
from typing import Callable

from quotedesk.config import Settings
from quotedesk.errors import NotificationError
from quotedesk.schemas.notification import (
    FlightBookingRequest,
    NotificationPayload,
    QuoteRequest,
)
from quotedesk.services import email_templates
from quotedesk.services.email_templates import AgencyInfo, RenderedEmail
from quotedesk.services.mailer import Mailer, OutgoingEmail

logger = logging.getLogger(__name__)

Renderer = Callable[..., RenderedEmail]

TEAM_TEMPLATES: dict[str, Renderer] = {
    "quote_request": email_templates.render_quote_request,
    "flight_search": email_templates.render_flight_search,
    "hotel_search": email_templates.render_hotel_search,
    "flight_booking": email_templates.render_flight_booking,
    "car_rental": email_templates.render_car_rental,
}

CLIENT_TEMPLATES: dict[str, Renderer] = {
    "quote_request": email_templates.render_quote_confirmation,
    "flight_booking": email_templates.render_flight_booking_confirmation,
}


@dataclass
class DeliveryResult:
    message_id: str
    client_confirmation_sent: bool = False


def client_address(payload) -> str | None:
    """Email address the client confirmation goes to, if the form carried one."""
    if isinstance(payload, QuoteRequest):
        return payload.email
    if isinstance(payload, FlightBookingRequest):
        return payload.contact_info.email
    return None


class NotificationDispatcher:
    def __init__(self, mailer: Mailer, team_recipients: list[str], agency: AgencyInfo):
        self.mailer = mailer
        self.team_recipients = team_recipients
        self.agency = agency

    @classmethod
    def from_settings(cls, settings: Settings, mailer: Mailer | None = None) -> "NotificationDispatcher":
        return cls(
            mailer or Mailer.from_settings(settings),
            settings.team_email_list,
            AgencyInfo.from_settings(settings),
        )

    def render(self, payload: NotificationPayload) -> RenderedEmail:
        try:
            template = TEAM_TEMPLATES[payload.kind]
        except KeyError:
            raise NotificationError(detail=f"no template for {payload.kind!r}") from None
        return template(payload, self.agency)

    async def notify(self, payload: NotificationPayload) -> DeliveryResult:
        """Email the agency team, then confirm to the client where applicable.

        Raises NotificationError when the team email cannot be sent. A failed
        client confirmation is logged and reported in the result only.
        """
        rendered = self.render(payload)
        message_id = await self._send(self.team_recipients, rendered)
        logger.info(f"Team notified of {payload.kind}: {message_id}")

        address = client_address(payload)
        confirmation = CLIENT_TEMPLATES.get(payload.kind)
        if not address or confirmation is None:
            return DeliveryResult(message_id=message_id)

        try:
            await self._send([address], confirmation(payload, self.agency))
        except NotificationError as e:
            logger.warning(f"Client confirmation for {payload.kind} not sent: {e.detail}")
            return DeliveryResult(message_id=message_id, client_confirmation_sent=False)
        return DeliveryResult(message_id=message_id, client_confirmation_sent=True)

    async def _send(self, recipients: list[str], rendered: RenderedEmail) -> str:
        return await self.mailer.send(OutgoingEmail(
            to=recipients,
            subject=rendered.subject,
            html=rendered.html,
            text=rendered.text,
            reply_to=rendered.reply_to,
        ))
