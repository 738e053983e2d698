"""Shared fixtures: settings, a fake Amadeus backend and a recording mailer.

Async tests run on AnyIO (``@pytest.mark.anyio``) pinned to asyncio.
"""

from datetime import datetime, timedelta, timezone

import httpx
import pytest

from quotedesk.config import Settings
from quotedesk.errors import NotificationError
from quotedesk.services.amadeus_client import AmadeusClient
from quotedesk.services.flight_search import FLIGHT_OFFERS_PATH
from quotedesk.services.hotel_search import HOTELS_BY_CITY_PATH
from quotedesk.services.token_cache import TOKEN_PATH, AccessTokenCache


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        AMADEUS_API_KEY="client-id",
        AMADEUS_API_KEY_SECRET="client-secret",
        amadeus_base_url="https://amadeus.test",
        SMTP_HOST="smtp.test",
        SMTP_USER="agency@example.com",
        SMTP_PASSWORD="secret",
        TEAM_EMAILS="desk@example.com, boss@example.com",
        log_dir=str(tmp_path / "logs"),
        cors_origins="http://localhost:3000",
    )


class FakeClock:
    def __init__(self):
        self.now = datetime(2025, 8, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class FakeAmadeus:
    """httpx.MockTransport handler standing in for the Amadeus API."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.token_calls = 0
        self.token_status = 200
        self.token_payload = {"access_token": "tok-1", "token_type": "Bearer", "expires_in": 1799}
        self.responses: dict[str, tuple[int, object]] = {
            FLIGHT_OFFERS_PATH: (200, {"meta": {"count": 0}, "data": []}),
            HOTELS_BY_CITY_PATH: (200, {"meta": {"count": 0}, "data": []}),
        }
        self.raise_on: set[str] = set()

    def respond(self, path: str, status: int, payload: object) -> None:
        self.responses[path] = (status, payload)

    @property
    def search_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path != TOKEN_PATH]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path in self.raise_on:
            raise httpx.ConnectError("connection refused", request=request)
        if path == TOKEN_PATH:
            self.token_calls += 1
            return httpx.Response(self.token_status, json=self.token_payload)
        status, payload = self.responses.get(path, (404, {"errors": []}))
        if isinstance(payload, str):
            return httpx.Response(status, text=payload)
        return httpx.Response(status, json=payload)


@pytest.fixture
def fake_amadeus() -> FakeAmadeus:
    return FakeAmadeus()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def amadeus_client(fake_amadeus, clock) -> AmadeusClient:
    client = httpx.AsyncClient(
        base_url="https://amadeus.test", transport=httpx.MockTransport(fake_amadeus)
    )
    cache = AccessTokenCache(client, "client-id", "client-secret", clock=clock)
    return AmadeusClient(client, cache)


class RecordingMailer:
    """Mailer double: keeps every message, fails for addresses in ``fail_for``."""

    def __init__(self):
        self.sent = []
        self.fail_for: set[str] = set()

    async def send(self, email) -> str:
        if self.fail_for.intersection(email.to):
            raise NotificationError(detail=f"refused: {email.to}")
        self.sent.append(email)
        return f"<msg-{len(self.sent)}@example.com>"


@pytest.fixture
def mailer() -> RecordingMailer:
    return RecordingMailer()


def make_segment(origin, destination, dep_at, arr_at, carrier="AF", number="900", aircraft="359"):
    return {
        "departure": {"iataCode": origin, "terminal": "1", "at": dep_at},
        "arrival": {"iataCode": destination, "at": arr_at},
        "carrierCode": carrier,
        "number": number,
        "aircraft": {"code": aircraft},
        "duration": "PT6H0M",
        "id": f"{carrier}{number}",
        "numberOfStops": 0,
        "blacklistedInEU": False,
    }


def make_offer(offer_id, total, segments, *, currency="EUR", duration="PT6H0M", carrier="AF"):
    return {
        "type": "flight-offer",
        "id": offer_id,
        "source": "GDS",
        "instantTicketingRequired": False,
        "nonHomogeneous": False,
        "oneWay": False,
        "lastTicketingDate": "2025-08-10",
        "numberOfBookableSeats": 7,
        "itineraries": [{"duration": duration, "segments": segments}],
        "price": {"currency": currency, "total": total, "base": total, "grandTotal": total},
        "pricingOptions": {"fareType": ["PUBLISHED"], "includedCheckedBagsOnly": True},
        "validatingAirlineCodes": [carrier],
        "travelerPricings": [],
    }


def nonstop_offer(offer_id="1", total="500.00", currency="EUR"):
    return make_offer(
        offer_id,
        total,
        [make_segment("DLA", "CDG", "2025-08-15T23:05:00", "2025-08-16T06:10:00")],
        currency=currency,
    )


def one_stop_offer(offer_id="2", total="420.50"):
    return make_offer(
        offer_id,
        total,
        [
            make_segment("DLA", "NSI", "2025-08-15T08:00:00", "2025-08-15T09:00:00",
                         carrier="QC", number="100", aircraft="E90"),
            make_segment("NSI", "ORY", "2025-08-15T11:30:00", "2025-08-15T18:45:00",
                         carrier="AF", number="885", aircraft="332"),
        ],
        duration="PT10H45M",
        carrier="QC",
    )
