import httpx
import pytest

from conftest import nonstop_offer, one_stop_offer
from quotedesk.main import create_app
from quotedesk.services.email_templates import ESCALATION_INSTRUCTION
from quotedesk.services.flight_search import FLIGHT_OFFERS_PATH, MISSING_PARAMS_MESSAGE
from quotedesk.services.hotel_search import HOTELS_BY_CITY_PATH

pytestmark = pytest.mark.anyio

FLIGHT_FORM = {
    "originLocationCode": "DLA",
    "destinationLocationCode": "PAR",
    "departureDate": "2025-08-15",
    "adults": 1,
}


@pytest.fixture
def app(settings, fake_amadeus, mailer):
    return create_app(settings, amadeus_transport=httpx.MockTransport(fake_amadeus), mailer=mailer)


@pytest.fixture
async def client(app):
    async with app.router.lifespan_context(app):
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac


async def test_health(client):
    resp = await client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "service": "quotedesk"}


async def test_flight_search_success(client, fake_amadeus):
    fake_amadeus.respond(
        FLIGHT_OFFERS_PATH, 200,
        {"meta": {"count": 2}, "data": [nonstop_offer("1", "500.00"), one_stop_offer("2", "420.50")]},
    )

    resp = await client.post("/api/amadeus/flight-search", json=FLIGHT_FORM)

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    offers = body["data"]["offers"]
    assert [o["id"] for o in offers] == ["2", "1"]
    assert offers[1]["price"]["total"] == 500.0
    assert offers[1]["price"]["displayTotal"] == 568.6
    assert offers[1]["isNonStop"] is True
    assert offers[0]["stops"] == 1
    assert body["data"]["meta"]["searchParams"]["departureDate"] == "2025-08-15"


async def test_flight_search_missing_fields(client, fake_amadeus):
    resp = await client.post("/api/amadeus/flight-search", json={"originLocationCode": "DLA"})

    assert resp.status_code == 400
    assert resp.json() == {
        "success": False,
        "error": MISSING_PARAMS_MESSAGE,
        "kind": "invalid_request",
    }
    assert fake_amadeus.requests == []


async def test_flight_search_provider_rejects(client, fake_amadeus):
    fake_amadeus.respond(FLIGHT_OFFERS_PATH, 400, {"errors": [{"code": 425}]})

    resp = await client.post("/api/amadeus/flight-search", json=FLIGHT_FORM)

    assert resp.status_code == 400
    assert resp.json()["kind"] == "invalid_request"


async def test_flight_search_upstream_failure(client, fake_amadeus):
    fake_amadeus.respond(FLIGHT_OFFERS_PATH, 500, {"errors": []})

    resp = await client.post("/api/amadeus/flight-search", json=FLIGHT_FORM)

    assert resp.status_code == 502
    body = resp.json()
    assert body["success"] is False
    assert body["kind"] == "upstream_search"


async def test_token_failure_is_upstream_auth(client, fake_amadeus):
    fake_amadeus.token_status = 401
    fake_amadeus.token_payload = {"error": "invalid_client"}

    resp = await client.post("/api/amadeus/flight-search", json=FLIGHT_FORM)

    assert resp.status_code == 502
    assert resp.json()["kind"] == "upstream_auth"
    # Provider details stay in the logs
    assert "invalid_client" not in resp.text


async def test_malformed_body_is_400(client):
    resp = await client.post("/api/amadeus/flight-search", json={"adults": "many"})

    assert resp.status_code == 400
    assert resp.json()["success"] is False


async def test_hotel_search(client, fake_amadeus):
    fake_amadeus.respond(
        HOTELS_BY_CITY_PATH, 200,
        {"data": [{"hotelId": "H1", "name": "Akwa Palace", "rating": 4}]},
    )

    resp = await client.post("/api/amadeus/hotel-search", json={"cityCode": "dla"})

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["hotels"][0]["name"] == "Akwa Palace"
    assert data["hotels"][0]["rating"] == "4"
    assert data["meta"]["count"] == 1
    assert data["meta"]["searchParams"]["cityCode"] == "DLA"


async def test_hotel_search_requires_city(client):
    resp = await client.post("/api/amadeus/hotel-search", json={})
    assert resp.status_code == 400


async def test_send_quote(client, mailer):
    resp = await client.post("/api/send-quote", json={
        "fullName": "Marie Ngo",
        "phone": "+237 600",
        "email": "marie@example.com",
        "departureCity": "Douala",
        "destination": "Paris",
        "departureDate": "2025-08-15",
    })

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["messageId"] == "<msg-1@example.com>"
    assert body["clientConfirmationSent"] is True
    assert len(mailer.sent) == 2


async def test_send_quote_invalid_email(client, mailer):
    resp = await client.post("/api/send-quote", json={
        "fullName": "Marie Ngo",
        "phone": "+237 600",
        "email": "not-an-email",
        "departureCity": "Douala",
        "destination": "Paris",
        "departureDate": "2025-08-15",
    })

    assert resp.status_code == 400
    assert mailer.sent == []


async def test_flight_search_request_with_error(client, mailer):
    resp = await client.post("/api/flight-search-request", json={
        "originLocationCode": "DLA",
        "destinationLocationCode": "CDG",
        "departureDate": "2025-08-15",
        "phone": "+237 699",
        "searchError": "No flights found",
    })

    assert resp.status_code == 200
    assert ESCALATION_INSTRUCTION in mailer.sent[0].text


async def test_flight_search_request_needs_contact(client, mailer):
    resp = await client.post("/api/flight-search-request", json={
        "originLocationCode": "DLA",
        "destinationLocationCode": "CDG",
        "departureDate": "2025-08-15",
    })

    assert resp.status_code == 400
    assert mailer.sent == []


async def test_hotel_search_request(client, mailer):
    resp = await client.post("/api/hotel-search-request", json={
        "country": "Cameroun",
        "city": "Kribi",
        "budget": 60,
        "phone": "+237 600",
    })

    assert resp.status_code == 200
    assert mailer.sent[0].to == ["desk@example.com", "boss@example.com"]


async def test_car_rental_uses_submission_timestamp(client, mailer):
    resp = await client.post("/api/car-rental-team", json={
        "carRentalData": {"brand": "Toyota", "model": "RAV4", "budgetPerDay": 45, "phone": "+237 622"},
        "timestamp": "2025-08-01T09:15:00",
    })

    assert resp.status_code == 200
    assert "01/08/2025 09:15" in mailer.sent[0].text


async def test_flight_booking_team(client, mailer):
    resp = await client.post("/api/flight-search-team", json={
        "searchData": FLIGHT_FORM,
        "selectedOffer": {
            "id": "1",
            "price": {"total": 500.0, "currency": "EUR", "displayTotal": 568.6},
            "departure": {"airport": "DLA", "time": "2025-08-15T23:05:00"},
            "arrival": {"airport": "CDG", "time": "2025-08-16T06:10:00"},
        },
        "contactInfo": {"email": "client@example.com"},
    })

    assert resp.status_code == 200
    assert resp.json()["clientConfirmationSent"] is True
    assert "568.60 EUR" in mailer.sent[0].text


async def test_generic_notify_dispatches_on_kind(client, mailer):
    resp = await client.post("/api/notify", json={
        "kind": "car_rental",
        "brand": "Kia",
        "model": "Rio",
        "budgetPerDay": 30,
        "phone": "+237 6",
    })

    assert resp.status_code == 200
    assert "Kia Rio" in mailer.sent[0].subject


async def test_generic_notify_unknown_kind(client, mailer):
    resp = await client.post("/api/notify", json={"kind": "spaceship"})

    assert resp.status_code == 400
    assert mailer.sent == []


async def test_team_mail_failure_is_500(client, mailer):
    mailer.fail_for.add("desk@example.com")

    resp = await client.post("/api/hotel-search-request", json={
        "country": "Cameroun", "city": "Kribi", "budget": 60, "phone": "+237 600",
    })

    assert resp.status_code == 500
    assert resp.json() == {
        "success": False,
        "error": "Erreur lors de l'envoi de la demande",
        "kind": "notification",
    }


async def test_hotel_search_results_feed_hotel_notification(client, fake_amadeus, mailer):
    fake_amadeus.respond(HOTELS_BY_CITY_PATH, 200, {"data": [{
        "hotelId": "RTPAR001",
        "name": "IBIS PARIS GARE DE LYON",
        "chainCode": "RT",
        "geoCode": {"latitude": 48.8443, "longitude": 2.3745},
        "address": {"countryCode": "FR", "lines": ["1 RUE DE LYON"], "cityName": "PARIS"},
        "hotelDistance": {"distance": 1.2, "distanceUnit": "KM"},
        "rating": 3,
    }]})
    search = await client.post("/api/amadeus/hotel-search", json={"cityCode": "PAR"})
    hotels = search.json()["data"]["hotels"]

    resp = await client.post("/api/hotel-search-request", json={
        "country": "France",
        "city": "Paris",
        "budget": 120,
        "phone": "+237 600",
        "foundHotels": hotels,
    })

    assert resp.status_code == 200
    assert len(mailer.sent) == 1
    assert (
        "IBIS PARIS GARE DE LYON | Adresse: 1 RUE DE LYON, PARIS, FR | Note: 3/5 | Distance: 1.2 KM"
        in mailer.sent[0].text
    )


async def test_car_rental_with_reversed_dates_rejected(client, mailer):
    resp = await client.post("/api/car-rental-team", json={
        "carRentalData": {
            "brand": "Toyota", "model": "RAV4", "budgetPerDay": 30, "phone": "+237 622",
            "startDate": "2025-08-20", "endDate": "2025-08-11",
        },
    })

    assert resp.status_code == 400
    assert mailer.sent == []
