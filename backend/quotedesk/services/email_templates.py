"""Email bodies for each lead kind, rendered to both plain text and HTML.

Every template builds a list of ``Section`` objects once; ``_compose`` turns
them into the text and HTML bodies so both versions always carry the same
facts. User-supplied values are escaped in the HTML body only.
"""

import html
import json
from dataclasses import dataclass, field
from datetime import date, datetime

from quotedesk.config import Settings
from quotedesk.schemas.hotel import HotelAddress
from quotedesk.schemas.notification import (
    CarRentalRequest,
    FlightBookingRequest,
    FlightSearchOutcome,
    HotelSearchOutcome,
    QuoteRequest,
    SelectedFlight,
)

ESCALATION_INSTRUCTION = "Action requise: Contactez le client pour une recherche manuelle."
SELECTED_FLIGHT_TITLE = "Vol sélectionné"

_WEEKDAYS = ["lundi", "mardi", "mercredi", "jeudi", "vendredi", "samedi", "dimanche"]
_MONTHS = [
    "janvier", "février", "mars", "avril", "mai", "juin",
    "juillet", "août", "septembre", "octobre", "novembre", "décembre",
]

_TONES = {
    "info": ("#eff6ff", "#2563eb"),
    "success": ("#ecfdf5", "#10b981"),
    "warning": ("#fef2f2", "#dc2626"),
    "action": ("#fffbeb", "#f59e0b"),
}


@dataclass
class AgencyInfo:
    name: str
    country: str
    phone: str
    email: str
    hours: str

    @classmethod
    def from_settings(cls, settings: Settings) -> "AgencyInfo":
        return cls(
            name=settings.agency_name,
            country=settings.agency_country,
            phone=settings.agency_phone,
            email=settings.agency_email,
            hours=settings.agency_hours,
        )


@dataclass
class RenderedEmail:
    subject: str
    html: str
    text: str
    reply_to: str | None = None


@dataclass
class Section:
    title: str
    rows: list[tuple[str, str]] = field(default_factory=list)
    lines: list[str] = field(default_factory=list)
    tone: str = "info"
    preformatted: str | None = None


def format_date_fr(value: date | None, default: str = "Non spécifiée") -> str:
    """``date(2025, 8, 15)`` -> ``vendredi 15 août 2025``."""
    if value is None:
        return default
    return f"{_WEEKDAYS[value.weekday()]} {value.day} {_MONTHS[value.month - 1]} {value.year}"


def format_datetime_fr(value: str | None) -> str:
    """Provider timestamps (``2025-08-15T10:30:00``) -> ``15/08/2025 à 10:30``."""
    if not value:
        return "N/A"
    try:
        dt = datetime.fromisoformat(value)
    except ValueError:
        return value
    return f"{dt:%d/%m/%Y} à {dt:%H:%M}"


def _yes_no(flag: bool | None) -> str:
    return "Oui" if flag else "Non"


def _stops_label(stops: int) -> str:
    return "Vol direct" if stops == 0 else f"{stops} escale(s)"


def _contact_label(email: str | None, phone: str | None) -> str:
    parts = []
    if email:
        parts.append(f"Email: {email}")
    if phone:
        parts.append(f"Tél: {phone}")
    return " | ".join(parts) or "Non fourni"


def _render_text(heading: str, sections: list[Section], agency: AgencyInfo) -> str:
    out = [heading.upper(), "=" * len(heading), ""]
    for section in sections:
        out.append(f"{section.title.upper()}:")
        out.extend(f"- {label}: {value}" for label, value in section.rows)
        out.extend(section.lines)
        if section.preformatted:
            out.append(section.preformatted)
        out.append("")
    out.extend([agency.name, agency.country, f"Téléphone: {agency.phone}", f"Email: {agency.email}"])
    return "\n".join(out)


def _render_html(heading: str, sections: list[Section], agency: AgencyInfo) -> str:
    e = html.escape
    parts = [
        "<!DOCTYPE html><html><head><meta charset=\"utf-8\">",
        f"<title>{e(heading)} - {e(agency.name)}</title></head>",
        "<body style=\"font-family: Arial, sans-serif; line-height: 1.6; color: #333;\">",
        "<div style=\"max-width: 600px; margin: 0 auto; padding: 20px;\">",
        "<div style=\"background: #2563eb; color: white; padding: 20px; border-radius: 10px 10px 0 0;\">",
        f"<h1>{e(heading)}</h1><p>{e(agency.name)}</p></div>",
    ]
    for section in sections:
        background, accent = _TONES.get(section.tone, _TONES["info"])
        parts.append(
            f"<div style=\"background: {background}; border-left: 4px solid {accent}; "
            f"padding: 15px; margin: 15px 0; border-radius: 8px;\">"
        )
        parts.append(f"<h2 style=\"color: {accent}; margin-top: 0;\">{e(section.title)}</h2>")
        if section.rows:
            parts.append("<table>")
            for label, value in section.rows:
                parts.append(
                    f"<tr><td style=\"font-weight: bold; padding-right: 10px;\">{e(label)}:</td>"
                    f"<td>{e(value)}</td></tr>"
                )
            parts.append("</table>")
        for line in section.lines:
            parts.append(f"<p>{e(line)}</p>")
        if section.preformatted:
            parts.append(f"<pre style=\"font-size: 11px;\">{e(section.preformatted)}</pre>")
        parts.append("</div>")
    parts.append(
        "<div style=\"text-align: center; padding: 20px; color: #64748b;\">"
        f"<p>{e(agency.name)} - {e(agency.country)}</p>"
        f"<p>Téléphone: {e(agency.phone)} | Email: {e(agency.email)}</p>"
        "</div></div></body></html>"
    )
    return "\n".join(parts)


def _compose(
    subject: str,
    heading: str,
    sections: list[Section],
    agency: AgencyInfo,
    *,
    reply_to: str | None = None,
) -> RenderedEmail:
    return RenderedEmail(
        subject=subject,
        html=_render_html(heading, sections, agency),
        text=_render_text(heading, sections, agency),
        reply_to=reply_to,
    )


def _address_label(address: HotelAddress | str | None) -> str:
    if not address:
        return ""
    if isinstance(address, str):
        return address
    parts = [*address.lines, address.postal_code, address.city_name, address.country_code]
    return ", ".join(p for p in parts if p)


def _selected_flight_rows(flight: SelectedFlight) -> list[tuple[str, str]]:
    rows = [
        ("Prix", flight.price.label),
        ("Route", f"{flight.departure.airport} → {flight.arrival.airport}"),
        ("Compagnie", flight.airline or "N/A"),
        ("Escales", _stops_label(flight.stops)),
        ("Durée", flight.duration or "N/A"),
        ("Départ", format_datetime_fr(flight.departure.time)),
        ("Arrivée", format_datetime_fr(flight.arrival.time)),
    ]
    if flight.bookable_seats is not None:
        rows.append(("Places disponibles", str(flight.bookable_seats)))
    if flight.instant_ticketing is not None:
        rows.append(("Réservation instantanée", _yes_no(flight.instant_ticketing)))
    if flight.last_ticketing_date:
        rows.append(("À réserver avant le", flight.last_ticketing_date))
    return rows


def _passengers(adults: int | None, children: int | None, infants: int | None) -> str:
    parts = [f"{adults or 0} adulte(s)"]
    if children:
        parts.append(f"{children} enfant(s)")
    if infants:
        parts.append(f"{infants} bébé(s)")
    return ", ".join(parts)


# Quote request (devis)

def render_quote_request(payload: QuoteRequest, agency: AgencyInfo) -> RenderedEmail:
    trip = [
        ("Ville de départ", payload.departure_city),
        ("Destination", payload.destination),
        ("Date de départ", format_date_fr(payload.departure_date)),
    ]
    if payload.return_date:
        trip.append(("Date de retour", format_date_fr(payload.return_date)))
    else:
        trip.append(("Type de vol", "Aller simple"))
    trip.append(("Nombre de passagers", payload.passengers_label))
    trip.append(("Classe de voyage", payload.travel_class or "Non spécifiée"))
    if payload.preferred_airline:
        trip.append(("Compagnie préférée", payload.preferred_airline))
    if payload.budget:
        trip.append(("Budget approximatif", payload.budget))
    if payload.additional_info:
        trip.append(("Informations supplémentaires", payload.additional_info))

    sections = [
        Section("Informations client", rows=[
            ("Nom complet", payload.full_name),
            ("Téléphone", payload.phone),
            ("Email", payload.email),
        ]),
        Section("Détails du voyage", rows=trip),
        Section("Action requise", tone="action", lines=[
            "Veuillez rechercher les meilleurs tarifs pour ce voyage et contacter le client sous 24h.",
            f"Contact client: {payload.phone} | {payload.email}",
        ]),
    ]
    return _compose(
        f"📋 Nouvelle Demande de Devis - {payload.full_name} vers {payload.destination}",
        "Nouvelle Demande de Devis",
        sections,
        agency,
        reply_to=payload.email,
    )


def render_quote_confirmation(payload: QuoteRequest, agency: AgencyInfo) -> RenderedEmail:
    summary = [
        ("Destination", payload.destination),
        ("Départ", payload.departure_city),
        ("Date de départ", format_date_fr(payload.departure_date)),
    ]
    if payload.return_date:
        summary.append(("Date de retour", format_date_fr(payload.return_date)))
    else:
        summary.append(("Type", "Aller simple"))
    summary.append(("Passagers", payload.passengers_label))

    sections = [
        Section("Bonjour", lines=[
            f"Bonjour {payload.full_name},",
            f"Nous avons bien reçu votre demande de devis pour votre voyage vers {payload.destination}.",
        ]),
        Section("Résumé de votre demande", rows=summary),
        Section("Prochaines étapes", tone="success", lines=[
            "Notre équipe va rechercher les meilleures offres pour votre voyage "
            "et vous contactera sous 24 heures avec:",
            "- les meilleurs tarifs disponibles",
            "- différentes options de compagnies aériennes",
            "- tous les détails de voyage",
            "- des conseils personnalisés",
        ]),
        _contact_section(agency),
    ]
    return _compose(
        f"✅ Confirmation de votre demande de devis - {agency.name}",
        "Demande reçue avec succès",
        sections,
        agency,
        reply_to=agency.email,
    )


def _contact_section(agency: AgencyInfo) -> Section:
    return Section("Nous contacter", tone="success", rows=[
        ("Téléphone", agency.phone),
        ("Email", agency.email),
        ("Horaires", agency.hours),
    ])


# Flight search outcome

def render_flight_search(payload: FlightSearchOutcome, agency: AgencyInfo) -> RenderedEmail:
    sections = [
        Section("Détails de la recherche", rows=[
            ("Départ", payload.origin_location_code),
            ("Destination", payload.destination_location_code),
            ("Date de départ", format_date_fr(payload.departure_date)),
            ("Date de retour", format_date_fr(payload.return_date, default="Aller simple")),
            ("Passagers", _passengers(payload.adults, payload.children, payload.infants)),
            ("Classe", payload.travel_class or "ECONOMY"),
            ("Vol direct uniquement", _yes_no(payload.non_stop)),
            ("Contact", _contact_label(payload.email, payload.phone)),
        ]),
    ]

    if payload.search_error:
        sections.append(Section("Erreur de recherche", tone="warning", lines=[
            payload.search_error,
            ESCALATION_INSTRUCTION,
        ]))
        sections.append(Section("Actions requises", tone="action", lines=[
            "1. Effectuer une recherche manuelle",
            "2. Contacter le client avec des alternatives",
            "3. Proposer des options similaires",
        ]))
    elif payload.selected_flight:
        sections.append(Section(
            SELECTED_FLIGHT_TITLE, tone="success", rows=_selected_flight_rows(payload.selected_flight)
        ))
        sections.append(Section("Actions requises", tone="action", lines=[
            "1. Vérifier la disponibilité et le prix",
            "2. Contacter le client pour confirmer",
            "3. Procéder à la réservation rapidement",
            "4. Envoyer la confirmation de réservation",
        ]))
    else:
        sections.append(Section("Résultat", tone="warning", lines=[
            "Aucun vol trouvé pour ces critères.",
            ESCALATION_INSTRUCTION,
        ]))

    return _compose(
        f"✈️ Nouvelle recherche de vol - {payload.origin_location_code} → "
        f"{payload.destination_location_code}",
        "Nouvelle Recherche de Vol",
        sections,
        agency,
        reply_to=payload.email,
    )


# Hotel search outcome

def render_hotel_search(payload: HotelSearchOutcome, agency: AgencyInfo) -> RenderedEmail:
    sections = [
        Section("Détails de la recherche", rows=[
            ("Pays", payload.country),
            ("Ville", payload.city),
            ("Budget par nuit", f"{payload.budget:g} EUR"),
            ("Numéro de téléphone", payload.phone),
            ("Date d'arrivée", format_date_fr(payload.check_in_date)),
            ("Date de départ", format_date_fr(payload.check_out_date)),
            ("Nombre d'adultes", str(payload.adults) if payload.adults else "Non spécifié"),
            ("Rayon de recherche", f"{payload.radius} km" if payload.radius else "Non spécifié"),
        ]),
    ]

    if payload.search_error:
        sections.append(Section("Erreur de recherche", tone="warning", lines=[
            payload.search_error,
            ESCALATION_INSTRUCTION,
            f"Téléphone du client: {payload.phone}",
        ]))
    elif payload.found_hotels:
        lines = []
        for hotel in payload.found_hotels:
            details = [hotel.name]
            address = _address_label(hotel.address)
            if address:
                details.append(f"Adresse: {address}")
            if hotel.rating:
                details.append(f"Note: {hotel.rating:g}/5")
            if hotel.distance and "value" in hotel.distance:
                details.append(f"Distance: {hotel.distance['value']} {hotel.distance.get('unit', '')}".rstrip())
            lines.append(" | ".join(details))
        sections.append(Section(
            f"Hôtels trouvés ({len(payload.found_hotels)})", tone="success", lines=lines
        ))
        sections.append(Section("Actions requises", tone="action", lines=[
            "1. Vérifier les disponibilités des hôtels",
            "2. Contacter le client avec les meilleures options",
            "3. Proposer des alternatives si nécessaire",
            "4. Préparer un devis personnalisé",
        ]))
    else:
        sections.append(Section("Résultat", tone="warning", lines=[
            "Aucun hôtel trouvé pour ces critères.",
            ESCALATION_INSTRUCTION,
        ]))

    return _compose(
        f"🏨 Nouvelle recherche d'hôtel - {payload.city}, {payload.country}",
        "Nouvelle Recherche d'Hôtel",
        sections,
        agency,
    )


# Flight booking request (team)

def render_flight_booking(payload: FlightBookingRequest, agency: AgencyInfo) -> RenderedEmail:
    search = payload.search_data
    offer = payload.selected_offer
    contact = payload.contact_info

    origin = (search.origin_location_code or "").upper()
    destination = (search.destination_location_code or "").upper()

    sections = [
        Section("Informations client", rows=[
            ("Email", contact.email or "Non fourni"),
            ("Téléphone", contact.phone or "Non fourni"),
        ]),
        Section("Détails de recherche", rows=[
            ("Départ", origin),
            ("Destination", destination),
            ("Date de départ", format_date_fr(search.departure_date)),
            ("Date de retour", format_date_fr(search.return_date, default="Aller simple")),
            ("Passagers", _passengers(search.adults, search.children, search.infants)),
            ("Classe", search.travel_class.value if search.travel_class else "ECONOMY"),
            ("Vols directs seulement", _yes_no(search.non_stop)),
        ]),
        Section(SELECTED_FLIGHT_TITLE, tone="success", rows=[
            ("ID Amadeus", offer.id or "N/A"),
            ("Prix affiché au client", offer.price.label),
            ("Prix réel API", f"{offer.price.total:.2f} {offer.price.currency}"),
            *_selected_flight_rows(offer)[2:],
        ]),
    ]
    if offer.raw_offer:
        sections.append(Section(
            "Données complètes Amadeus",
            preformatted=json.dumps(offer.raw_offer, indent=2, ensure_ascii=False),
        ))

    return _compose(
        f"🛫 Nouvelle demande de vol - {origin} → {destination}",
        "Nouvelle Demande de Réservation de Vol",
        sections,
        agency,
        reply_to=contact.email,
    )


def render_flight_booking_confirmation(
    payload: FlightBookingRequest, agency: AgencyInfo
) -> RenderedEmail:
    search = payload.search_data
    origin = (search.origin_location_code or "").upper()
    destination = (search.destination_location_code or "").upper()
    sections = [
        Section("Bonjour", lines=[
            "Bonjour,",
            "Nous avons bien reçu votre demande de réservation de vol.",
        ]),
        Section("Détails de votre recherche", rows=[
            ("Trajet", f"{origin} → {destination}"),
            ("Date de départ", format_date_fr(search.departure_date)),
            ("Prix", payload.selected_offer.price.label),
        ]),
        Section("Prochaines étapes", tone="success", lines=[
            "Notre équipe vous contactera dans les plus brefs délais pour finaliser votre réservation.",
            "Merci de votre confiance,",
            f"L'équipe {agency.name}",
        ]),
        _contact_section(agency),
    ]
    return _compose(
        f"Confirmation de votre demande de vol - {agency.name}",
        "Demande de vol reçue",
        sections,
        agency,
        reply_to=agency.email,
    )


# Car rental

def render_car_rental(payload: CarRentalRequest, agency: AgencyInfo) -> RenderedEmail:
    days = payload.estimated_days
    total = payload.total_budget
    sections = [
        Section("Détails de la demande", rows=[
            ("Marque", payload.brand),
            ("Modèle", payload.model),
            ("Budget par jour", f"{payload.budget_per_day:g} EUR"),
            ("Numéro de téléphone", payload.phone),
            ("Lieu de prise en charge", payload.location or "Non spécifié"),
            ("Date de début", format_date_fr(payload.start_date)),
            ("Date de fin", format_date_fr(payload.end_date)),
            ("Âge du conducteur", f"{payload.driver_age} ans" if payload.driver_age else "Non spécifié"),
        ]),
        Section("Informations supplémentaires", rows=[
            ("Durée estimée", f"{days} jours" if days is not None else "Non spécifiée"),
            ("Budget total estimé", f"{total:g} EUR" if total is not None else "À calculer"),
        ]),
        Section("Actions requises", tone="action", lines=[
            "1. Vérifier la disponibilité du véhicule",
            f"2. Contacter le client au {payload.phone}",
            "3. Confirmer le prix et les conditions",
            "4. Préparer le contrat de location",
        ]),
    ]
    if payload.requested_at:
        sections[1].rows.append(("Demande reçue le", f"{payload.requested_at:%d/%m/%Y %H:%M}"))

    return _compose(
        f"🚗 Nouvelle demande de location - {payload.brand} {payload.model}",
        "Nouvelle Demande de Location",
        sections,
        agency,
    )
