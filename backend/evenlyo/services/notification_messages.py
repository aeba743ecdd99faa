"""Bilingual notification texts for booking lifecycle events."""

from typing import Any, Dict, Tuple

from ..domain.multilingual import MultilingualText

# event -> (english, dutch); placeholders are filled with str.format
_MESSAGES: Dict[str, Tuple[str, str]] = {
    "booking_requested": (
        'New booking request from {client} for "{title}" on {dates}. Tracking ID: {tracking_id}',
        'Nieuwe boekingsaanvraag van {client} voor "{title}" op {dates}. Tracking-ID: {tracking_id}',
    ),
    "booking_accepted": (
        'Your booking {tracking_id} for "{title}" has been accepted.',
        'Je boeking {tracking_id} voor "{title}" is geaccepteerd.',
    ),
    "booking_rejected": (
        'Your booking {tracking_id} for "{title}" has been rejected. Reason: {reason}',
        'Je boeking {tracking_id} voor "{title}" is afgewezen. Reden: {reason}',
    ),
    "booking_paid": (
        "A client has paid for booking {tracking_id}.",
        "Een klant heeft betaald voor boeking {tracking_id}.",
    ),
    "booking_cancelled": (
        "Booking {tracking_id} has been cancelled by the client.",
        "Boeking {tracking_id} is geannuleerd door de klant.",
    ),
    "booking_on_the_way": (
        "Your booking {tracking_id} is on the way.",
        "Je boeking {tracking_id} is onderweg.",
    ),
    "booking_received": (
        "The client confirmed receipt of booking {tracking_id}.",
        "De klant heeft de ontvangst van boeking {tracking_id} bevestigd.",
    ),
    "booking_picked_up": (
        "The items for booking {tracking_id} have been picked up.",
        "De items van boeking {tracking_id} zijn opgehaald.",
    ),
    "booking_finished": (
        "Booking {tracking_id} has been marked as finished by the client.",
        "Boeking {tracking_id} is door de klant als afgerond gemarkeerd.",
    ),
    "booking_completed": (
        "Booking {tracking_id} has been completed.",
        "Boeking {tracking_id} is voltooid.",
    ),
    "booking_claimed": (
        "A claim ({claim_type}) was filed for booking {tracking_id}: {reason}",
        "Er is een claim ({claim_type}) ingediend voor boeking {tracking_id}: {reason}",
    ),
    "vendor_claim": (
        "The vendor filed a damage claim for booking {tracking_id}: {reason}",
        "De verhuurder heeft een schadeclaim ingediend voor boeking {tracking_id}: {reason}",
    ),
    "booking_reviewed": (
        "Booking {tracking_id} received a {rating}-star review.",
        "Boeking {tracking_id} heeft een beoordeling van {rating} sterren ontvangen.",
    ),
    "booking_status_forced": (
        "An admin changed the status of booking {tracking_id} to {status}.",
        "Een beheerder heeft de status van boeking {tracking_id} gewijzigd naar {status}.",
    ),
    "cancelled_non_payment": (
        "Booking against {tracking_id} has been cancelled due to non-payment",
        "Boeking {tracking_id} is geannuleerd wegens niet-betaling",
    ),
}

DEFAULT_CANCEL_NOTES = MultilingualText.pair(
    "Booking cancelled by client", "Boeking geannuleerd door klant"
)


def booking_message(event: str, **context: Any) -> MultilingualText:
    english, dutch = _MESSAGES[event]
    return MultilingualText.pair(english.format(**context), dutch.format(**context))
