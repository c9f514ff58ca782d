"""
Minimal translation catalogue for server-rendered messages (emails, API errors).
Unknown locales fall back to English; unknown keys render as the key itself.
"""

from typing import Callable

TRANSLATIONS: dict[str, dict[str, dict[str, str]]] = {
    "en": {
        "common": {
            "sms_limit_reached_subject": "Your team {team} has used all its SMS credits",
            "sms_limit_reached_body": (
                "Hi {name}, your team {team} used all SMS credits included for this month. "
                "Scheduled SMS reminders to attendees will be sent as emails instead."
            ),
            "sms_limit_almost_reached_subject": "Your team {team} is running low on SMS credits",
            "sms_limit_almost_reached_body": (
                "Hi {name}, your team {team} has used more than 80% of its SMS credits for this month."
            ),
            "event_cancelled_subject": "Cancelled: {title}",
            "event_request_cancelled": "Your scheduled event was cancelled",
            "cancellation_reason": "Reason for cancellation",
            "booking_already_cancelled": "This booking has already been cancelled",
            "booking_cancelled": "Booking cancelled successfully",
            "error_with_status_code_occured": "An error with status code {status} occurred.",
            "please_try_again": "Please try again.",
            "cancellation_reason_required": "A cancellation reason is required when the host cancels",
            "manage_billing": "Manage billing",
        }
    },
    "es": {
        "common": {
            "sms_limit_reached_subject": "Tu equipo {team} ha usado todos sus créditos de SMS",
            "sms_limit_reached_body": (
                "Hola {name}, tu equipo {team} ha usado todos los créditos de SMS de este mes. "
                "Los recordatorios por SMS a los asistentes se enviarán por correo."
            ),
            "sms_limit_almost_reached_subject": "Tu equipo {team} se está quedando sin créditos de SMS",
            "sms_limit_almost_reached_body": (
                "Hola {name}, tu equipo {team} ha usado más del 80% de sus créditos de SMS este mes."
            ),
            "event_cancelled_subject": "Cancelado: {title}",
            "event_request_cancelled": "Tu evento programado fue cancelado",
            "cancellation_reason": "Motivo de la cancelación",
            "booking_already_cancelled": "Esta reserva ya ha sido cancelada",
            "booking_cancelled": "Reserva cancelada correctamente",
            "error_with_status_code_occured": "Se produjo un error con el código de estado {status}.",
            "please_try_again": "Por favor, inténtalo de nuevo.",
            "manage_billing": "Gestionar facturación",
        }
    },
    "de": {
        "common": {
            "sms_limit_reached_subject": "Dein Team {team} hat alle SMS-Guthaben verbraucht",
            "sms_limit_almost_reached_subject": "Das SMS-Guthaben von {team} ist fast aufgebraucht",
            "event_cancelled_subject": "Abgesagt: {title}",
            "event_request_cancelled": "Dein geplanter Termin wurde abgesagt",
            "cancellation_reason": "Grund der Absage",
            "booking_already_cancelled": "Diese Buchung wurde bereits storniert",
            "please_try_again": "Bitte versuche es erneut.",
        }
    },
}

DEFAULT_LOCALE = "en"

Translator = Callable[..., str]


def get_translation(locale: str, namespace: str = "common") -> Translator:
    """Return a translate function ``t(key, **params)`` for a locale"""
    language = (locale or DEFAULT_LOCALE).split("-")[0].lower()
    catalogue = TRANSLATIONS.get(language, {}).get(namespace, {})
    fallback = TRANSLATIONS[DEFAULT_LOCALE].get(namespace, {})

    def t(key: str, **params) -> str:
        template = catalogue.get(key) or fallback.get(key) or key
        try:
            return template.format(**params)
        except KeyError:
            return template

    return t
