from enum import Enum


class WorkflowActions(str, Enum):
    EMAIL_HOST = "EMAIL_HOST"
    EMAIL_ATTENDEE = "EMAIL_ATTENDEE"
    EMAIL_ADDRESS = "EMAIL_ADDRESS"
    SMS_ATTENDEE = "SMS_ATTENDEE"
    SMS_NUMBER = "SMS_NUMBER"
    WHATSAPP_ATTENDEE = "WHATSAPP_ATTENDEE"
    WHATSAPP_NUMBER = "WHATSAPP_NUMBER"


ATTENDEE_ACTIONS = {
    WorkflowActions.EMAIL_ATTENDEE,
    WorkflowActions.SMS_ATTENDEE,
    WorkflowActions.WHATSAPP_ATTENDEE,
}


def _coerce(action) -> WorkflowActions | None:
    try:
        return WorkflowActions(action)
    except ValueError:
        return None


def is_attendee_action(action) -> bool:
    return _coerce(action) in ATTENDEE_ACTIONS
