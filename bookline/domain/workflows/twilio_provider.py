"""
Twilio SMS Provider
Sends, schedules and cancels workflow reminder messages through the Twilio REST API
"""

import logging
from datetime import datetime
from typing import Optional

import httpx

from ...config import TWILIO_MESSAGING_SID, TWILIO_PHONE_NUMBER, TWILIO_SID, TWILIO_TOKEN
from ...shared.dates import as_utc
from ...shared.validators import normalize_e164

logger = logging.getLogger(__name__)

TWILIO_API_BASE = "https://api.twilio.com/2010-04-01"
TWILIO_LOOKUP_BASE = "https://lookups.twilio.com/v2/PhoneNumbers"
REQUEST_TIMEOUT = 10.0


class TwilioError(Exception):
    """Raised when Twilio rejects a request or is unreachable"""

    def __init__(self, message: str, code: Optional[int] = None, status_code: Optional[int] = None):
        super().__init__(f"[{code}] {message}" if code else message)
        self.message = message
        self.code = code
        self.status_code = status_code


def _credentials() -> tuple[str, str]:
    if not TWILIO_SID or not TWILIO_TOKEN:
        raise TwilioError("Twilio credentials are not configured")
    return TWILIO_SID, TWILIO_TOKEN


def _raise_for_response(response: httpx.Response) -> None:
    if response.status_code in (200, 201, 204):
        return
    try:
        error_data = response.json()
    except ValueError:
        error_data = {}
    error_message = error_data.get("message", f"HTTP {response.status_code}")
    error_code = error_data.get("code")
    logger.error(f"❌ Twilio API error [{error_code}]: {error_message}")
    raise TwilioError(error_message, code=error_code, status_code=response.status_code)


def _to_e164(phone_number: str) -> str:
    try:
        normalized = normalize_e164(phone_number)
    except ValueError as e:
        raise TwilioError(str(e), status_code=400) from e
    if not normalized:
        raise TwilioError("Phone number is required", status_code=400)
    return normalized


def _sender_fields(whatsapp: bool) -> dict:
    if TWILIO_MESSAGING_SID and not whatsapp:
        return {"MessagingServiceSid": TWILIO_MESSAGING_SID}
    sender = TWILIO_PHONE_NUMBER or ""
    return {"From": f"whatsapp:{sender}" if whatsapp else sender}


async def get_country_code(phone_number: str) -> str:
    """Two-letter country code of a phone number, via Twilio Lookup"""
    account_sid, auth_token = _credentials()
    phone_number = _to_e164(phone_number)
    try:
        async with httpx.AsyncClient() as client:
            response = await client.get(
                f"{TWILIO_LOOKUP_BASE}/{phone_number}",
                auth=(account_sid, auth_token),
                timeout=REQUEST_TIMEOUT,
            )
    except httpx.HTTPError as e:
        logger.error(f"Twilio lookup error: {str(e)}")
        raise TwilioError(f"Connection error: {str(e)}") from e

    _raise_for_response(response)
    return response.json().get("country_code") or ""


async def send_sms(phone_number: str, body: str, whatsapp: bool = False) -> str:
    """Send a message immediately; returns the Twilio message SID"""
    account_sid, auth_token = _credentials()
    to = _to_e164(phone_number)
    data = {"To": f"whatsapp:{to}" if whatsapp else to, "Body": body, **_sender_fields(whatsapp)}

    logger.info(f"🚀 Sending SMS to Twilio API for {to}")
    try:
        async with httpx.AsyncClient() as client:
            response = await client.post(
                f"{TWILIO_API_BASE}/Accounts/{account_sid}/Messages.json",
                auth=(account_sid, auth_token),
                data=data,
                timeout=REQUEST_TIMEOUT,
            )
    except httpx.HTTPError as e:
        logger.error(f"Twilio API error: {str(e)}")
        raise TwilioError(f"Connection error: {str(e)}") from e

    _raise_for_response(response)
    message_sid = response.json().get("sid")
    logger.info(f"✅ SMS sent successfully to {to} (SID: {message_sid})")
    return message_sid


async def schedule_sms(
    phone_number: str, body: str, send_at: datetime, whatsapp: bool = False
) -> str:
    """Schedule a message with Twilio; requires a messaging service"""
    account_sid, auth_token = _credentials()
    if not TWILIO_MESSAGING_SID:
        raise TwilioError("Scheduling requires TWILIO_MESSAGING_SID")

    to = _to_e164(phone_number)
    data = {
        "To": f"whatsapp:{to}" if whatsapp else to,
        "Body": body,
        "MessagingServiceSid": TWILIO_MESSAGING_SID,
        "ScheduleType": "fixed",
        "SendAt": as_utc(send_at).strftime("%Y-%m-%dT%H:%M:%SZ"),
    }
    try:
        async with httpx.AsyncClient() as client:
            response = await client.post(
                f"{TWILIO_API_BASE}/Accounts/{account_sid}/Messages.json",
                auth=(account_sid, auth_token),
                data=data,
                timeout=REQUEST_TIMEOUT,
            )
    except httpx.HTTPError as e:
        logger.error(f"Twilio API error: {str(e)}")
        raise TwilioError(f"Connection error: {str(e)}") from e

    _raise_for_response(response)
    message_sid = response.json().get("sid")
    logger.info(f"🗓️ SMS scheduled for {data['SendAt']} (SID: {message_sid})")
    return message_sid


async def cancel_sms(reference_id: str) -> None:
    """Cancel a scheduled message by its SID"""
    account_sid, auth_token = _credentials()
    try:
        async with httpx.AsyncClient() as client:
            response = await client.post(
                f"{TWILIO_API_BASE}/Accounts/{account_sid}/Messages/{reference_id}.json",
                auth=(account_sid, auth_token),
                data={"Status": "canceled"},
                timeout=REQUEST_TIMEOUT,
            )
    except httpx.HTTPError as e:
        logger.error(f"Twilio API error: {str(e)}")
        raise TwilioError(f"Connection error: {str(e)}") from e

    _raise_for_response(response)
    logger.info(f"🛑 Scheduled SMS {reference_id} cancelled")
