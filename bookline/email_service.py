"""
Email Service using Resend
Provides email functionality using MJML templates for responsive design
"""

import logging
from typing import Optional, Union

import resend
from mjml import mjml_to_html

from .config import EMAIL_FROM_ADDRESS, RESEND_API_KEY
from .email_templates import (
    booking_cancelled_template,
    sms_limit_almost_reached_template,
    sms_limit_reached_template,
)
from .i18n import get_translation

logger = logging.getLogger(__name__)

resend.api_key = RESEND_API_KEY


class EmailNotConfiguredError(RuntimeError):
    pass


def compile_mjml_to_html(mjml_content: str) -> str:
    """Compile MJML template to production-ready HTML"""
    result = mjml_to_html(mjml_content)
    # Newer mjml releases return an object with .html/.errors, older ones a dict
    errors = getattr(result, "errors", None) if not isinstance(result, dict) else result.get("errors")
    if errors:
        logger.warning(f"MJML compilation warnings: {errors}")
    if isinstance(result, dict):
        return result.get("html", "")
    return getattr(result, "html", str(result))


async def send_email(
    to: Union[str, list[str]],
    subject: str,
    mjml_content: str,
    from_address: Optional[str] = None,
) -> dict:
    """
    Send an email through Resend

    Args:
        to: Recipient email(s)
        subject: Email subject line
        mjml_content: MJML template content (will be compiled to HTML)
        from_address: Optional custom from address

    Returns:
        Send response dict
    """
    if not RESEND_API_KEY:
        logger.error("❌ No email service configured - RESEND_API_KEY missing")
        raise EmailNotConfiguredError("Email service not configured")

    html_content = compile_mjml_to_html(mjml_content)
    recipients = [to] if isinstance(to, str) else to

    logger.info(f"📧 Sending email via Resend to: {recipients}")
    response = resend.Emails.send(
        {
            "from": from_address or EMAIL_FROM_ADDRESS,
            "to": recipients,
            "subject": subject,
            "html": html_content,
        }
    )
    logger.info(f"✅ Email sent successfully via Resend: {response}")
    return response


async def send_sms_limit_reached_emails(team: dict, owners_and_admins: list[dict]) -> None:
    """Tell team owners and admins that SMS credits are used up for the month"""
    for member in owners_and_admins:
        t = member["t"]
        await send_email(
            to=member["email"],
            subject=t("sms_limit_reached_subject", team=team["name"]),
            mjml_content=sms_limit_reached_template(t, member.get("name"), team["name"]),
        )
    logger.info(f"📨 SMS limit reached emails sent for team {team['id']}")


async def send_sms_limit_almost_reached_emails(team: dict, owners_and_admins: list[dict]) -> None:
    """Warn team owners and admins that 80% of the SMS credits are used"""
    for member in owners_and_admins:
        t = member["t"]
        await send_email(
            to=member["email"],
            subject=t("sms_limit_almost_reached_subject", team=team["name"]),
            mjml_content=sms_limit_almost_reached_template(t, member.get("name"), team["name"]),
        )
    logger.info(f"📨 SMS limit warning emails sent for team {team['id']}")


async def send_cancelled_emails(
    title: str,
    start: str,
    organizer: dict,
    attendees: list[dict],
    cancellation_reason: Optional[str] = None,
) -> None:
    """Send the cancellation notice to every attendee and to the organizer"""
    recipients = [*attendees, organizer]
    for person in recipients:
        if not person.get("email"):
            continue
        t = get_translation(person.get("locale") or "en", "common")
        await send_email(
            to=person["email"],
            subject=t("event_cancelled_subject", title=title),
            mjml_content=booking_cancelled_template(
                t, title, start, organizer.get("name") or "", cancellation_reason
            ),
        )
