"""
MJML Email Templates
All email templates using MJML for responsive, cross-client compatibility
"""

from typing import Optional

from .config import WEBAPP_URL
from .shared.sanitization import sanitize_string

THEME = {
    "primary": "#111827",
    "background": "#f9fafb",
    "text_primary": "#111827",
    "text_secondary": "#374151",
    "text_muted": "#6b7280",
    "border": "#e5e7eb",
    "warning": "#f59e0b",
    "danger": "#ef4444",
}


def get_base_template(
    title: str,
    preview_text: str,
    content_sections: str,
    cta_url: Optional[str] = None,
    cta_label: Optional[str] = None,
) -> str:
    """Base MJML template wrapper for all emails"""

    cta_section = ""
    if cta_url and cta_label:
        cta_section = f"""
        <mj-section padding="20px 0">
          <mj-column>
            <mj-button
              href="{cta_url}"
              background-color="{THEME['primary']}"
              color="#ffffff"
              font-weight="600"
              border-radius="6px"
              padding="16px 32px"
              font-size="15px">
              {cta_label}
            </mj-button>
          </mj-column>
        </mj-section>
        """

    return f"""
    <mjml>
      <mj-head>
        <mj-title>{title}</mj-title>
        <mj-preview>{preview_text}</mj-preview>
        <mj-attributes>
          <mj-all font-family="-apple-system, BlinkMacSystemFont, 'Segoe UI', 'Helvetica Neue', Arial, sans-serif" />
          <mj-text font-size="16px" line-height="1.6" color="{THEME['text_secondary']}" />
        </mj-attributes>
      </mj-head>
      <mj-body background-color="{THEME['background']}">
        <mj-section background-color="#ffffff" padding="40px 40px 48px 40px">
          <mj-column>
            <mj-text font-size="22px" font-weight="600" color="{THEME['text_primary']}" line-height="1.3" padding="0 0 16px 0">
              {title}
            </mj-text>

            {content_sections}
          </mj-column>
        </mj-section>

        {cta_section}

        <mj-section padding="24px 20px">
          <mj-column>
            <mj-text align="center" font-size="13px" color="{THEME['text_muted']}" padding="0">
              Sent by Bookline
            </mj-text>
          </mj-column>
        </mj-section>
      </mj-body>
    </mjml>
    """


def sms_limit_reached_template(t, user_name: str, team_name: str) -> str:
    """Team used every free SMS credit of the month"""
    user_name, team_name = sanitize_string(user_name or ""), sanitize_string(team_name)
    content = f"""
    <mj-text>
      {t("sms_limit_reached_body", name=user_name, team=team_name)}
    </mj-text>
    """

    return get_base_template(
        title=t("sms_limit_reached_subject", team=team_name),
        preview_text=t("sms_limit_reached_subject", team=team_name),
        content_sections=content,
        cta_url=f"{WEBAPP_URL}/settings/billing",
        cta_label=t("manage_billing"),
    )


def sms_limit_almost_reached_template(t, user_name: str, team_name: str) -> str:
    """Team crossed the 80% warning threshold"""
    user_name, team_name = sanitize_string(user_name or ""), sanitize_string(team_name)
    content = f"""
    <mj-text>
      {t("sms_limit_almost_reached_body", name=user_name, team=team_name)}
    </mj-text>
    """

    return get_base_template(
        title=t("sms_limit_almost_reached_subject", team=team_name),
        preview_text=t("sms_limit_almost_reached_subject", team=team_name),
        content_sections=content,
        cta_url=f"{WEBAPP_URL}/settings/billing",
        cta_label=t("manage_billing"),
    )


def booking_cancelled_template(
    t, title: str, start: str, organizer_name: str, cancellation_reason: Optional[str]
) -> str:
    title, start, organizer_name = (sanitize_string(v or "") for v in (title, start, organizer_name))
    reason_section = ""
    if cancellation_reason:
        reason_section = f"""
        <mj-text color="{THEME['text_muted']}" padding="16px 0 0 0">
          {t("cancellation_reason")}: {sanitize_string(cancellation_reason)}
        </mj-text>
        """

    content = f"""
    <mj-text>
      {t("event_request_cancelled")}
    </mj-text>
    <mj-divider border-color="{THEME['border']}" border-width="1px" padding="16px 0" />
    <mj-text>
      <strong>{title}</strong><br/>
      {start}<br/>
      {organizer_name}
    </mj-text>
    {reason_section}
    """

    return get_base_template(
        title=t("event_cancelled_subject", title=title),
        preview_text=t("event_request_cancelled"),
        content_sections=content,
    )
