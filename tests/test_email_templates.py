"""Tests for the MJML email templates."""

from bookline.email_templates import booking_cancelled_template, sms_limit_reached_template
from bookline.i18n import get_translation

t = get_translation("en")


def test_cancellation_reason_is_escaped():
    mjml = booking_cancelled_template(
        t, "Call", "2030-01-07T09:00:00.000Z", "Host", "<a href='http://evil'>click</a>"
    )

    assert "<a href=" not in mjml
    assert "&lt;a href=&#x27;http://evil&#x27;&gt;click&lt;/a&gt;" in mjml


def test_booking_fields_are_escaped():
    mjml = booking_cancelled_template(t, "<b>Call</b>", "2030-01-07", "<script>x</script>", None)

    assert "<script>" not in mjml
    assert "&lt;b&gt;Call&lt;/b&gt;" in mjml
    assert t("cancellation_reason") not in mjml


def test_team_and_member_names_are_escaped():
    mjml = sms_limit_reached_template(t, "<i>Ann</i>", "Acme <img src=x>")

    assert "<img" not in mjml
    assert "<i>Ann" not in mjml
    assert "Acme &lt;img src=x&gt;" in mjml
