"""
Email Service using Resend
Compiles MJML templates to HTML and delivers vendor/admin notifications.

The ``notify_*`` helpers are meant for FastAPI background tasks: delivery
problems are logged and never reach the request that triggered them.
"""

import logging
from datetime import date
from typing import Optional, Union

import resend
from mjml import mjml_to_html

from .config import (
    ADMIN_NOTIFICATION_EMAIL,
    CONFIRMATION_TOKEN_TTL_HOURS,
    EMAIL_FROM_ADDRESS,
    FRONTEND_URL,
    RESEND_API_KEY,
)
from .email_templates import (
    booking_approved_template,
    booking_rejected_template,
    contract_cancelled_template,
    opening_date_changed_template,
    pending_booking_admin_template,
    vendor_confirmation_template,
)

logger = logging.getLogger(__name__)

resend.api_key = RESEND_API_KEY


class EmailDeliveryError(Exception):
    """Raised by send_email when a message could not be handed to the provider"""


def compile_mjml_to_html(mjml_content: str) -> str:
    """Compile MJML template to production-ready HTML"""
    try:
        result = mjml_to_html(mjml_content)
    except Exception as e:
        logger.error(f"MJML compilation error: {e}")
        raise EmailDeliveryError(f"Failed to compile MJML template: {e}") from e

    # mjml returns a result object (attribute access) or a dict depending on version
    errors = getattr(result, "errors", None) if not isinstance(result, dict) else result.get("errors")
    if errors:
        logger.warning(f"MJML compilation warnings: {errors}")
    if isinstance(result, dict):
        return result.get("html", "")
    return getattr(result, "html", str(result))


async def send_email(to: Union[str, list[str]], subject: str, mjml_content: str) -> dict:
    """
    Send an email via Resend

    Args:
        to: Recipient email(s)
        subject: Email subject line
        mjml_content: MJML template content (will be compiled to HTML)

    Raises:
        EmailDeliveryError: No API key configured or the provider rejected the message
    """
    if not RESEND_API_KEY:
        raise EmailDeliveryError("Email service not configured - RESEND_API_KEY missing")

    html_content = compile_mjml_to_html(mjml_content)
    recipients = [to] if isinstance(to, str) else to

    try:
        logger.info(f"📧 Sending email via Resend to: {recipients}")
        response = resend.Emails.send(
            {
                "from": EMAIL_FROM_ADDRESS,
                "to": recipients,
                "subject": subject,
                "html": html_content,
            }
        )
        logger.info(f"✅ Email sent successfully via Resend: {response}")
        return response
    except Exception as e:
        raise EmailDeliveryError(f"Failed to send email to {recipients}: {e}") from e


async def _deliver(to: str, subject: str, mjml_content: str) -> Optional[dict]:
    try:
        return await send_email(to=to, subject=subject, mjml_content=mjml_content)
    except EmailDeliveryError as e:
        logger.error(f"❌ Email '{subject}' to {to} not delivered: {e}")
        return None


# ============================================
# Notifications (fire-and-forget)
# ============================================


def build_confirmation_url(token: str) -> str:
    return f"{FRONTEND_URL.rstrip('/')}/vendor/confirm-email?token={token}"


async def notify_vendor_confirmation(
    to: str,
    vendor_name: str,
    token: str,
    package_name: str,
    monthly_price: float,
    rental_duration: int,
) -> Optional[dict]:
    """Send the email-confirmation link after registration"""
    mjml_content = vendor_confirmation_template(
        vendor_name=vendor_name,
        confirm_url=build_confirmation_url(token),
        package_name=package_name,
        monthly_price=monthly_price,
        rental_duration=rental_duration,
        expires_in_hours=CONFIRMATION_TOKEN_TTL_HOURS,
    )
    return await _deliver(to, "Bitte bestätigen Sie Ihre E-Mail-Adresse - housnkuh", mjml_content)


async def notify_admin_pending_booking(vendor_name: str, vendor_email: str, package_name: str) -> Optional[dict]:
    """Tell the shop admin that a confirmed booking request awaits approval"""
    if not ADMIN_NOTIFICATION_EMAIL:
        logger.info("ADMIN_NOTIFICATION_EMAIL not set, skipping admin notification")
        return None
    mjml_content = pending_booking_admin_template(vendor_name, vendor_email, package_name)
    return await _deliver(ADMIN_NOTIFICATION_EMAIL, f"Neue Buchungsanfrage von {vendor_name}", mjml_content)


async def notify_booking_approved(
    to: str,
    vendor_name: str,
    unit_labels: list[str],
    start_date: date,
    end_date: date,
    payable_from: date,
    monthly_price: float,
    trial_ends_on: Optional[date] = None,
) -> Optional[dict]:
    mjml_content = booking_approved_template(
        vendor_name=vendor_name,
        unit_labels=unit_labels,
        start_date=start_date,
        end_date=end_date,
        payable_from=payable_from,
        monthly_price=monthly_price,
        trial_ends_on=trial_ends_on,
    )
    return await _deliver(to, "Ihre Buchung wurde bestätigt - housnkuh", mjml_content)


async def notify_booking_rejected(to: str, vendor_name: str, reason: Optional[str] = None) -> Optional[dict]:
    mjml_content = booking_rejected_template(vendor_name, reason)
    return await _deliver(to, "Ihre Buchungsanfrage - housnkuh", mjml_content)


async def notify_opening_date_changed(
    to: str, vendor_name: str, new_date: date, old_date: Optional[date] = None
) -> Optional[dict]:
    mjml_content = opening_date_changed_template(vendor_name, new_date, old_date)
    return await _deliver(to, "Neues Eröffnungsdatum - housnkuh", mjml_content)


async def notify_contract_cancelled(
    to: str, vendor_name: str, contract_id: int, cancelled_at: date, trial_cancellation: bool = False
) -> Optional[dict]:
    mjml_content = contract_cancelled_template(vendor_name, contract_id, cancelled_at, trial_cancellation)
    return await _deliver(to, f"Vertrag #{contract_id} gekündigt - housnkuh", mjml_content)
