"""
MJML Email Templates
Vendor and admin notifications for registration, approval and store opening
"""

from datetime import date
from typing import Optional

# housnkuh brand colors - warm green / cream
THEME = {
    "primary": "#09122c",
    "accent": "#e17564",
    "background": "#f7f4ed",
    "card_bg": "#ffffff",
    "text_primary": "#09122c",
    "text_secondary": "#374151",
    "text_muted": "#6b7280",
    "border": "#e5e7eb",
    "success": "#16a34a",
    "warning": "#f59e0b",
    "danger": "#dc2626",
}

LOGO_URL = "https://housnkuh.de/logo.png"


def format_date(value: Optional[date]) -> str:
    """German date format used across all vendor emails"""
    return value.strftime("%d.%m.%Y") if value else "-"


def format_euro(amount: float) -> str:
    return f"{amount:.2f} €".replace(".", ",")


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
              background-color="{THEME['accent']}"
              color="#ffffff"
              font-weight="600"
              border-radius="8px"
              padding="18px 40px"
              font-size="16px">
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
          <mj-all font-family="'Helvetica Neue', Arial, sans-serif" />
          <mj-text font-size="16px" line-height="1.6" color="{THEME['text_secondary']}" />
        </mj-attributes>
      </mj-head>
      <mj-body background-color="{THEME['background']}">
        <mj-section background-color="{THEME['card_bg']}" padding="32px 20px">
          <mj-column>
            <mj-image src="{LOGO_URL}" alt="housnkuh" width="140px" href="https://housnkuh.de" padding="0" />
          </mj-column>
        </mj-section>

        <mj-section background-color="{THEME['card_bg']}" padding="0 40px 48px 40px">
          <mj-column>
            <mj-text font-size="24px" font-weight="600" color="{THEME['text_primary']}" line-height="1.3" padding="0 0 16px 0">
              {title}
            </mj-text>

            {content_sections}
          </mj-column>
        </mj-section>

        {cta_section}

        <mj-section padding="32px 20px">
          <mj-column>
            <mj-text align="center" font-size="13px" color="{THEME['text_muted']}" padding="0">
              housnkuh - Regionaler Marktplatz für Direktvermarkter
            </mj-text>
          </mj-column>
        </mj-section>
      </mj-body>
    </mjml>
    """


def _detail_rows(rows: list[tuple[str, str]]) -> str:
    cells = "".join(
        f"""
        <tr>
          <td style="padding: 6px 0; color: {THEME['text_muted']};">{label}</td>
          <td style="padding: 6px 0; text-align: right; font-weight: 600;">{value}</td>
        </tr>
        """
        for label, value in rows
    )
    return f"""
    <mj-table font-size="15px" color="{THEME['text_secondary']}" padding="8px 0 24px 0">
      {cells}
    </mj-table>
    """


def vendor_confirmation_template(
    vendor_name: str,
    confirm_url: str,
    package_name: str,
    monthly_price: float,
    rental_duration: int,
    expires_in_hours: int,
) -> str:
    content = f"""
    <mj-text>Hallo {vendor_name},</mj-text>

    <mj-text>
      thank you for registering with housnkuh. Please confirm your email address
      so we can review your booking request.
    </mj-text>

    {_detail_rows([
        ("Package", package_name),
        ("Monthly price", format_euro(monthly_price)),
        ("Rental duration", f"{rental_duration} months"),
    ])}

    <mj-text font-size="14px" color="{THEME['text_muted']}">
      This link is valid for {expires_in_hours} hours and can only be used once.
    </mj-text>
    """
    return get_base_template(
        title="Confirm your email address",
        preview_text="Confirm your email to complete your housnkuh registration",
        content_sections=content,
        cta_url=confirm_url,
        cta_label="Confirm email",
    )


def pending_booking_admin_template(vendor_name: str, vendor_email: str, package_name: str) -> str:
    content = f"""
    <mj-text>
      A vendor has confirmed their email address and is waiting for unit assignment.
    </mj-text>

    {_detail_rows([
        ("Vendor", vendor_name),
        ("Email", vendor_email),
        ("Package", package_name),
    ])}
    """
    return get_base_template(
        title="New booking request",
        preview_text=f"{vendor_name} is waiting for approval",
        content_sections=content,
    )


def booking_approved_template(
    vendor_name: str,
    unit_labels: list[str],
    start_date: date,
    end_date: date,
    payable_from: date,
    monthly_price: float,
    trial_ends_on: Optional[date] = None,
) -> str:
    rows = [
        ("Rental units", ", ".join(unit_labels)),
        ("Start", format_date(start_date)),
        ("Booked until", format_date(end_date)),
        ("Billing from", format_date(payable_from)),
        ("Monthly price", format_euro(monthly_price)),
    ]
    trial_notice = ""
    if trial_ends_on:
        rows.append(("Trial month ends", format_date(trial_ends_on)))
        trial_notice = f"""
        <mj-text font-size="14px" color="{THEME['text_muted']}">
          Your first month is a free trial. You can cancel at no cost until {format_date(trial_ends_on)}.
        </mj-text>
        """

    content = f"""
    <mj-text>Hallo {vendor_name},</mj-text>

    <mj-text>
      your booking has been approved. The following rental units are reserved for you:
    </mj-text>

    {_detail_rows(rows)}

    {trial_notice}
    """
    return get_base_template(
        title="Your booking is confirmed",
        preview_text="Your housnkuh rental units are reserved",
        content_sections=content,
    )


def booking_rejected_template(vendor_name: str, reason: Optional[str] = None) -> str:
    reason_block = ""
    if reason:
        reason_block = f"""
        <mj-text padding="8px 16px" container-background-color="{THEME['background']}">
          {reason}
        </mj-text>
        """

    content = f"""
    <mj-text>Hallo {vendor_name},</mj-text>

    <mj-text>
      unfortunately we cannot accept your booking request at this time.
    </mj-text>

    {reason_block}

    <mj-text>
      Feel free to contact us if you have any questions.
    </mj-text>
    """
    return get_base_template(
        title="Your booking request",
        preview_text="Update on your housnkuh booking request",
        content_sections=content,
    )


def opening_date_changed_template(vendor_name: str, new_date: date, old_date: Optional[date] = None) -> str:
    if old_date:
        change_text = f"The store opening has moved from {format_date(old_date)} to <strong>{format_date(new_date)}</strong>."
    else:
        change_text = f"The store opens on <strong>{format_date(new_date)}</strong>."

    content = f"""
    <mj-text>Hallo {vendor_name},</mj-text>

    <mj-text>{change_text}</mj-text>

    <mj-text>
      Billing for your rental units starts no earlier than the opening date.
    </mj-text>
    """
    return get_base_template(
        title="Store opening date",
        preview_text=f"housnkuh opens on {format_date(new_date)}",
        content_sections=content,
    )


def contract_cancelled_template(
    vendor_name: str, contract_id: int, cancelled_at: date, trial_cancellation: bool = False
) -> str:
    detail = (
        "Your booking was cancelled during the trial month, no charges apply."
        if trial_cancellation
        else f"Your rental units are released as of {format_date(cancelled_at)}."
    )
    content = f"""
    <mj-text>Hallo {vendor_name},</mj-text>

    <mj-text>Contract #{contract_id} has been cancelled.</mj-text>

    <mj-text>{detail}</mj-text>
    """
    return get_base_template(
        title="Contract cancelled",
        preview_text=f"Contract #{contract_id} cancelled",
        content_sections=content,
    )
