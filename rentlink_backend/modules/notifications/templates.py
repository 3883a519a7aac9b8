"""Email templates for lease workflow notifications.

Each template returns ``(subject, html)``.
"""

from html import escape

_BUTTON_STYLE = (
    "display: inline-block; padding: 12px 24px; background-color: #000; "
    "color: #fff; text-decoration: none; border-radius: 6px;"
)


def _button(url: str, label: str) -> str:
    return f'<a href="{escape(url, quote=True)}" style="{_BUTTON_STYLE}">{label}</a>'


def _layout(body: str) -> str:
    return f"""
    <html>
    <body style="font-family: Arial, sans-serif; line-height: 1.6;">
        {body}
        <p>Best regards,<br>The RentLink Team</p>
    </body>
    </html>
    """


def lease_created(url: str, address: str) -> tuple[str, str]:
    subject = f"New Lease Agreement: {address}"
    html = _layout(
        f"""
        <h1>New Lease Agreement</h1>
        <p>A new lease agreement for <strong>{escape(address)}</strong> has been created for you.</p>
        <p>Please review and sign the document here:</p>
        {_button(url, "View Lease")}
        """
    )
    return subject, html


def tenant_signed(url: str, tenant_name: str, address: str) -> tuple[str, str]:
    subject = f"Lease Signed: {tenant_name} - {address}"
    html = _layout(
        f"""
        <h1>Lease Signed</h1>
        <p><strong>{escape(tenant_name)}</strong> has signed the lease for <strong>{escape(address)}</strong>.</p>
        <p>Please review their signature and approve the lease:</p>
        {_button(url, "Review Lease")}
        """
    )
    return subject, html


def lease_approved(url: str, address: str) -> tuple[str, str]:
    subject = f"Lease Approved: {address}"
    html = _layout(
        f"""
        <h1>Lease Approved!</h1>
        <p>Your lease for <strong>{escape(address)}</strong> has been approved by the landlord.</p>
        <p>You can view the final signed document here:</p>
        {_button(url, "View Lease")}
        """
    )
    return subject, html


def lease_rejected(address: str, reason: str) -> tuple[str, str]:
    subject = f"Lease Application Update: {address}"
    html = _layout(
        f"""
        <h1>Lease Application Rejected</h1>
        <p>Your lease application for <strong>{escape(address)}</strong> has been rejected.</p>
        <p><strong>Reason:</strong> {escape(reason)}</p>
        """
    )
    return subject, html


def revision_requested(url: str, address: str, reason: str) -> tuple[str, str]:
    subject = f"Action Required: Lease Revision for {address}"
    html = _layout(
        f"""
        <h1>Revision Requested</h1>
        <p>The landlord has requested changes to your lease submission for <strong>{escape(address)}</strong>.</p>
        <p><strong>Reason:</strong> {escape(reason)}</p>
        <p>Please update your submission and sign again:</p>
        {_button(url, "Update Submission")}
        """
    )
    return subject, html
