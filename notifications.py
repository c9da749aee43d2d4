"""
E-mail notification to the site owner when a contact message arrives.
"""

from __future__ import annotations

import html
import logging
import smtplib
from email.message import EmailMessage

from settings import Settings

logger = logging.getLogger(__name__)


def build_contact_email(settings: Settings, contact: dict) -> EmailMessage:
    esc = {k: html.escape(str(v or "")) for k, v in contact.items()}
    message_html = esc["message"].replace("\n", "<br>")
    msg = EmailMessage()
    msg["From"] = settings.email_user
    msg["To"] = settings.email_user
    msg["Subject"] = f"New Contact Message: {contact['subject']}"
    msg.set_content(
        f"Name: {contact['name']}\nEmail: {contact['email']}\n"
        f"Phone: {contact.get('phone') or 'Not provided'}\n\n{contact['message']}"
    )
    msg.add_alternative(
        f"""
        <h2>New Contact Message</h2>
        <p><strong>Name:</strong> {esc['name']}</p>
        <p><strong>Email:</strong> {esc['email']}</p>
        <p><strong>Phone:</strong> {esc.get('phone') or 'Not provided'}</p>
        <p><strong>Subject:</strong> {esc['subject']}</p>
        <p><strong>Message:</strong></p>
        <p>{message_html}</p>
        <hr>
        <p><small>Sent from: {esc.get('ip_address', '')}</small></p>
        <p><small>User Agent: {esc.get('user_agent', '')}</small></p>
        """,
        subtype="html",
    )
    return msg


def send_contact_notification(settings: Settings, contact: dict) -> bool:
    """Mail the owner about a new message; False when not configured or sending failed."""
    if not settings.email_configured:
        return False
    try:
        with smtplib.SMTP(settings.email_host, settings.email_port, timeout=10) as smtp:
            smtp.starttls()
            smtp.login(settings.email_user, settings.email_pass)
            smtp.send_message(build_contact_email(settings, contact))
    except (smtplib.SMTPException, OSError):
        logger.exception("Email sending error")
        return False
    return True
