"""
Envío de facturas por e-mail (SMTP)
Nunca lanza: devuelve (exitoso, mensaje). El guardado de la reserva no depende del envío.
"""

import smtplib
from email.message import EmailMessage
from typing import Optional, Tuple

from config import Settings
from utils.errors import DeliveryError
from utils.logging_utils import log_error, log_event


def build_invoice_message(
    from_address: str,
    from_name: str,
    to_address: str,
    subject: str,
    body: str,
    attachment: Optional[bytes],
    filename: str,
) -> EmailMessage:
    msg = EmailMessage()
    msg["Subject"] = subject
    msg["From"] = f'"{from_name}" <{from_address}>'
    msg["To"] = to_address
    msg.set_content(body)
    if attachment:
        msg.add_attachment(attachment, maintype="application", subtype="pdf", filename=filename)
    return msg


def _deliver(msg: EmailMessage, settings: Settings) -> None:
    try:
        with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=settings.email_timeout) as smtp_conn:
            smtp_conn.starttls()
            if settings.email_user:
                smtp_conn.login(settings.email_user, settings.email_pass)
            smtp_conn.send_message(msg)
    except (smtplib.SMTPException, OSError) as e:
        raise DeliveryError(str(e)) from e


def send_invoice_email(
    to_address: Optional[str],
    subject: str,
    body: str,
    attachment: Optional[bytes],
    filename: str,
    settings: Settings,
) -> Tuple[bool, str]:
    if not to_address:
        return False, "Recipient e-mail address is missing"

    msg = build_invoice_message(
        settings.email_user or "noreply@localhost",
        settings.hotel_name,
        to_address,
        subject,
        body,
        attachment,
        filename,
    )
    try:
        _deliver(msg, settings)
    except DeliveryError as e:
        log_error("email", "admin", "Send invoice", f"to={to_address} error={e}")
        return False, f"Email send failed: {e}"

    log_event("email", "admin", "Send invoice", f"to={to_address} file={filename}")
    return True, "Email sent."
