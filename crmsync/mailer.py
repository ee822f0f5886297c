# crmsync/mailer.py
from __future__ import annotations

import smtplib
from email.message import EmailMessage
from typing import Optional

from flask import current_app

from crmsync.config import Settings
from crmsync.exceptions import MailError


def send_email(
    settings: Settings,
    to_email: str,
    subject: str,
    text_body: str,
    html_body: Optional[str] = None,
) -> None:
    """
    Envío SMTP con STARTTLS. Variables:
      SMTP_HOST, SMTP_PORT, SMTP_USER, SMTP_PASS, MAIL_FROM, MAIL_FROM_NAME
    """
    mail_from = settings.mail_from or settings.smtp_user
    if not settings.smtp_host or not settings.smtp_user or not settings.smtp_pass or not mail_from:
        raise MailError("SMTP not configured (SMTP_HOST/SMTP_USER/SMTP_PASS/MAIL_FROM)")

    msg = EmailMessage()
    msg["From"] = f"{settings.mail_from_name} <{mail_from}>"
    msg["To"] = to_email
    msg["Subject"] = subject
    msg.set_content(text_body)

    if html_body:
        msg.add_alternative(html_body, subtype="html")

    try:
        with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=20) as smtp:
            smtp.ehlo()
            smtp.starttls()
            smtp.ehlo()
            smtp.login(settings.smtp_user, settings.smtp_pass)
            smtp.send_message(msg)
    except (smtplib.SMTPException, OSError) as e:
        raise MailError(f"SMTP send to {to_email} failed: {e}") from e

    current_app.logger.info("Mail sent to %s (%s)", to_email, subject)
