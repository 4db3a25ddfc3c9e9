import logging
import smtplib
from email.message import EmailMessage

from app.core.config import settings

logger = logging.getLogger(__name__)


def send_email(to_email: str, subject: str, body: str) -> None:
    msg = EmailMessage()
    msg["From"] = settings.MAIL_FROM
    msg["To"] = to_email
    msg["Subject"] = subject
    msg.set_content(body)

    with smtplib.SMTP(settings.MAIL_HOST, settings.MAIL_PORT, timeout=10) as smtp:
        if settings.MAIL_USER:
            smtp.login(settings.MAIL_USER, settings.MAIL_PASSWORD)
        smtp.send_message(msg)


def send_email_quietly(to_email: str, subject: str, body: str) -> bool:
    """Background-task variant: a mail failure is logged and never reaches the caller."""
    try:
        send_email(to_email, subject, body)
    except (smtplib.SMTPException, OSError) as e:
        logger.warning("Failed to send email to %s: %s", to_email, e)
        return False
    return True


def send_employee_welcome(to_email: str, name: str, role_name: str | None) -> bool:
    body = (
        f"Hello {name},\n\n"
        f"An employee account has been created for you.\n"
        f"Role: {role_name or 'unassigned'}\n"
        f"Sign in to the dashboard with your phone number and the password you were given.\n"
    )
    return send_email_quietly(to_email, "Your employee account is ready", body)
