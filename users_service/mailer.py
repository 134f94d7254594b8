import logging
import smtplib
from email.message import EmailMessage
from urllib.parse import urlencode

from common.settings import get_settings

logger = logging.getLogger(__name__)


class EmailDeliveryError(Exception):
    pass


def build_verification_link(token: str) -> str:
    base = get_settings().frontend_url.rstrip("/")
    return f"{base}/verify-email?{urlencode({'token': token})}"


def send_verification_email(email: str, token: str) -> None:
    """
    Send the account verification link to ``email`` over SMTP.

    Raises
    ------
    EmailDeliveryError
        If SMTP is not configured or the server rejects the message.
    """
    settings = get_settings()
    if not settings.smtp_host:
        raise EmailDeliveryError("SMTP_HOST is not configured")

    link = build_verification_link(token)
    message = EmailMessage()
    message["Subject"] = "Verify your email"
    message["From"] = settings.smtp_user or f"no-reply@{settings.smtp_host}"
    message["To"] = email
    message.set_content(f"Please open the link below to verify your email address:\n\n{link}\n")
    message.add_alternative(
        f"""
        <h1>Email Verification</h1>
        <p>Please click the link below to verify your email address:</p>
        <a href="{link}">{link}</a>
        """,
        subtype="html",
    )

    try:
        with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=10) as smtp:
            smtp.starttls()
            if settings.smtp_user:
                smtp.login(settings.smtp_user, settings.smtp_password)
            smtp.send_message(message)
    except (smtplib.SMTPException, OSError) as exc:
        raise EmailDeliveryError(str(exc)) from exc

    logger.info("Verification email sent to %s", email)
