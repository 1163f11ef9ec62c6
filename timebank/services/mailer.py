"""Login-code delivery over SMTP."""
import logging
import smtplib
from email.message import EmailMessage

from starlette.concurrency import run_in_threadpool

from timebank.config import settings
from timebank.core.errors import IntegrationNotConfigured, UpstreamError

logger = logging.getLogger(__name__)

LOGIN_CODE_SUBJECT = "Your Time Bank login code"


def build_login_code_message(to_address: str, code: str) -> EmailMessage:
    msg = EmailMessage()
    msg["Subject"] = LOGIN_CODE_SUBJECT
    msg["From"] = settings.SMTP_FROM
    msg["To"] = to_address
    msg.set_content(
        f"Your login code is {code}.\n\n"
        f"It expires in {settings.OTP_EXPIRE_MINUTES} minutes and can be used once.\n"
    )
    return msg


def send_message(msg: EmailMessage) -> None:
    with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=settings.SMTP_TIMEOUT_SECONDS) as smtp:
        if settings.SMTP_USE_TLS:
            smtp.starttls()
        if settings.SMTP_USER:
            smtp.login(settings.SMTP_USER, settings.SMTP_PASSWORD or "")
        smtp.send_message(msg)


async def send_login_code(to_address: str, code: str) -> None:
    """Email the code once. Raises IntegrationNotConfigured or UpstreamError, never retries."""
    missing = settings.missing_smtp_settings
    if missing:
        raise IntegrationNotConfigured(missing)

    msg = build_login_code_message(to_address, code)
    try:
        # smtplib blocks
        await run_in_threadpool(send_message, msg)
    except (smtplib.SMTPException, OSError) as e:
        logger.error("Login code delivery failed: %s", e)
        raise UpstreamError("Could not send the login code")
