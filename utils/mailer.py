"""
mailer.py: delivery of one-time passcodes.

The OTP authenticator hands (address, code) to a Mailer and never waits on
the result: routes schedule `deliver_otp` as FastAPI background work, and a
failed delivery is logged instead of raised.

Backends (MAIL_BACKEND):
  console  log the code (development)
  smtp     plain SMTP via smtplib
  http     JSON POST to a transactional mail API (MAIL_API_URL / MAIL_API_TOKEN)
"""

import smtplib
from email.message import EmailMessage

import requests

from config import settings
from utils.logger import get_logger

logger = get_logger(__name__)

HTTP_TIMEOUT = 10


def otp_subject(code: str) -> str:
    return f"Your verification code is {code}"


def otp_body(code: str) -> str:
    return (
        f"Your {settings.app_name} verification code is {code}.\n\n"
        f"It expires in {settings.otp_ttl_minutes} minutes. "
        "If you did not try to sign in, you can ignore this email."
    )


class Mailer:
    def send_otp(self, address: str, code: str) -> None:
        raise NotImplementedError


class ConsoleMailer(Mailer):
    def send_otp(self, address: str, code: str) -> None:
        logger.info(f"OTP for {address}: {code}")


class SmtpMailer(Mailer):
    def send_otp(self, address: str, code: str) -> None:
        msg = EmailMessage()
        msg["From"] = settings.mail_from
        msg["To"] = address
        msg["Subject"] = otp_subject(code)
        msg.set_content(otp_body(code))
        with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=HTTP_TIMEOUT) as smtp:
            if settings.smtp_username and settings.smtp_password:
                smtp.starttls()
                smtp.login(settings.smtp_username, settings.smtp_password)
            smtp.send_message(msg)


class HttpMailer(Mailer):
    def send_otp(self, address: str, code: str) -> None:
        if not settings.mail_api_url:
            raise RuntimeError("MAIL_API_URL is not configured")
        headers = {}
        if settings.mail_api_token:
            headers["Authorization"] = f"Bearer {settings.mail_api_token}"
        response = requests.post(
            settings.mail_api_url,
            json={
                "from": settings.mail_from,
                "to": address,
                "subject": otp_subject(code),
                "text": otp_body(code),
            },
            headers=headers,
            timeout=HTTP_TIMEOUT,
        )
        response.raise_for_status()


_BACKENDS = {
    "console": ConsoleMailer,
    "smtp": SmtpMailer,
    "http": HttpMailer,
}


def get_mailer() -> Mailer:
    """FastAPI dependency; tests override it with a recording mailer."""
    return _BACKENDS[settings.mail_backend]()


def deliver_otp(mailer: Mailer, address: str, code: str) -> None:
    """Best-effort delivery. Never raises."""
    try:
        mailer.send_otp(address, code)
    except Exception:
        logger.exception(f"OTP delivery to {address} failed")
