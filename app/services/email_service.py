import logging
import re
from typing import List, Union

import requests

from app.utils.template import render_template

logger = logging.getLogger(__name__)

BREVO_API_URL = "https://api.brevo.com/v3/smtp/email"

_EMAIL_RE = re.compile(r"[^@\s]+@[^@\s]+\.[^@\s]+")


def is_valid_email(email) -> bool:
    if isinstance(email, list):
        return bool(email) and all(is_valid_email(e) for e in email)
    if not email or not isinstance(email, str):
        return False
    return _EMAIL_RE.fullmatch(email.strip()) is not None


class Mailer:
    """Transactional email through the Brevo HTTP API."""

    def __init__(self, api_key: str, sender_email: str, sender_name: str, timeout: float = 10):
        self.api_key = api_key
        self.sender_email = sender_email
        self.sender_name = sender_name
        self.timeout = timeout

    def send(self, to: Union[str, List[str]], subject: str, html: str) -> bool:
        """
        Send an HTML email. Returns False (and logs) instead of raising when
        the address is invalid or Brevo rejects the request.
        """
        recipients = to if isinstance(to, list) else [to]
        valid_emails = [e for e in recipients if is_valid_email(e)]
        if not valid_emails:
            logger.warning("No valid emails found: %s", to)
            return False
        if not self.api_key:
            logger.error("BREVO_API_KEY is not configured; cannot send '%s'", subject)
            return False

        payload = {
            "sender": {"email": self.sender_email, "name": self.sender_name},
            "to": [{"email": e} for e in valid_emails],
            "subject": subject,
            "htmlContent": html,
        }
        headers = {
            "api-key": self.api_key,
            "Content-Type": "application/json",
        }

        try:
            response = requests.post(BREVO_API_URL, json=payload, headers=headers, timeout=self.timeout)
        except requests.RequestException:
            logger.exception("Brevo email exception")
            return False

        if response.status_code >= 400:
            logger.error("Brevo email failed (%s): %s", response.status_code, response.text)
            return False

        logger.info("Brevo email sent to %s", valid_emails)
        return True

    def send_receipt(self, to: str, product_title: str, price: float, download_url: str, link_hours: int, store_name: str) -> bool:
        html = render_template(
            "emails/receipt.html",
            product_title=product_title,
            price=f"{price:.2f}",
            download_url=download_url,
            link_hours=link_hours,
            store_name=store_name,
        )
        return self.send(to=to, subject="Your Purchase Receipt & Download Link", html=html)

    def send_password_reset(self, to: str, reset_link: str, expires_minutes: int, store_name: str) -> bool:
        html = render_template(
            "emails/password_reset.html",
            reset_link=reset_link,
            expires_minutes=expires_minutes,
            store_name=store_name,
        )
        return self.send(to=to, subject=f"Reset your {store_name} password", html=html)
