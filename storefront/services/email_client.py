# storefront/services/email_client.py
import requests
from requests import RequestException

from storefront.utils.logging import get_logger
from storefront.utils.retry import http_retry
from storefront.utils.settings import FROM_EMAIL, SENDGRID_API_KEY, SENDGRID_API_URL

logger = get_logger(__name__)


class EmailClient:
    """SendGrid v3 mail/send over HTTP. Without an API key mails are only logged."""

    def __init__(self, api_key: str | None = None, from_email: str | None = None, url: str | None = None, timeout: int = 5):
        self.api_key = api_key if api_key is not None else SENDGRID_API_KEY
        self.from_email = from_email or FROM_EMAIL
        self.url = url or SENDGRID_API_URL
        self.timeout = timeout

    @http_retry()
    def _post(self, payload: dict):
        resp = requests.post(
            self.url,
            json=payload,
            headers={"Authorization": f"Bearer {self.api_key}"},
            timeout=self.timeout,
        )
        resp.raise_for_status()

    def send(self, to: str, subject: str, text: str, html: str | None = None) -> bool:
        if not self.api_key:
            logger.info(f"SendGrid API key not configured, email not sent: {subject}")
            return False

        content = [{"type": "text/plain", "value": text}]
        if html:
            content.append({"type": "text/html", "value": html})
        payload = {
            "personalizations": [{"to": [{"email": to}]}],
            "from": {"email": self.from_email},
            "subject": subject,
            "content": content,
        }
        try:
            self._post(payload)
        except RequestException as e:
            logger.error(f"Failed to send email '{subject}': {e}")
            return False

        logger.info(f"Email sent: {subject}")
        return True
