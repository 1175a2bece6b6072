"""Email delivery through the Resend API."""

from datetime import date
from typing import Optional

import httpx

from hn_digest.core.errors import DeliveryError
from hn_digest.core.interfaces import NotificationService


class ResendNotifier(NotificationService):
    """Send the digest as an HTML email via Resend."""
    
    def __init__(self, api_key: str, base_url: str = "https://api.resend.com", timeout: float = 30.0) -> None:
        """Initialize Resend notifier.
        
        Args:
            api_key: Resend API key
            base_url: API root, overridable for tests
            timeout: Request timeout in seconds
        """
        if not api_key:
            raise DeliveryError("RESEND_API_KEY is not configured")
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
    
    async def send(
        self,
        html_body: str,
        subject: str,
        to: str,
        sender: str,
        digest_date: Optional[date] = None,
    ) -> None:
        """Send one email with the rendered digest.
        
        Raises:
            DeliveryError: if the recipient is missing or the API call fails
        """
        if not to or not sender:
            raise DeliveryError("EMAIL_FROM and EMAIL_TO must both be set")
        
        payload = {
            "from": sender,
            "to": [to],
            "subject": subject,
            "html": html_body,
        }
        
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                response = await client.post(
                    f"{self.base_url}/emails",
                    headers={"Authorization": f"Bearer {self.api_key}"},
                    json=payload,
                )
                response.raise_for_status()
            except httpx.HTTPError as e:
                raise DeliveryError(f"Resend delivery failed: {e}") from e
        
        print(f"✓ Email sent via Resend to {to}")
