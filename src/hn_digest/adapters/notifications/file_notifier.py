"""Write the digest to a local HTML file."""

from datetime import date
from pathlib import Path
from typing import Optional

from hn_digest.core.errors import DeliveryError
from hn_digest.core.interfaces import NotificationService


class FileNotifier(NotificationService):
    """Save the digest as hn-digest-<date>.html."""
    
    def __init__(self, output_dir: Path) -> None:
        self.output_dir = output_dir
        self.last_path: Optional[Path] = None
    
    async def send(
        self,
        html_body: str,
        subject: str,
        to: str,
        sender: str,
        digest_date: Optional[date] = None,
    ) -> None:
        day = (digest_date or date.today()).isoformat()
        path = self.output_dir / f"hn-digest-{day}.html"
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(html_body, encoding="utf-8")
        except OSError as e:
            raise DeliveryError(f"Could not write digest to {path}: {e}") from e
        
        self.last_path = path
        print(f"✓ Digest saved to: {path}")
