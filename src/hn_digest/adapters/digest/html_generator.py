"""HTML digest generator."""

from datetime import date
from html import escape
from urllib.parse import quote_plus, urlencode

from hn_digest.core import DigestEntry, DigestGenerator, Rating
from hn_digest.core.enricher import parse_key_terms

STYLE = """
    body { font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Arial, sans-serif;
           max-width: 800px; margin: 40px auto; padding: 20px; line-height: 1.6; color: #333; }
    h1 { color: #ff6600; border-bottom: 2px solid #ff6600; padding-bottom: 10px; }
    .story { margin: 30px 0; padding: 20px; border-left: 4px solid #ff6600; background: #f6f6f6; }
    .story h2 { margin-top: 0; color: #000; }
    .story a { color: #0066cc; text-decoration: none; }
    .meta { color: #666; font-size: 0.9em; margin: 10px 0; }
    .why-relevant { background: #fff3cd; border-left: 3px solid #ffc107; padding: 10px 15px;
                    margin: 15px 0; font-size: 0.95em; color: #856404; }
    .summary { margin-top: 15px; white-space: pre-line; }
    .key-terms { margin-top: 20px; padding: 15px; background: #e8f4f8; border-left: 3px solid #17a2b8; }
    .key-terms h3 { margin: 0 0 10px 0; color: #0c5460; font-size: 1em; }
    .key-terms-content { white-space: pre-line; font-size: 0.95em; }
    .topics { margin-top: 15px; font-size: 0.85em; }
    .topic { display: inline-block; padding: 2px 8px; margin: 2px; border-radius: 10px; background: #ffe0cc; }
    .feedback { margin-top: 20px; padding-top: 15px; border-top: 1px solid #ddd; text-align: center; }
    .feedback-btn { display: inline-block; padding: 10px 20px; margin: 0 8px; border-radius: 6px; color: white; }
    .feedback-btn.positive { background: #28a745; }
    .feedback-btn.negative { background: #dc3545; }
"""

TOPIC_SEARCH_URL = "https://hn.algolia.com/?q="


class HTMLDigestGenerator(DigestGenerator):
    """Render the digest as a standalone HTML email."""
    
    def __init__(self, feedback_url: str = "http://localhost:3000") -> None:
        self.feedback_url = feedback_url.rstrip("/")
    
    async def generate(self, entries: list[DigestEntry], digest_date: date) -> str:
        """Generate HTML digest."""
        day = digest_date.isoformat()
        stories = "".join(self._format_entry(i, entry) for i, entry in enumerate(entries, 1))
        
        if entries:
            found = f"<p><strong>Found {len(entries)} relevant stories</strong></p>"
        else:
            found = "<p>No relevant stories today.</p>"
        
        return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>HN Digest - {day}</title>
  <style>{STYLE}</style>
</head>
<body>
  <h1>Your Daily Hacker News Digest</h1>
  <p><strong>Date:</strong> {day}</p>
  {found}
{stories}
</body>
</html>"""
    
    def feedback_link(self, entry: DigestEntry, rating: Rating) -> str:
        query = urlencode({
            "story": entry.item.id,
            "rating": rating.value,
            "title": entry.item.title,
            "url": entry.item.url or "",
        })
        return f"{self.feedback_url}/feedback?{query}"
    
    def _format_entry(self, index: int, entry: DigestEntry) -> str:
        """Format single digest entry."""
        item = entry.item
        parts = [
            '<div class="story">',
            f"<h2>{index}. {escape(item.title)}</h2>",
        ]
        
        if item.url:
            url = escape(item.url, quote=True)
            parts.append(f'<p><strong>URL:</strong> <a href="{url}" target="_blank">{escape(item.url)}</a></p>')
        
        parts.append(
            f'<p class="meta"><a href="{escape(item.discussion_url, quote=True)}" target="_blank">View on HN</a>'
            f" | {item.score} points | {item.comment_count} comments</p>"
        )
        parts.append(
            f'<div class="why-relevant"><strong>Why you might be interested:</strong> {escape(entry.reason)}</div>'
        )
        
        if entry.summary:
            parts.append(f'<div class="summary">{escape(entry.summary)}</div>')
        
        if entry.key_terms:
            parts.append(self._format_key_terms(entry.key_terms))
        
        if entry.topics:
            links = " ".join(
                f'<a class="topic" href="{TOPIC_SEARCH_URL}{quote_plus(topic)}" target="_blank">{escape(topic)}</a>'
                for topic in entry.topics
            )
            parts.append(f'<div class="topics">Topics: {links}</div>')
        
        positive = escape(self.feedback_link(entry, Rating.POSITIVE), quote=True)
        negative = escape(self.feedback_link(entry, Rating.NEGATIVE), quote=True)
        parts.extend([
            '<div class="feedback">',
            "<p>Was this story relevant to you?</p>",
            f'<a href="{positive}" class="feedback-btn positive">👍 Yes, relevant</a>',
            f'<a href="{negative}" class="feedback-btn negative">👎 Not relevant</a>',
            "</div>",
            "</div>",
        ])
        
        return "\n".join(parts) + "\n"
    
    def _format_key_terms(self, key_terms: str) -> str:
        terms = parse_key_terms(key_terms)
        if terms:
            items = "".join(
                f"<li><strong>{escape(t.term)}</strong>: {escape(t.explanation)}</li>"
                for t in terms
            )
            content = f"<ul>{items}</ul>"
        else:
            content = f'<div class="key-terms-content">{escape(key_terms)}</div>'
        
        return f'<div class="key-terms"><h3>📚 Key Terms &amp; Concepts</h3>{content}</div>'
