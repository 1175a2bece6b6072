"""Digest renderers."""

from hn_digest.adapters.digest.html_generator import HTMLDigestGenerator

__all__ = ["HTMLDigestGenerator"]
