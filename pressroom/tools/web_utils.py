from __future__ import annotations

import re
from urllib.parse import urlparse

# Second-level labels that sit under a country-code TLD (bbc.co.uk, abc.net.au).
_SECOND_LEVEL_LABELS = {"co", "com", "net", "org", "gov", "ac", "edu"}


def clean_snippet(text: str, max_length: int = 200) -> str:
    """Collapse whitespace and trim to max length."""
    text = re.sub(r"\s+", " ", text or "").strip()
    if len(text) > max_length:
        text = text[:max_length]
    return text


def registrable_label(hostname: str) -> str:
    """Return the label naming the site: ``pitchfork`` for ``www.pitchfork.com``."""
    host = hostname.lower().strip(".")
    if host.startswith("www."):
        host = host[4:]
    labels = [label for label in host.split(".") if label]
    if not labels:
        return ""
    if len(labels) >= 3 and len(labels[-1]) == 2 and labels[-2] in _SECOND_LEVEL_LABELS:
        return labels[-3]
    if len(labels) >= 2:
        return labels[-2]
    return labels[0]


def humanize_label(label: str) -> str:
    """``consequence-of-sound`` -> ``Consequence Of Sound``."""
    return " ".join(word[:1].upper() + word[1:] for word in label.split("-") if word)


def source_from_url(url: str, display_url: str | None = None) -> str:
    """Derive a publication name from a result URL.

    Falls back to the first segment of the provider's display URL, then to
    ``"Unknown"``, when the URL has no parsable host.
    """
    try:
        hostname = urlparse(url).hostname
        if not hostname:
            raise ValueError(f"no host in {url!r}")
        name = humanize_label(registrable_label(hostname))
        if name:
            return name
    except ValueError:
        pass
    if display_url:
        head = display_url.split("/")[0].strip()
        if head:
            return head
    return "Unknown"
