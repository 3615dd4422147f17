"""Input sanitization for user-supplied text and embedded media URLs."""
import logging
import re
from typing import Any, Dict, Optional
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

ALLOWED_VIDEO_DOMAINS = [
    "youtube.com",
    "www.youtube.com",
    "youtu.be",
    "youtube-nocookie.com",
    "www.youtube-nocookie.com",
    "vimeo.com",
    "player.vimeo.com",
]

_SCRIPT_BLOCK = re.compile(r"<script[^>]*>.*?</script>", re.IGNORECASE | re.DOTALL)
_TAG = re.compile(r"<[^>]*>")
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")
_JS_PROTOCOL = re.compile(r"javascript:", re.IGNORECASE)
_EVENT_HANDLER = re.compile(r"on\w+\s*=", re.IGNORECASE)
_WHITESPACE = re.compile(r"\s+")
_IFRAME_SRC = re.compile(r"src=[\"']([^\"']+)[\"']", re.IGNORECASE)


def sanitize_input(value: Optional[str]) -> str:
    """Strip tags, control characters, javascript: URLs and inline handlers; collapse whitespace."""
    if not value or not isinstance(value, str):
        return ""
    sanitized = _SCRIPT_BLOCK.sub("", value)
    sanitized = _TAG.sub("", sanitized)
    sanitized = _CONTROL_CHARS.sub("", sanitized)
    sanitized = _JS_PROTOCOL.sub("", sanitized)
    sanitized = _EVENT_HANDLER.sub("", sanitized)
    return _WHITESPACE.sub(" ", sanitized).strip()


def _host_allowed(hostname: Optional[str]) -> bool:
    if not hostname:
        return False
    return any(hostname == d or hostname.endswith("." + d) for d in ALLOWED_VIDEO_DOMAINS)


def is_allowed_video_domain(url: str) -> bool:
    try:
        return _host_allowed(urlparse(url).hostname)
    except ValueError:
        return False


def get_safe_embed_url(embed_html: Optional[str]) -> Optional[str]:
    """Extract the iframe src from embed HTML; None unless it is https on a whitelisted video host."""
    if not embed_html or not isinstance(embed_html, str):
        return None
    match = _IFRAME_SRC.search(embed_html)
    if not match:
        return None
    try:
        url = urlparse(match.group(1))
    except ValueError:
        logger.warning("Failed to parse video embed URL")
        return None
    if not _host_allowed(url.hostname):
        logger.warning(f"Video embed from untrusted domain blocked: {url.hostname}")
        return None
    if url.scheme != "https":
        logger.warning("Non-HTTPS video embed blocked")
        return None
    return url.geturl()


def safe_video_url(video: Dict[str, Any]) -> Optional[str]:
    """Playable URL: the sanitized embed src, else the plain url if it is https on a trusted host."""
    url = get_safe_embed_url(video.get("embed")) or video.get("url")
    if not url or not isinstance(url, str) or not is_allowed_video_domain(url):
        return None
    if not url.lower().startswith("https://"):
        logger.warning("Non-HTTPS video url blocked")
        return None
    return url
