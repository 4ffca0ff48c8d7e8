from __future__ import annotations

import logging
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

logger = logging.getLogger(__name__)


# Query parameters that only carry attribution data and never change the resource.
TRACKING_PARAMS: frozenset[str] = frozenset(
    {
        "utm_source",
        "utm_medium",
        "utm_campaign",
        "utm_term",
        "utm_content",
        "source",
        "ref",
        "referral",
        "fbclid",
        "gclid",
        "_ga",
        "mc_cid",
        "mc_eid",
        "yclid",
        "_hsenc",
        "_hsmi",
        "mkt_tok",
        "campaign",
        "medium",
        "term",
        "content",
    }
)

CANONICAL_SCHEME = "https"


def _strip_www(netloc: str) -> str:
    host = netloc.lower()
    if host.startswith("www."):
        return host[len("www.") :]
    return host


def normalize_url(url: str) -> str:
    """Normalize a bookmark URL into a stable deduplication key.

    - Remove tracking query params and sort the rest by key
    - Drop the fragment
    - Strip a leading ``www.`` from the host
    - Force the ``https`` scheme
    - Strip a single trailing slash

    Never raises: when the URL cannot be parsed it is returned unchanged and a
    warning is logged, so dedup falls back to the bookmark identity alone.

    Args:
        url: URL to normalize

    Returns:
        Normalized URL string (or the input on parse failure)
    """
    try:
        parts = urlsplit(url)
        if not parts.scheme or not parts.netloc:
            msg = "URL must be absolute"
            raise ValueError(msg)

        query = parts.query
        # A slash closing the query string is cosmetic (``?a=1/``)
        if query.endswith("/"):
            query = query[:-1]

        pairs = [
            (key, value)
            for key, value in parse_qsl(query, keep_blank_values=True)
            if key not in TRACKING_PARAMS
        ]
        pairs.sort(key=lambda pair: pair[0])

        normalized = urlunsplit(
            (CANONICAL_SCHEME, _strip_www(parts.netloc), parts.path, urlencode(pairs), "")
        )
    except (TypeError, ValueError) as exc:
        logger.warning("url_normalization_failed", extra={"url": url, "error": str(exc)})
        return url

    if normalized.endswith("/"):
        normalized = normalized[:-1]
    return normalized
