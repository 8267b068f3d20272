"""
Fetch raw CSV text from a spreadsheet export link or a local file.
"""
from __future__ import annotations

from pathlib import Path

import requests

from salon_dash.config import FETCH_TIMEOUT

_USER_AGENT = "SalonDash/1.0"


class TransportError(Exception):
    """A source could not be fetched. Carries an HTTP-like status code."""

    def __init__(self, status: int, message: str) -> None:
        super().__init__(f"{status}: {message}")
        self.status = status
        self.message = message


def _is_url(source: str) -> bool:
    return source.lower().startswith(("http://", "https://"))


def fetch_csv(source: str, timeout: float = FETCH_TIMEOUT) -> str:
    """Return the body of *source* as text, or raise TransportError."""
    source = (source or "").strip()
    if not source:
        raise TransportError(400, "Missing source url")

    if not _is_url(source):
        path = Path(source).expanduser()
        if not path.is_file():
            raise TransportError(404, f"File not found: {path}")
        try:
            return path.read_text(encoding="utf-8-sig")
        except (OSError, UnicodeDecodeError) as exc:
            raise TransportError(500, f"Could not read {path.name}: {exc}") from exc

    print(f"  Fetching CSV from {source[:80]} ...")
    try:
        resp = requests.get(source, timeout=timeout, headers={"User-Agent": _USER_AGENT})
    except requests.RequestException as exc:
        raise TransportError(503, f"Failed to fetch CSV: {exc}") from exc

    if not resp.ok:
        raise TransportError(resp.status_code, f"Failed to fetch CSV: {resp.status_code} {resp.reason}")

    # Sheets exports omit the charset; requests would fall back to latin-1
    if "charset" not in resp.headers.get("Content-Type", "").lower():
        resp.encoding = "utf-8"
    text = resp.text.removeprefix("\ufeff")
    print(f"  Fetched CSV, {len(text):,} characters")
    return text
