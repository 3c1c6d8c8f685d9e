"""Configuration loading for DogWatcher."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Mapping

from .models import RESERVED_MARKER, SiteConfig
from .store import resolve_data_dir

TRUE_VALUES = {"1", "true", "yes", "on"}

SITE_KEYS = {
    "list_item_selector": ("listItemSelector", "cardSelector"),
    "name_selector": ("nameSelector",),
    "url_selector": ("urlSelector",),
}


@dataclass(frozen=True)
class EmailSettings:
    """SMTP credentials and addressing for the e-mail channel."""

    host: str
    port: int
    user: str
    password: str
    recipient: str
    starttls: bool = False


@dataclass(frozen=True)
class AppConfig:
    """Settings handed to the collaborators at construction time."""

    data_dir: Path
    sites_file: Path
    headless: bool = True
    navigation_timeout_ms: int = 60000
    selector_timeout_ms: int = 30000
    user_agent: str = "DogWatcher/1.0"
    email: EmailSettings | None = None
    slack_webhook: str | None = None


def _get(environ: Mapping[str, str], key: str, default: str = "") -> str:
    return (environ.get(key) or default).strip()


def _get_int(environ: Mapping[str, str], key: str, default: int) -> int:
    raw = _get(environ, key)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{key} must be an integer, got {raw!r}") from None


def _get_bool(environ: Mapping[str, str], key: str, default: bool) -> bool:
    raw = _get(environ, key)
    if not raw:
        return default
    return raw.lower() in TRUE_VALUES


def load_config(environ: Mapping[str, str] | None = None) -> AppConfig:
    """Build an AppConfig from environment variables."""
    if environ is None:
        environ = os.environ

    email = None
    user = _get(environ, "EMAIL_USER")
    recipient = _get(environ, "EMAIL_RECIPIENT")
    if user and recipient:
        email = EmailSettings(
            host=_get(environ, "SMTP_HOST", "smtp.gmail.com"),
            port=_get_int(environ, "SMTP_PORT", 465),
            user=user,
            password=_get(environ, "EMAIL_PASS"),
            recipient=recipient,
            starttls=_get_bool(environ, "SMTP_STARTTLS", False),
        )

    return AppConfig(
        data_dir=resolve_data_dir(_get(environ, "DOG_LIST_DIR", "data")),
        sites_file=Path(_get(environ, "SITES_FILE", "sites.json")),
        headless=_get_bool(environ, "HEADLESS", True),
        navigation_timeout_ms=_get_int(environ, "NAVIGATION_TIMEOUT_MS", 60000),
        selector_timeout_ms=_get_int(environ, "SELECTOR_TIMEOUT_MS", 30000),
        user_agent=_get(environ, "USER_AGENT", "DogWatcher/1.0"),
        email=email,
        slack_webhook=_get(environ, "SLACK_WEBHOOK") or None,
    )


def _site_from_dict(entry: dict, idx: int) -> SiteConfig:
    if not isinstance(entry, dict):
        raise ValueError(f"Site entry {idx} must be an object, got {entry!r}")

    values = {}
    for key in ("id", "name", "url"):
        if not entry.get(key):
            raise ValueError(f"Site entry {idx} is missing {key!r}")
        values[key] = str(entry[key])

    for field_name, aliases in SITE_KEYS.items():
        value = next((entry[alias] for alias in aliases if entry.get(alias)), None)
        if value is None:
            raise ValueError(f"Site {values['id']!r} is missing {aliases[0]!r}")
        values[field_name] = value

    marker = entry.get("reservedMarker", RESERVED_MARKER)
    if not marker:
        raise ValueError(f"Site {values['id']!r} has an empty reservedMarker")
    return SiteConfig(reserved_marker=marker, **values)


def load_sites(path: Path) -> List[SiteConfig]:
    """Read the ordered list of site descriptors from a JSON file."""
    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(payload, list):
        raise ValueError(f"Sites file {path} must contain a JSON array")
    return [_site_from_dict(entry, idx) for idx, entry in enumerate(payload)]
