"""Notification helpers for delivering change reports to external channels."""

from __future__ import annotations

import logging
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from typing import List, Protocol

import requests

from .config import AppConfig, EmailSettings
from .models import ChangeSet, Listing, SiteConfig

logger = logging.getLogger(__name__)

REPORT_INTRO = "The following changes were detected on the adoptions page:"


class Notifier(Protocol):
    """Protocol defining the notifier contract."""

    def send(self, subject: str, message: str) -> None:
        ...


@dataclass
class EmailNotifier:
    """Send plain-text reports over SMTP."""

    settings: EmailSettings
    timeout: int = 30

    def send(self, subject: str, message: str) -> None:
        email = EmailMessage()
        email["From"] = self.settings.user
        email["To"] = self.settings.recipient
        email["Subject"] = subject
        email.set_content(message)

        if self.settings.starttls:
            with smtplib.SMTP(self.settings.host, self.settings.port, timeout=self.timeout) as server:
                server.starttls()
                server.login(self.settings.user, self.settings.password)
                server.send_message(email)
        else:
            with smtplib.SMTP_SSL(self.settings.host, self.settings.port, timeout=self.timeout) as server:
                server.login(self.settings.user, self.settings.password)
                server.send_message(email)


@dataclass
class SlackNotifier:
    """Send messages to Slack via Incoming Webhook."""

    webhook_url: str
    timeout: int = 10

    def send(self, subject: str, message: str) -> None:
        payload = {"text": f"*{subject}*\n{message}"}
        response = requests.post(
            self.webhook_url,
            json=payload,
            timeout=self.timeout,
        )
        response.raise_for_status()


@dataclass
class CompositeNotifier:
    """Fan-out notifier that forwards messages to multiple channels."""

    notifiers: List[Notifier]

    def send(self, subject: str, message: str) -> None:
        """Deliver to every channel; raise the last error if none succeeded."""
        delivered = 0
        last_error: Exception | None = None
        for notifier in self.notifiers:
            try:
                notifier.send(subject, message)
                delivered += 1
            except Exception as exc:  # noqa: BLE001
                logger.exception("Failed to deliver notification via %s", type(notifier).__name__)
                last_error = exc

        if delivered == 0 and last_error is not None:
            raise last_error


def build_notifier(config: AppConfig) -> CompositeNotifier | None:
    """Construct a notifier from the configured channels."""
    notifiers: list[Notifier] = []

    if config.email is not None:
        notifiers.append(EmailNotifier(settings=config.email))

    if config.slack_webhook:
        notifiers.append(SlackNotifier(webhook_url=config.slack_webhook))

    if not notifiers:
        return None
    return CompositeNotifier(notifiers=notifiers)


def _format_entry(title: str, listing: Listing) -> str:
    if title == "New Entries":
        return f"{listing.name} - {listing.url}"
    return listing.name


def format_subject(site: SiteConfig) -> str:
    return f"🐕 {site.name} - Change Notification"


def format_report(changes: ChangeSet, site: SiteConfig) -> str | None:
    """Render a change set as a plain-text report, or None if nothing changed."""
    if not changes.has_changes:
        return None

    lines = [REPORT_INTRO, ""]
    for title, listings in changes.categories():
        if not listings:
            continue
        lines.append(f"--- {title} ---")
        lines.extend(_format_entry(title, listing) for listing in listings)
        lines.append("")
    return "\n".join(lines)


def notify_changes(
    notifier: Notifier | None,
    changes: ChangeSet,
    site: SiteConfig,
) -> bool:
    """Deliver the report for one site. Returns True when a message was sent."""
    message = format_report(changes, site)
    if message is None:
        logger.info("No changes detected for %s; skipping notification", site.name)
        return False
    if notifier is None:
        logger.info("No notification channel configured; report for %s not sent", site.name)
        return False

    try:
        notifier.send(format_subject(site), message)
    except Exception:  # noqa: BLE001
        logger.exception("Failed to send change notification for %s", site.name)
        return False
    logger.info("Change notification sent for %s", site.name)
    return True


__all__ = [
    "CompositeNotifier",
    "EmailNotifier",
    "Notifier",
    "SlackNotifier",
    "build_notifier",
    "format_report",
    "format_subject",
    "notify_changes",
]
