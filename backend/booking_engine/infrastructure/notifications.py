from __future__ import annotations

import logging
from typing import Any, Mapping

import httpx

from ..config import Settings
from ..domain.repositories import GUEST_CANCELLATION, GUEST_CONFIRMATION, VENUE_NEW_BOOKING, Notifier

logger = logging.getLogger(__name__)


def render(template: str, payload: Mapping[str, Any]) -> tuple[str, str]:
    """Return (subject, html) for a notification template."""
    unit_name = payload.get("unit_name", "")
    name = payload.get("name", "")
    if template == GUEST_CONFIRMATION:
        if payload.get("locale") == "hu":
            subject = f"Foglalási kérés a {unit_name} étterembe"
        else:
            subject = f"Reservation request for {unit_name}"
        html = (
            f"<p>Dear {name},</p>"
            f"<p>Thank you for your reservation for {payload.get('headcount')} guests "
            f"on {payload.get('start_time')}.</p>"
            f"<p>Status: {payload.get('status')}</p>"
            f"<p>Reference: {payload.get('reference_code')}</p>"
            f"<p><a href=\"{payload.get('manage_url')}\">Manage your reservation</a></p>"
        )
        return subject, html
    if template == VENUE_NEW_BOOKING:
        subject = f"New reservation request - {unit_name}"
        html = (
            f"<p>A new reservation arrived for {unit_name}.</p>"
            f"<p><strong>Name:</strong> {name}</p>"
            f"<p><strong>Guests:</strong> {payload.get('headcount')}</p>"
            f"<p><strong>Time:</strong> {payload.get('start_time')}</p>"
        )
        return subject, html
    if template == GUEST_CANCELLATION:
        subject = f"Reservation cancelled - {unit_name}"
        html = f"<p>Dear {name},</p><p>Your reservation on {payload.get('start_time')} has been cancelled.</p>"
        return subject, html
    raise ValueError(f"unknown notification template: {template}")


class EmailNotifier(Notifier):
    def __init__(self, settings: Settings, client: httpx.AsyncClient | None = None) -> None:
        self.settings = settings
        self.client = client

    async def send(self, target: str | list[str], template: str, payload: Mapping[str, Any]) -> None:
        subject, html = render(template, payload)
        recipients = [target] if isinstance(target, str) else list(target)
        if self.settings.email_provider == "mock":
            logger.info("mock email to=%s subject=%r", recipients, subject)
            return
        if self.settings.email_provider != "http" or not self.settings.email_endpoint:
            raise RuntimeError(f"email provider {self.settings.email_provider!r} is not configured")

        message = {"from": self.settings.email_from, "to": recipients, "subject": subject, "html": html}
        if self.client is not None:
            response = await self.client.post(self.settings.email_endpoint, json=message)
        else:
            async with httpx.AsyncClient(timeout=10.0) as client:
                response = await client.post(self.settings.email_endpoint, json=message)
        response.raise_for_status()
