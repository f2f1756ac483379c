"""
Notification channel senders. Each formats a batch of slot changes into one message and
delivers it; send() raises on any failure so the dispatcher does not log the slots as sent.

- email: HTML + plain digest over SMTP (SMTP_USER / SMTP_PASSWORD in .env; Gmail App Password works).
- chat: Telegram Bot API sendMessage (TELEGRAM_BOT_TOKEN in .env); destination is the chat id.
"""
import html
import logging
import smtplib
from datetime import date
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Any

import httpx

from courtwatch.config import settings
from courtwatch.core.constants import CHANNEL_CHAT, CHANNEL_EMAIL, CHANNEL_TYPE_ALIASES
from courtwatch.core.errors import ChannelNotConfigured, ChannelSendError, UnsupportedChannelError
from courtwatch.core.venues import booking_url
from courtwatch.services.differ import SlotChange

logger = logging.getLogger(__name__)

# Cap on slot lines per message; the rest are summarized
MAX_SLOTS_PER_MESSAGE = 40


def _from_address() -> str:
    if settings.notify_from:
        return settings.notify_from
    if settings.smtp_user:
        return f"Court Watch <{settings.smtp_user}>"
    return "Court Watch <noreply@localhost>"


def _group_by_venue_date(changes: list[SlotChange]) -> list[tuple[SlotChange, list[SlotChange]]]:
    """[(first change of group, changes sorted by time)] per (venue, date), in first-seen order."""
    groups: dict[tuple[str, str], list[SlotChange]] = {}
    for c in changes:
        groups.setdefault((c.venue, c.date), []).append(c)
    return [(items[0], sorted(items, key=lambda c: (c.time.lower(), c.court))) for items in groups.values()]


def _format_date(date_str: str, long: bool = True) -> str:
    d = date.fromisoformat(date_str)
    if long:
        return f"{d.strftime('%A')} {d.day} {d.strftime('%B')}"
    return f"{d.strftime('%a')} {d.day} {d.strftime('%b')}"


def send_email(to_email: str, subject: str, text_body: str, html_body: str | None = None) -> None:
    """Send one email via SMTP. Raises ChannelNotConfigured / ChannelSendError."""
    to_email = (to_email or "").strip()
    if not to_email:
        raise ChannelSendError("Empty email destination")
    if not settings.smtp_user or not settings.smtp_password:
        raise ChannelNotConfigured("SMTP_USER or SMTP_PASSWORD not set")
    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = _from_address()
    msg["To"] = to_email
    msg.attach(MIMEText(text_body, "plain"))
    if html_body:
        msg.attach(MIMEText(html_body, "html"))
    try:
        with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=10) as server:
            server.starttls()
            server.login(settings.smtp_user, settings.smtp_password)
            server.sendmail(settings.smtp_user, [to_email], msg.as_string())
    except (smtplib.SMTPException, OSError) as e:
        raise ChannelSendError(f"SMTP send to {to_email} failed: {e}") from e
    logger.info("Email sent to %s: %s", to_email, subject)


class EmailChannel:
    """Digest email: one section per venue/date with its slots and a booking button."""

    type = CHANNEL_EMAIL

    def format(self, changes: list[SlotChange]) -> dict[str, str]:
        n = len(changes)
        subject = f"{n} tennis court{'s' if n != 1 else ''} now available"
        text_lines = [f"{n} slot{'s' if n != 1 else ''} just became available:", ""]
        html_parts = [
            "<div style=\"font-family:sans-serif;max-width:600px;margin:0 auto;padding:20px\">",
            f"<h1 style=\"color:#16a34a\">Tennis courts available</h1>"
            f"<p style=\"color:#6b7280\">{n} slot{'s' if n != 1 else ''} just became available</p>",
        ]
        shown = 0
        for first, items in _group_by_venue_date(changes):
            when = _format_date(first.date)
            url = booking_url(first.venue, first.date)
            text_lines.append(f"{first.venue_name} - {when}")
            html_parts.append(
                "<div style=\"margin-bottom:24px;padding:16px;border:1px solid #e5e7eb;border-radius:12px\">"
                f"<h2 style=\"margin:0\">{html.escape(first.venue_name)}</h2>"
                f"<p style=\"color:#6b7280;margin:4px 0 12px\">{html.escape(when)}</p><ul>"
            )
            for c in items:
                if shown >= MAX_SLOTS_PER_MESSAGE:
                    break
                price = f" ({c.price})" if c.price else ""
                text_lines.append(f"  • {c.time} - {c.court}{price}")
                html_parts.append(
                    f"<li>{html.escape(c.time)} - <strong>{html.escape(c.court)}</strong>{html.escape(price)}</li>"
                )
                shown += 1
            text_lines.append(f"  Book: {url}")
            text_lines.append("")
            html_parts.append(
                f"</ul><a href=\"{html.escape(url, quote=True)}\" style=\"display:inline-block;padding:10px 20px;"
                f"background:#16a34a;color:#fff;text-decoration:none;border-radius:8px\">"
                f"Book {html.escape(first.venue_name)} →</a></div>"
            )
        if n > shown:
            text_lines.append(f"... and {n - shown} more")
            html_parts.append(f"<p>... and {n - shown} more</p>")
        manage_url = f"{settings.app_base_url.rstrip('/')}/dashboard?tab=settings"
        text_lines.append(f"Manage your alerts: {manage_url}")
        html_parts.append(
            f"<p style=\"color:#9ca3af;font-size:12px\">You're receiving this because you set up a court alert. "
            f"<a href=\"{html.escape(manage_url, quote=True)}\">Manage your alerts</a></p></div>"
        )
        return {"subject": subject, "text": "\n".join(text_lines), "html": "".join(html_parts)}

    def send(self, destination: str, message: dict[str, str]) -> None:
        send_email(destination, message["subject"], message["text"], message.get("html"))


class ChatChannel:
    """Telegram message in HTML parse mode. Only &, < and > need escaping there."""

    type = CHANNEL_CHAT

    def format(self, changes: list[SlotChange]) -> str:
        lines = ["<b>Tennis courts now available!</b>", ""]
        shown = 0
        for first, items in _group_by_venue_date(changes):
            lines.append(f"<b>{html.escape(first.venue_name, quote=False)}</b> - {_format_date(first.date, long=False)}")
            for c in items:
                if shown >= MAX_SLOTS_PER_MESSAGE:
                    break
                price = f" ({c.price})" if c.price else ""
                lines.append(f"  • {html.escape(c.time, quote=False)} - {html.escape(c.court + price, quote=False)}")
                shown += 1
            lines.append(f"  <a href=\"{html.escape(booking_url(first.venue, first.date), quote=True)}\">Book</a>")
            lines.append("")
        if len(changes) > shown:
            lines.append(f"... and {len(changes) - shown} more")
        return "\n".join(lines).rstrip()

    def send(self, destination: str, message: str) -> None:
        token = settings.telegram_bot_token
        if not token:
            raise ChannelNotConfigured("TELEGRAM_BOT_TOKEN not set")
        url = f"{settings.telegram_api_base.rstrip('/')}/bot{token}/sendMessage"
        payload = {
            "chat_id": destination,
            "text": message,
            "parse_mode": "HTML",
            "disable_web_page_preview": True,
        }
        try:
            with httpx.Client(timeout=10.0) as client:
                resp = client.post(url, json=payload)
        except httpx.HTTPError as e:
            raise ChannelSendError(f"Telegram request failed: {e}") from e
        if not resp.is_success:
            raise ChannelSendError(f"Telegram API error {resp.status_code}: {resp.text[:300]}")
        logger.info("Telegram message sent to chat %s", destination)


_channels: dict[str, Any] = {
    CHANNEL_EMAIL: EmailChannel(),
    CHANNEL_CHAT: ChatChannel(),
}


def normalize_channel_type(channel_type: str) -> str:
    t = (channel_type or "").strip().lower()
    return CHANNEL_TYPE_ALIASES.get(t, t)


def register_channel(channel_type: str, sender: Any) -> None:
    """Register (or replace) the sender for a channel type."""
    _channels[normalize_channel_type(channel_type)] = sender


def get_channel(channel_type: str) -> Any:
    """Sender for a channel type. Raises UnsupportedChannelError if none is registered."""
    sender = _channels.get(normalize_channel_type(channel_type))
    if sender is None:
        raise UnsupportedChannelError(f"Unsupported notification channel type: {channel_type}")
    return sender
