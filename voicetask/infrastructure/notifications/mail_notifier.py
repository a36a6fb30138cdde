from __future__ import annotations

import asyncio
import logging
from html import escape

from fastapi_mail import ConnectionConfig, FastMail, MessageSchema, MessageType

from voicetask.application.ports.notification_port import NotificationPort
from voicetask.shared.config import Settings

logger = logging.getLogger(__name__)


class MailTrialNotifier(NotificationPort):
    def __init__(self, *, settings: Settings):
        self._settings = settings
        self._config: ConnectionConfig | None = None

    @property
    def configured(self) -> bool:
        return bool(self._settings.mail_server and self._settings.mail_from)

    def send_trial_expiry_notice(
        self,
        *,
        to: str,
        workspace_name: str,
        days_remaining: int,
        billing_url: str,
    ) -> bool:
        if not self.configured:
            logger.info("Mail is not configured; skipping trial notice to %s.", to)
            return False

        message = MessageSchema(
            subject=trial_notice_subject(workspace_name=workspace_name, days_remaining=days_remaining),
            recipients=[to],
            body=trial_notice_html(
                workspace_name=workspace_name,
                days_remaining=days_remaining,
                billing_url=billing_url,
            ),
            subtype=MessageType.html,
        )
        try:
            asyncio.run(FastMail(self._connection_config()).send_message(message))
        except Exception as exc:
            logger.warning("Failed to send trial notice to %s: %s", to, exc)
            return False
        return True

    def _connection_config(self) -> ConnectionConfig:
        if self._config is None:
            settings = self._settings
            self._config = ConnectionConfig(
                MAIL_USERNAME=settings.mail_username,
                MAIL_PASSWORD=settings.mail_password,
                MAIL_FROM=settings.mail_from,
                MAIL_PORT=settings.mail_port,
                MAIL_SERVER=settings.mail_server,
                MAIL_STARTTLS=settings.mail_starttls,
                MAIL_SSL_TLS=settings.mail_ssl_tls,
                USE_CREDENTIALS=bool(settings.mail_username),
            )
        return self._config


def trial_notice_subject(*, workspace_name: str, days_remaining: int) -> str:
    if days_remaining <= 0:
        return f"Your trial for {workspace_name} has expired"
    unit = "day" if days_remaining == 1 else "days"
    return f"Your trial for {workspace_name} ends in {days_remaining} {unit}"


def trial_notice_html(*, workspace_name: str, days_remaining: int, billing_url: str) -> str:
    name = escape(workspace_name)
    url = escape(billing_url, quote=True)
    if days_remaining <= 0:
        headline = f"The free trial for <strong>{name}</strong> has ended."
        prompt = "Choose a plan to keep working with your team and projects."
    else:
        unit = "day" if days_remaining == 1 else "days"
        headline = f"The free trial for <strong>{name}</strong> ends in {days_remaining} {unit}."
        prompt = "Pick a plan before then so nothing in your workspace is interrupted."
    return f"""
    <html>
        <body>
            <h2>{headline}</h2>
            <p>{prompt}</p>
            <p><a href="{url}">Go to billing</a></p>
        </body>
    </html>
    """
