"""
Email notifications

Renders a release decision into an HTML + plain-text email and relays it
over SMTP. Delivery runs in a worker thread so the event loop is not blocked.
"""

import asyncio
import smtplib
from email.message import EmailMessage
from typing import Optional

import structlog
from jinja2 import Environment, select_autoescape

from greenlight.core.config import Settings, settings
from greenlight.database.models.release import Release, ReleaseStatus, ReleaseType

logger = structlog.get_logger(__name__)

_env = Environment(autoescape=select_autoescape(default_for_string=True, default=True))

HTML_TEMPLATE = """<!DOCTYPE html>
<html>
  <head><meta charset="UTF-8"></head>
  <body style="font-family: -apple-system, 'Segoe UI', Roboto, Arial, sans-serif; color: #1F2937;">
    <div style="max-width: 600px; margin: 0 auto; padding: 20px;">
      <h2 style="color: #059669;">Greenlight &middot; {{ app_name }} Release Management</h2>
      <p>
        <span style="background-color: {{ status_color }}; color: white; padding: 4px 10px; border-radius: 9999px;">
          {{ status_emoji }} {{ status_label }}
        </span>
        <span style="background-color: {{ type_color }}; color: white; padding: 4px 10px; border-radius: 9999px;">
          {{ release.release_type.value }}
        </span>
        <span style="margin-left: 16px;">{{ release.release_date.isoformat() }}</span>
      </p>
      <p><strong>Action:</strong> {{ action }}</p>
      <p><strong>By:</strong> {{ actor }}</p>
      {% if is_no_go %}
      <h3>NO GO Explanation</h3>
      <div style="padding: 16px; background-color: #FEE2E2; color: #991B1B; border-radius: 8px;">{{ release.explanation or "" }}</div>
      {% endif %}
      {% if release.tickets %}
      <h3>{{ tickets_title }}</h3>
      {% for ticket in release.tickets %}
      <div style="padding: 12px; background-color: #F3F4F6; border-radius: 8px; margin-bottom: 8px;">
        {% if ticket.ticket_url %}<a href="{{ ticket.ticket_url }}" style="color: #059669;">{{ ticket.ticket_key }}</a>{% else %}{{ ticket.ticket_key }}{% endif %}
        {% if ticket.ticket_summary %}<div style="color: #4B5563; font-size: 14px;">{{ ticket.ticket_summary }}</div>{% endif %}
      </div>
      {% endfor %}
      {% endif %}
      <p style="text-align: center; font-size: 14px; color: #6B7280;">
        This is an automated notification from {{ app_name }} Release Management
      </p>
    </div>
  </body>
</html>
"""

TEXT_TEMPLATE = """{{ app_name }} Release {{ action }}

Status: {{ status_label }}
Type: {{ release.release_type.value }}
Date: {{ release.release_date.isoformat() }}
By: {{ actor }}
{% if is_no_go %}
NO GO Explanation:
{{ release.explanation or "" }}
{% endif %}{% if release.tickets %}
{{ tickets_title }}:
{% for ticket in release.tickets %}- {{ ticket.ticket_key }}{% if ticket.ticket_summary %}: {{ ticket.ticket_summary }}{% endif %}{% if ticket.ticket_url %} ({{ ticket.ticket_url }}){% endif %}
{% endfor %}{% endif %}"""


def status_label(status: ReleaseStatus) -> str:
    return status.value.replace("_", " ")


def build_subject(app_name: str, release: Release, action: str) -> str:
    emoji = "✅" if release.status == ReleaseStatus.GO else "❌"
    return (
        f"{emoji} {app_name} Release {action}: {status_label(release.status)} "
        f"{release.release_type.value} for {release.release_date.isoformat()}"
    )


class EmailNotifier:
    """Notification sink backed by an SMTP relay"""

    def __init__(self, config: Optional[Settings] = None):
        self.config = config or settings
        self.html_template = _env.from_string(HTML_TEMPLATE)
        # Plain text must not be HTML-escaped
        self.text_template = Environment(autoescape=False).from_string(TEXT_TEMPLATE)

    @property
    def enabled(self) -> bool:
        return bool(
            self.config.NOTIFICATIONS_ENABLED
            and self.config.notification_recipients
            and self.config.SMTP_HOST
        )

    def build_message(self, release: Release, action: str, actor: str) -> EmailMessage:
        is_go = release.status == ReleaseStatus.GO
        is_hotfix = release.release_type == ReleaseType.HOTFIX
        context = {
            "app_name": self.config.APP_NAME,
            "release": release,
            "action": action,
            "actor": actor,
            "status_label": status_label(release.status),
            "status_emoji": "✅" if is_go else "❌",
            "status_color": "#059669" if is_go else "#DC2626",
            "type_color": "#D97706" if is_hotfix else "#2563EB",
            "is_no_go": release.status == ReleaseStatus.NO_GO,
            "tickets_title": "Tickets to Hotfix" if is_hotfix else "Excluded Tickets",
        }

        message = EmailMessage()
        message["Subject"] = build_subject(self.config.APP_NAME, release, action)
        message["From"] = self.config.NOTIFICATION_EMAIL_FROM
        message["To"] = ", ".join(self.config.notification_recipients)
        message.set_content(self.text_template.render(**context))
        message.add_alternative(self.html_template.render(**context), subtype="html")
        return message

    def _deliver(self, message: EmailMessage) -> None:
        with smtplib.SMTP(
            self.config.SMTP_HOST,
            self.config.SMTP_PORT,
            timeout=self.config.SMTP_TIMEOUT_SECONDS,
        ) as smtp:
            if self.config.SMTP_STARTTLS:
                smtp.starttls()
            if self.config.SMTP_USERNAME:
                smtp.login(self.config.SMTP_USERNAME, self.config.SMTP_PASSWORD)
            smtp.send_message(message)

    async def send(self, release: Release, action: str, actor: str) -> bool:
        """
        Email the release to the configured recipients

        Returns:
            False when notifications are disabled, True once relayed.
            SMTP errors propagate.
        """
        log = logger.bind(release_id=release.id, action=action)

        if not self.enabled:
            log.debug("notification_skipped")
            return False

        message = self.build_message(release, action, actor)
        await asyncio.to_thread(self._deliver, message)

        log.info("notification_sent", recipients=len(self.config.notification_recipients))
        return True
