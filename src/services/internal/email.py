import smtplib
from datetime import datetime
from email.message import EmailMessage
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from src.core.config import settings
from src.util.logger import logger

TEMPLATE_PATH = Path(__file__).parent.parent.parent / "templates" / "emails"


def _deletion_date(value: datetime) -> str:
    return value.strftime("%B %d, %Y at %H:%M UTC")


env = Environment(
    loader=FileSystemLoader(TEMPLATE_PATH),
    autoescape=select_autoescape(["html", "html.j2"]),
)
env.filters["deletion_date"] = _deletion_date


def render_template(template_name: str, context: dict) -> tuple[str, str]:
    """Render `<name>.txt.j2` and its `.html.j2` sibling inside the base layouts"""
    context = {"app_name": settings.app_name, **context}
    body_text = env.get_template(template_name).render(**context)
    body_html = env.get_template(template_name.replace(".txt.j2", ".html.j2")).render(**context)
    text = env.get_template("base.txt.j2").render(body=body_text, **context)
    html = env.get_template("base.html.j2").render(body=body_html, **context)
    return text, html


class Mailer:
    """
    Account notification emails.

    Every send is fire-and-forget: failures are logged and reported as False,
    never raised into the request that triggered them.
    With SMTP disabled the message is only logged (recipient and subject).
    """

    def _build_message(self, to_email: str, subject: str, text_body: str, html_body: str | None = None) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = settings.mail_from
        msg["To"] = to_email
        msg.set_content(text_body)
        if html_body:
            msg.add_alternative(html_body, subtype="html")
        return msg

    def send(self, to_email: str, subject: str, text_body: str, html_body: str | None = None) -> bool:
        if not settings.smtp_enabled:
            logger.info("SMTP disabled, not sending '%s' to %s", subject, to_email)
            return False

        msg = self._build_message(to_email, subject, text_body, html_body)
        try:
            with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=10) as smtp:
                if settings.smtp_use_tls:
                    smtp.starttls()
                if settings.smtp_username and settings.smtp_password:
                    smtp.login(settings.smtp_username, settings.smtp_password)
                smtp.send_message(msg)
            return True
        except (smtplib.SMTPException, OSError) as e:
            logger.warning("Email send to %s failed: %s", to_email, e)
            return False

    def _send_template(self, to_email: str, subject: str, template_name: str, **context) -> bool:
        text_body, html_body = render_template(template_name, {"subject": subject, **context})
        return self.send(to_email, subject, text_body, html_body)

    # region email change

    def send_email_change_verification(self, to_email: str, token: str, ttl_minutes: int) -> bool:
        return self._send_template(
            to_email,
            "Verify Your New Email Address",
            "email_change_verification.txt.j2",
            token=token,
            ttl_minutes=ttl_minutes,
        )

    def send_email_change_alert(self, to_email: str, new_email: str) -> bool:
        return self._send_template(
            to_email, "Email Change Requested", "email_change_alert.txt.j2", new_email=new_email
        )

    def send_email_changed_notice(self, to_email: str, new_email: str) -> bool:
        return self._send_template(
            to_email, "Your Email Address Was Changed", "email_changed_notice.txt.j2", new_email=new_email
        )

    def send_email_changed_confirmation(self, to_email: str) -> bool:
        return self._send_template(to_email, "Email Address Confirmed", "email_changed_confirmation.txt.j2")

    # endregion

    def send_password_changed(self, to_email: str) -> bool:
        return self._send_template(to_email, "Your Password Was Changed", "password_changed.txt.j2")

    # region account deletion

    def send_deletion_requested(self, to_email: str, scheduled_at: datetime, days_remaining: int) -> bool:
        return self._send_template(
            to_email,
            "Account Deletion Requested",
            "account_deletion_requested.txt.j2",
            scheduled_at=scheduled_at,
            days_remaining=days_remaining,
        )

    def send_deletion_cancelled(self, to_email: str) -> bool:
        return self._send_template(to_email, "Account Deletion Cancelled", "account_deletion_cancelled.txt.j2")

    # endregion
