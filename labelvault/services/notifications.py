"""Email messages sent by the platform."""

import logging
from dataclasses import dataclass
from html import escape

from labelvault.core.settings import get_settings
from labelvault.services.mailer import Mailer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmailMessage:
    subject: str
    html: str
    text: str


def _login_url() -> str:
    return f"{get_settings().app_base_url.rstrip('/')}/login"


def welcome_email(name: str, email: str, password: str) -> EmailMessage:
    login_url = _login_url()
    return EmailMessage(
        subject="Your distribution account has been created",
        html=(
            f"<h3>Welcome</h3><p>Hello {escape(name)},</p>"
            f"<p>Your account ({escape(email)}) has been created.</p>"
            f"<p>Temporary Password: <b>{escape(password)}</b></p>"
            f"<p>Please log in at <a href=\"{login_url}\">{login_url}</a> and change your password.</p>"
        ),
        text=(
            f"Hello {name}, your account ({email}) has been created. "
            f"Temporary password: {password}. Log in at {login_url} and change your password."
        ),
    )


def label_registration_email(admin_name: str, label_name: str, admin_email: str, password: str) -> EmailMessage:
    login_url = _login_url()
    return EmailMessage(
        subject=f"Label registration: {label_name}",
        html=(
            f"<h3>Label Registration</h3><p>Hello {escape(admin_name)},</p>"
            f"<p>Your label \"<b>{escape(label_name)}</b>\" has been registered.</p>"
            f"<p>Admin Account Created:</p><ul><li>Email: {escape(admin_email)}</li>"
            f"<li>Password: {escape(password)}</li></ul>"
            f"<p>Please log in at <a href=\"{login_url}\">{login_url}</a> and complete your profile.</p>"
        ),
        text=(
            f"Hello {admin_name}, your label \"{label_name}\" has been registered. "
            f"Email: {admin_email} Password: {password}. Log in at {login_url}."
        ),
    )


def password_reset_email(name: str, password: str) -> EmailMessage:
    login_url = _login_url()
    return EmailMessage(
        subject="Your password has been reset",
        html=(
            f"<p>Hello {escape(name)},</p>"
            f"<p>A password reset was requested for your account.</p>"
            f"<p>Temporary Password: <b>{escape(password)}</b></p>"
            f"<p>Log in at <a href=\"{login_url}\">{login_url}</a> and change it immediately.</p>"
        ),
        text=f"Hello {name}, your temporary password is {password}. Log in at {login_url} and change it.",
    )


def correction_request_email(release_title: str, message: str, author_name: str) -> EmailMessage:
    return EmailMessage(
        subject=f"Action Required: Correction Request for \"{release_title}\"",
        html=(
            f"<p>Our review team needs changes before \"<b>{escape(release_title)}</b>\" "
            f"can be distributed.</p>"
            f"<blockquote>{escape(message)}</blockquote>"
            f"<p>Requested by {escape(author_name)}. Update the release and resubmit it for review.</p>"
        ),
        text=(
            f"Correction requested for \"{release_title}\" by {author_name}: {message}. "
            f"Update the release and resubmit it for review."
        ),
    )


async def send_best_effort(mailer: Mailer, to: str, message: EmailMessage) -> bool:
    """Send a message, logging instead of raising on failure."""
    try:
        await mailer.send_email(to, message.subject, message.html, message.text)
        return True
    except Exception as e:
        logger.error(f"Email '{message.subject}' to {to} was not delivered: {e}")
        return False
