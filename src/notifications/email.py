import asyncio
import logging
import re
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr, formatdate, make_msgid
from pathlib import Path

import aiosmtplib
from jinja2 import Environment, FileSystemLoader

from src.core.config import settings

logger = logging.getLogger(__name__)

_template_dir = Path(__file__).parent / "templates"
_jinja_env = Environment(loader=FileSystemLoader(str(_template_dir)), autoescape=True)

ALLOWED_TEMPLATES = {
    "cart_item_added.html",
}

SENDER_NAME = "OptyShop"

_RETRY_DELAYS = (1, 2, 4)
_SMTP_TIMEOUT_SECONDS = 30

_TRANSIENT_EXCEPTIONS = (
    aiosmtplib.SMTPConnectError,
    aiosmtplib.SMTPConnectTimeoutError,
    aiosmtplib.SMTPServerDisconnected,
)


def _sanitize_header(value: str) -> str:
    """Strip newline characters to prevent email header injection."""
    return value.replace("\r", "").replace("\n", "")


def _html_to_plaintext(html_body: str) -> str:
    text = re.sub(r"<br\s*/?>", "\n", html_body)
    text = re.sub(r"</(?:p|div|tr|li|h[1-6])>", "\n", text)
    text = re.sub(r"<[^>]+>", "", text)
    text = re.sub(r"[ \t]+", " ", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def mask_email(address: str) -> str:
    """Mask an email address for logging."""
    if "@" in address:
        local, domain = address.split("@", 1)
        return local[:2] + "***@" + domain
    return "***"


def _smtp_config() -> dict:
    port = settings.smtp_port
    return {
        "hostname": settings.smtp_host,
        "port": port,
        "username": settings.smtp_username or None,
        "password": settings.smtp_password or None,
        "start_tls": settings.smtp_use_tls and port != 465,
        "use_tls": port == 465,
        "timeout": _SMTP_TIMEOUT_SECONDS,
    }


async def _send_with_retry(message: MIMEMultipart, smtp: dict) -> None:
    """Send, retrying transient SMTP failures with a growing delay."""
    last_exc: Exception | None = None
    for attempt, delay in enumerate(_RETRY_DELAYS, 1):
        try:
            await aiosmtplib.send(message, **smtp)
            return
        except aiosmtplib.SMTPResponseException as exc:
            if exc.code >= 500:
                raise
            last_exc = exc
        except _TRANSIENT_EXCEPTIONS as exc:
            last_exc = exc
        logger.warning("Transient SMTP error (attempt %d/%d): %s", attempt, len(_RETRY_DELAYS), last_exc)
        if attempt < len(_RETRY_DELAYS):
            await asyncio.sleep(delay)
    raise last_exc  # type: ignore[misc]


def render_message(to: str, subject: str, template_name: str, context: dict) -> MIMEMultipart:
    if "\n" in to or "\r" in to:
        raise ValueError("Invalid email recipient: contains newline characters")

    context.setdefault("frontend_url", settings.frontend_url)
    html_body = _jinja_env.get_template(template_name).render(**context)

    from_address = settings.smtp_from_address
    message = MIMEMultipart("alternative")
    message["From"] = formataddr((SENDER_NAME, from_address))
    message["To"] = to
    message["Subject"] = _sanitize_header(subject)
    message["Date"] = formatdate(localtime=True)
    domain = from_address.split("@")[-1] if "@" in from_address else "localhost"
    message["Message-ID"] = make_msgid(domain=domain)
    message.attach(MIMEText(_html_to_plaintext(html_body), "plain"))
    message.attach(MIMEText(html_body, "html"))
    return message


async def send_email(to: str, subject: str, template_name: str, context: dict) -> bool:
    """Render and send one email. Returns False instead of raising on any failure."""
    smtp = _smtp_config()
    if not smtp["hostname"]:
        logger.debug("SMTP not configured, skipping email to %s", mask_email(to))
        return False

    if template_name not in ALLOWED_TEMPLATES:
        logger.error("Blocked email with disallowed template: %s", template_name)
        return False

    try:
        message = render_message(to, subject, template_name, context)
        await _send_with_retry(message, smtp)
    except Exception:
        logger.exception("Failed to send email to %s", mask_email(to))
        return False
    logger.info("Email sent to %s: %s", mask_email(to), subject)
    return True
