# service/emailer.py
from __future__ import annotations

import smtplib
import ssl
from collections.abc import Mapping
from email.message import EmailMessage
from email.utils import formatdate, make_msgid
from typing import Any

DEFAULT_PORT = 587

# ---- Errors -----------------------------------------------------------------


class EmailSendError(RuntimeError):
    """Raised when an email cannot be delivered."""


# ---- Settings ----------------------------------------------------------------


def _resolve_smtp_settings(smtp: Mapping[str, Any] | None) -> dict:
    """
    Normalize the SMTP bundle (host/port/username/password) from MailConfig.

    The username doubles as the From address.
    """
    smtp = dict(smtp or {})
    try:
        port = int(smtp.get("port") or DEFAULT_PORT)
    except (TypeError, ValueError) as e:
        raise EmailSendError(f"Invalid SMTP port: {e}") from e
    username = smtp.get("username")

    return {
        "host": smtp.get("host"),
        "port": port,
        "username": username,
        "password": smtp.get("password"),
        "from_addr": username or "",
    }


# ---- Helpers ----------------------------------------------------------------


def _build_message(
    *,
    subject: str,
    body: str,
    to: str,
    from_addr: str,
    attachment: bytes,
    attachment_name: str,
) -> EmailMessage:
    if not subject or not subject.strip():
        raise EmailSendError("Missing subject.")
    if not to or not to.strip():
        raise EmailSendError("No recipient.")
    if not from_addr:
        raise EmailSendError("No from address resolved. Set the SMTP username.")

    msg = EmailMessage()
    msg["From"] = from_addr
    msg["To"] = to.strip()
    msg["Subject"] = subject
    msg["Date"] = formatdate(localtime=True)
    msg["Message-ID"] = make_msgid()

    msg.set_content(body or "")
    msg.add_attachment(attachment, maintype="application", subtype="pdf", filename=attachment_name)
    return msg


def _read_attachment(path: str) -> bytes:
    try:
        with open(path, "rb") as f:
            return f.read()
    except OSError as e:
        raise EmailSendError(f"Could not read attachment {path!r}: {e}") from e


def _send_via_smtp(msg: EmailMessage, *, rcpt_to: list[str], settings: dict) -> None:
    host = settings["host"]
    port = settings["port"]
    username = settings["username"]
    password = settings["password"]

    if not (host and username and password):
        raise EmailSendError("Missing SMTP credentials or host.")

    context = ssl.create_default_context()

    try:
        server = smtplib.SMTP(host, port)
        with server:
            server.ehlo()
            server.starttls(context=context)
            server.ehlo()
            server.login(username, password)
            server.send_message(msg, to_addrs=rcpt_to)
    except Exception as e:
        raise EmailSendError(f"SMTP send failed: {e}") from e


# ---- Public API --------------------------------------------------------------


def send_application(
    *,
    subject: str,
    body: str,
    to: str,
    attachment_path: str,
    smtp: Mapping[str, Any] | None = None,
    attachment_name: str = "cv",
) -> str:
    """
    Send one plain-text application email with the résumé attached as a PDF.

    Always upgrades the connection with STARTTLS before logging in.
    One delivery attempt; no retries.

    Returns:
        message_id (str): RFC-822 Message-ID generated by the sender.

    Raises:
        EmailSendError on any failure (attachment/validation/connection/auth/SMTP).
    """
    settings = _resolve_smtp_settings(smtp)
    msg = _build_message(
        subject=subject,
        body=body,
        to=to,
        from_addr=(settings["from_addr"] or "").strip(),
        attachment=_read_attachment(attachment_path),
        attachment_name=attachment_name,
    )
    _send_via_smtp(msg, rcpt_to=[to.strip()], settings=settings)
    return str(msg["Message-ID"])

