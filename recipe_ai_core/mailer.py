"""
recipe_ai_core.mailer
=====================

Envío de emails transaccionales por SMTP (notificación a admins de nuevos
registros y links de reseteo de contraseña).

Si `EMAIL_SERVER_HOST` no está configurado, el envío se omite y se loguea
un warning. Los errores de envío nunca son fatales para el flujo que los
dispara: quien llama decide si los ignora (ver `notify_admins_new_user`).
"""

from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage
from typing import Iterable

from .config import get_settings

logger = logging.getLogger(__name__)


def send_email(to: str, subject: str, text: str, html: str | None = None) -> bool:
    """
    Envía un email. Devuelve False si el SMTP no está configurado.

    Raises
    ------
    smtplib.SMTPException, OSError
        Si el servidor rechaza el envío o no se puede conectar.
    """
    settings = get_settings()
    if not settings.email_server_host:
        logger.warning(f"SMTP no configurado; se omite email a {to} ({subject})")
        return False

    msg = EmailMessage()
    msg["Subject"] = subject
    msg["From"] = settings.email_from or settings.email_server_user
    msg["To"] = to
    msg.set_content(text)
    if html:
        msg.add_alternative(html, subtype="html")

    smtp_cls = smtplib.SMTP_SSL if settings.email_server_secure else smtplib.SMTP
    with smtp_cls(settings.email_server_host, settings.email_server_port, timeout=30) as server:
        if not settings.email_server_secure:
            server.starttls()
        if settings.email_server_user:
            server.login(settings.email_server_user, settings.email_server_password)
        server.send_message(msg)

    logger.info(f"Email enviado a {to}: {subject}")
    return True


def notify_admins_new_user(admin_emails: Iterable[str], new_user_email: str, display_name: str | None) -> int:
    """
    Avisa a cada admin que hay un usuario pendiente de aprobación.

    Returns
    -------
    int
        Cantidad de emails enviados efectivamente.
    """
    settings = get_settings()
    admin_url = f"{settings.app_base_url}/admin"
    name = display_name or new_user_email
    subject = "New user awaiting approval"
    text = (
        f"A new user has registered and is waiting for approval.\n\n"
        f"Name: {name}\nEmail: {new_user_email}\n\n"
        f"Review pending users at {admin_url}\n"
    )

    sent = 0
    for email in admin_emails:
        try:
            if send_email(email, subject, text):
                sent += 1
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"No se pudo notificar al admin {email}: {e}")
    return sent


def send_password_reset(email: str, token: str) -> bool:
    settings = get_settings()
    link = f"{settings.app_base_url}/reset-password?token={token}"
    text = (
        "You requested a password reset.\n\n"
        f"Open this link to choose a new password (valid for "
        f"{settings.reset_token_ttl_minutes} minutes):\n{link}\n\n"
        "If you did not request it, you can ignore this email.\n"
    )
    html = f'<p>You requested a password reset.</p><p><a href="{link}">Reset your password</a></p>'
    return send_email(email, "Password reset", text, html)
