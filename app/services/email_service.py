# food_delivery_api/app/services/email_service.py
import asyncio
import functools
import traceback
from typing import Any, Dict, Optional, Protocol

import emails
from emails.template import JinjaTemplate
from loguru import logger

from app.core.config import settings
from app.core.exceptions import NotificationError


async def send_email_async(
    email_to: str,
    subject_template: str = "",
    html_template: str = "",
    environment: Optional[Dict[str, Any]] = None,
) -> bool:
    """Sends an email without blocking the event loop. Returns True on SMTP success."""
    assert settings.EMAIL_FROM, "EMAIL_FROM must be configured"

    message = emails.Message(
        subject=JinjaTemplate(subject_template),
        html=JinjaTemplate(html_template),
        mail_from=(settings.EMAIL_FROM_NAME, settings.EMAIL_FROM),
    )

    smtp_options: Dict[str, Any] = {
        "host": settings.EMAIL_HOST,
        "port": settings.EMAIL_PORT,
        "tls": settings.EMAIL_USE_TLS,
        "ssl": settings.EMAIL_USE_SSL,
    }
    if settings.EMAIL_USERNAME:
        smtp_options["user"] = settings.EMAIL_USERNAME
    if settings.EMAIL_PASSWORD:
        smtp_options["password"] = settings.EMAIL_PASSWORD

    logger.debug(f"Connecting to SMTP {smtp_options['host']}:{smtp_options['port']}")

    try:
        # 'emails' is blocking, run it on the default thread pool
        loop = asyncio.get_running_loop()
        response = await loop.run_in_executor(
            None,
            functools.partial(message.send, to=email_to, render=environment or {}, smtp=smtp_options),
        )
    except Exception as e:
        logger.error(f"Error sending email to {email_to}: {e}")
        logger.error(f"Traceback: {traceback.format_exc()}")
        return False

    if not response:
        logger.warning(f"Failed to send email to {email_to}: empty SMTP response.")
        return False
    logger.info(f"Email sent to {email_to}, subject: {subject_template}. SMTP status: {response.status_code}")
    # 250 OK, 252 Cannot VRFY
    return response.status_code in [250, 252]


async def send_reset_code_email(email_to: str, reset_code: str) -> bool:
    project_name = settings.PROJECT_NAME
    subject = f"{project_name} - Password reset code"

    html_content = """
    <html>
    <body>
        <p>Hello,</p>
        <p>We received a request to reset your {{ project_name }} password.</p>
        <p>Your reset code is: <strong>{{ reset_code }}</strong></p>
        <p>The code expires in {{ expire_minutes }} minutes.</p>
        <p>If you did not request a password reset, please ignore this email.</p>
    </body>
    </html>
    """

    return await send_email_async(
        email_to=email_to,
        subject_template=subject,
        html_template=html_content,
        environment={
            "project_name": project_name,
            "reset_code": reset_code,
            "expire_minutes": settings.RESET_CODE_EXPIRE_MINUTES,
        },
    )


class Notifier(Protocol):
    async def send_reset_code(self, email: str, code: str) -> None:
        ...


class EmailNotifier:
    async def send_reset_code(self, email: str, code: str) -> None:
        if not await send_reset_code_email(email_to=email, reset_code=code):
            raise NotificationError(f"reset code email to {email} was not delivered")
