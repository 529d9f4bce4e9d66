"""
Email Service - OTP delivery through SendGrid
"""
import asyncio
import logging

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail

from app.config import settings

logger = logging.getLogger(__name__)


def _build_otp_message(email: str, otp: str) -> Mail:
    minutes = settings.OTP_EXPIRE_MINUTES
    return Mail(
        from_email=settings.MAIL_FROM_EMAIL,
        to_emails=email,
        subject="Your password reset code",
        html_content=(
            f"<p>Use the code below to reset your password.</p>"
            f"<h2>{otp}</h2>"
            f"<p>The code expires in {minutes} minutes. "
            f"If you did not request a reset you can ignore this email.</p>"
        ),
    )


async def send_otp_email(email: str, otp: str) -> bool:
    """
    Send the one-time code to the user.
    Returns True when the message was accepted for delivery.
    """
    if not settings.email_configured:
        if settings.ENVIRONMENT == "development":
            # Local runs without SendGrid still need a usable code
            logger.warning(f"SendGrid not configured. OTP for {email}: {otp}")
            return True
        logger.error("SendGrid not configured; cannot deliver OTP email")
        return False

    message = _build_otp_message(email, otp)
    try:
        client = SendGridAPIClient(settings.SENDGRID_API_KEY)
        # The SendGrid client is blocking
        loop = asyncio.get_running_loop()
        response = await loop.run_in_executor(None, client.send, message)
        logger.info(f"OTP email sent to {email}, status: {response.status_code}")
        return 200 <= response.status_code < 300
    except Exception as e:
        logger.error(f"Error sending OTP email via SendGrid: {str(e)}")
        return False
