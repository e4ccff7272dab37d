from typing import Union
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from starlette.concurrency import run_in_threadpool
import logging
import smtplib
import os
import dotenv


dotenv.load_dotenv()

logger = logging.getLogger(__name__)


def smtp_configured() -> bool:
    return all(
        os.getenv(name)
        for name in ("SMTP_FROM_USER", "SMTP_SERVER", "SMTP_PORT", "SMTP_FROM_ADDRESS", "SMTP_PASSWORD")
    )


def send_email(to_address: str, subject: str, message_html: str) -> bool:
    user = os.getenv("SMTP_FROM_USER")
    smtp_server = os.getenv("SMTP_SERVER")
    smtp_port_str = os.getenv("SMTP_PORT")
    from_address = os.getenv("SMTP_FROM_ADDRESS")
    password = os.getenv('SMTP_PASSWORD')

    assert user is not None
    assert smtp_server is not None
    assert smtp_port_str is not None
    assert from_address is not None
    assert password is not None
    smtp_port = int(smtp_port_str)
    message = MIMEMultipart()
    message["From"] = f'"{user}" <{from_address}>'
    message["To"] = to_address
    message["Subject"] = subject
    message.attach(MIMEText(message_html, "html"))

    try:
        with smtplib.SMTP_SSL(smtp_server, smtp_port) as server:
            server.login(from_address, password)
            server.send_message(message)
            logger.info("Email '%s' sent to %s", subject, to_address)
            return True
    except Exception as e:
        logger.error("Failed to send email to %s: %s", to_address, e)
        return False


def otp_email_html(code: Union[str, int]) -> str:
    return f"""\
    <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
        <h2 style="color: #007bff;">CareNest - Your Health, Our Priority</h2>
        <p>Dear User,</p>
        <p>Your One-Time Password (OTP) for email verification is:</p>
        <div style="background-color: #f0f0f0; padding: 20px; text-align: center; margin: 20px 0; border-radius: 5px;">
            <h1 style="color: #007bff; letter-spacing: 5px;">{code}</h1>
        </div>
        <p>This OTP is valid for 10 minutes. Do not share this with anyone.</p>
        <p>If you didn't request this, please ignore this email.</p>
        <p>Best regards,<br/>CareNest Team</p>
    </div>
    """


def reset_email_html(reset_url: str) -> str:
    return f"""\
    <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
        <h2 style="color: #007bff;">CareNest - Password Reset</h2>
        <p>Dear User,</p>
        <p>We received a request to reset your password. Click the button below to reset it.</p>
        <div style="text-align: center; margin: 30px 0;">
            <a href="{reset_url}" style="background-color: #007bff; color: white; padding: 12px 30px; text-decoration: none; border-radius: 5px; display: inline-block;">
                Reset Password
            </a>
        </div>
        <p>Or copy and paste this link in your browser:</p>
        <p style="word-break: break-all; color: #666;">{reset_url}</p>
        <p><strong>This link will expire in 30 minutes.</strong></p>
        <p>If you didn't request this, please ignore this email and your password will remain unchanged.</p>
        <p>Best regards,<br/>CareNest Team</p>
    </div>
    """


def send_otp_email(to_email: str, code: Union[str, int]) -> bool:
    if not smtp_configured():
        logger.warning("SMTP not configured, OTP for %s: %s", to_email, code)
        return True
    return send_email(to_email, "CareNest - Email Verification OTP", otp_email_html(code))


def send_password_reset_email(to_email: str, reset_url: str) -> bool:
    if not smtp_configured():
        logger.warning("SMTP not configured, password reset URL for %s: %s", to_email, reset_url)
        return True
    return send_email(to_email, "CareNest - Password Reset Request", reset_email_html(reset_url))


async def deliver_otp(to_email: str, code: Union[str, int]) -> bool:
    return await run_in_threadpool(send_otp_email, to_email, code)


async def deliver_password_reset(to_email: str, reset_url: str) -> bool:
    return await run_in_threadpool(send_password_reset_email, to_email, reset_url)
