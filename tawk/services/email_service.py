"""Service for sending emails."""

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

logger = logging.getLogger(__name__)


class EmailService:
    """Service for sending account emails via SMTP."""

    def __init__(
        self,
        smtp_host: str = "",
        smtp_port: int = 587,
        smtp_username: str = "",
        smtp_password: str = "",
        from_email: str = "",
        from_name: str = "Tawk",
    ):
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.smtp_username = smtp_username
        self.smtp_password = smtp_password
        self.from_email = from_email
        self.from_name = from_name
        self.enabled = bool(self.smtp_host and self.smtp_username and self.from_email)

    def send_otp_email(self, to_email: str, first_name: str, otp: str, expires_minutes: int) -> bool:
        """
        Send the one-time code that confirms a new account.

        Args:
            to_email: Recipient email
            first_name: Recipient first name, used in the greeting
            otp: Plain one-time code
            expires_minutes: How long the code is accepted

        Returns:
            True if sent successfully, False otherwise
        """
        subject = "OTP For Login - Tawk"
        text_body = f"""
        Hi {first_name},

        Your OTP is {otp}. This is valid for {expires_minutes} Mins.

        If you did not create a Tawk account, you can ignore this email.
        """
        html_body = f"""
        <html>
            <body style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
                <h2 style="color: #1e293b;">Hi {first_name},</h2>
                <p style="color: #475569; line-height: 1.6;">Use the code below to verify your Tawk account:</p>
                <p style="font-size: 28px; letter-spacing: 6px; font-weight: bold; text-align: center;">{otp}</p>
                <p style="color: #64748b; font-size: 14px;">This code expires in {expires_minutes} minutes.</p>
            </body>
        </html>
        """
        return self._send_email(to_email, subject, html_body, text_body)

    def send_password_reset_email(self, to_email: str, reset_url: str, expires_minutes: int) -> bool:
        """
        Send the password reset link.

        Returns:
            True if sent successfully, False otherwise
        """
        subject = "Reset your password - Tawk"
        text_body = f"""
        Forgot your password? Open the link below to choose a new one:
        {reset_url}

        This link expires in {expires_minutes} minutes.
        If you didn't forget your password, please ignore this email.
        """
        html_body = f"""
        <html>
            <body style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
                <p style="color: #475569; line-height: 1.6;">Forgot your password? Choose a new one:</p>
                <div style="text-align: center; margin: 30px 0;">
                    <a href="{reset_url}"
                       style="background-color: #3b82f6; color: white; padding: 15px 30px;
                              text-decoration: none; border-radius: 5px; display: inline-block;">
                        Reset Password
                    </a>
                </div>
                <p style="color: #64748b; font-size: 14px;">This link expires in {expires_minutes} minutes.</p>
            </body>
        </html>
        """
        return self._send_email(to_email, subject, html_body, text_body)

    def send_password_changed_email(self, to_email: str) -> bool:
        subject = "Your password was changed - Tawk"
        text_body = """
        The password of your Tawk account was just reset.
        If this wasn't you, reset it again right away.
        """
        html_body = f"<html><body><p>{text_body.strip()}</p></body></html>"
        return self._send_email(to_email, subject, html_body, text_body)

    def _send_email(self, to_email: str, subject: str, html_body: str, text_body: str) -> bool:
        """
        Send an email via SMTP.

        Without SMTP settings the message is logged instead, for local development.

        Returns:
            True if sent successfully, False otherwise
        """
        if not self.enabled:
            logger.info("[EMAIL] %s -> %s\n%s", subject, to_email, text_body)
            return True

        try:
            msg = MIMEMultipart("alternative")
            msg["Subject"] = subject
            msg["From"] = f"{self.from_name} <{self.from_email}>"
            msg["To"] = to_email

            msg.attach(MIMEText(text_body, "plain", "utf-8"))
            msg.attach(MIMEText(html_body, "html", "utf-8"))

            with smtplib.SMTP(self.smtp_host, self.smtp_port) as server:
                server.starttls()
                server.login(self.smtp_username, self.smtp_password)
                server.send_message(msg)

            return True

        except (smtplib.SMTPException, OSError):
            logger.exception("Failed to send email to %s", to_email)
            return False
