"""
Outbound mail for bookings and password resets.

Mail goes through SMTP, authenticated either with XOAUTH2 (when Google OAuth2
credentials are configured) or with the SMTP username and password. Sending
never raises: failures are logged and reported as ``False`` so that the
request that triggered the mail is not affected.
"""

import base64
import logging
import smtplib
import threading
import time
from email.message import EmailMessage
from html import escape
from typing import Optional

import requests

from fleetdesk.core.config import Settings
from fleetdesk.models.booking import Booking

logger = logging.getLogger(__name__)


class TokenCache:
    """
    OAuth2 access token with its expiry, plus the refresh token used to renew it.

    One instance lives on the application state for the lifetime of the app.
    """

    def __init__(self, refresh_token: Optional[str] = None, margin_seconds: int = 60):
        self.refresh_token = refresh_token
        self.margin_seconds = margin_seconds
        self._access_token: Optional[str] = None
        self._expires_at: float = 0.0
        self._lock = threading.Lock()

    def get(self, now: Optional[float] = None) -> Optional[str]:
        """The cached access token, or None once it is within the safety margin of expiry."""
        now = time.time() if now is None else now
        with self._lock:
            if self._access_token and now < self._expires_at - self.margin_seconds:
                return self._access_token
            return None

    def store(self, access_token: str, expires_in: int, now: Optional[float] = None) -> None:
        now = time.time() if now is None else now
        with self._lock:
            self._access_token = access_token
            self._expires_at = now + expires_in

    def clear(self) -> None:
        with self._lock:
            self._access_token = None
            self._expires_at = 0.0


class GoogleOAuth2Client:
    """Exchanges a refresh token for a short-lived access token."""

    def __init__(self, client_id: str, client_secret: str, token_url: str, timeout: int = 10):
        self.client_id = client_id
        self.client_secret = client_secret
        self.token_url = token_url
        self.timeout = timeout

    def fetch_access_token(self, refresh_token: str):
        """Return ``(access_token, expires_in, refresh_token)``; Google may rotate the refresh token."""
        response = requests.post(
            self.token_url,
            data={
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "refresh_token": refresh_token,
                "grant_type": "refresh_token",
            },
            timeout=self.timeout,
        )
        response.raise_for_status()
        body = response.json()
        if not body.get("access_token"):
            raise ValueError("Token endpoint returned no access token")
        return body["access_token"], int(body.get("expires_in", 3600)), body.get("refresh_token") or refresh_token


def _booking_rows(booking: Booking, include_email: bool = False) -> str:
    rows = [("Name", booking.name)]
    if include_email:
        rows.append(("Email", booking.email or "N/A"))
    rows += [
        ("Phone", booking.phoneNumber),
        ("Date", booking.date.strftime("%d/%m/%Y")),
        ("Time", booking.time),
        ("Pickup Location", booking.pickup),
        ("Drop Location", booking.drop),
        ("Vehicle Type", booking.vehicle),
        ("Description", booking.description or "N/A"),
    ]
    return "\n".join(f"<li><strong>{label}:</strong> {escape(str(value))}</li>" for label, value in rows)


class EmailService:
    def __init__(self, settings: Settings, token_cache: TokenCache, oauth_client: Optional[GoogleOAuth2Client] = None):
        self.settings = settings
        self.token_cache = token_cache
        if token_cache.refresh_token is None:
            token_cache.refresh_token = settings.GOOGLE_REFRESH_TOKEN
        if oauth_client is None and self.uses_oauth2:
            oauth_client = GoogleOAuth2Client(
                settings.GOOGLE_CLIENT_ID,
                settings.GOOGLE_CLIENT_SECRET,
                settings.GOOGLE_TOKEN_URL,
            )
        self.oauth_client = oauth_client

    @property
    def is_configured(self) -> bool:
        return bool(self.settings.SMTP_HOST and self.settings.SMTP_USER)

    @property
    def uses_oauth2(self) -> bool:
        s = self.settings
        return bool(s.GOOGLE_CLIENT_ID and s.GOOGLE_CLIENT_SECRET and s.GOOGLE_REFRESH_TOKEN)

    @property
    def sender(self) -> Optional[str]:
        return self.settings.SMTP_FROM or self.settings.SMTP_USER

    def _access_token(self) -> str:
        token = self.token_cache.get()
        if token:
            return token
        access_token, expires_in, refresh_token = self.oauth_client.fetch_access_token(self.token_cache.refresh_token)
        self.token_cache.refresh_token = refresh_token
        self.token_cache.store(access_token, expires_in)
        logger.info("Refreshed mail OAuth2 access token")
        return access_token

    def _authenticate(self, server: smtplib.SMTP) -> None:
        if self.uses_oauth2:
            auth_string = f"user={self.settings.SMTP_USER}\x01auth=Bearer {self._access_token()}\x01\x01"
            code, reply = server.docmd("AUTH", "XOAUTH2 " + base64.b64encode(auth_string.encode()).decode())
            if code != 235:
                # A rejected token is not reused
                self.token_cache.clear()
                raise smtplib.SMTPAuthenticationError(code, reply)
        else:
            server.login(self.settings.SMTP_USER, self.settings.SMTP_PASS or "")

    def send(self, to: str, subject: str, html: str) -> bool:
        if not self.is_configured:
            logger.info(f"SMTP not configured; skipping mail '{subject}' to {to}")
            return False

        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = to
        message["Subject"] = subject
        message.set_content("This message requires an HTML capable mail client.")
        message.add_alternative(html, subtype="html")

        s = self.settings
        try:
            if s.SMTP_SECURE:
                server = smtplib.SMTP_SSL(s.SMTP_HOST, s.SMTP_PORT, timeout=15)
            else:
                server = smtplib.SMTP(s.SMTP_HOST, s.SMTP_PORT, timeout=15)
            with server:
                server.ehlo()
                if not s.SMTP_SECURE:
                    server.starttls()
                    server.ehlo()
                self._authenticate(server)
                server.send_message(message)
        except (smtplib.SMTPException, OSError, requests.RequestException, ValueError) as e:
            logger.error(f"Failed to send mail '{subject}' to {to}: {e}")
            return False

        logger.info(f"Sent mail '{subject}' to {to}")
        return True

    def send_booking_confirmation(self, booking: Booking) -> bool:
        if not booking.email:
            return False
        html = (
            "<h1>Booking Confirmation</h1>"
            f"<p>Dear {escape(booking.name)},</p>"
            "<p>Your booking has been successfully created. Here are the details:</p>"
            f"<ul>{_booking_rows(booking)}</ul>"
            "<p>Thank you for choosing our service!</p>"
        )
        return self.send(booking.email, "Booking Confirmation - Travel Service", html)

    def send_booking_notification(self, booking: Booking) -> bool:
        recipient = self.settings.ADMIN_EMAIL or self.settings.SMTP_USER
        if not recipient:
            logger.info("No admin address configured; skipping booking notification")
            return False
        html = (
            "<h1>New Booking Notification</h1>"
            "<p>A new booking has been created. Here are the details:</p>"
            f"<ul>{_booking_rows(booking, include_email=True)}</ul>"
        )
        return self.send(recipient, "New Booking Created - Travel Service", html)

    def send_password_reset(self, email: str, token: str) -> bool:
        html = (
            "<h1>Password Reset</h1>"
            "<p>Use the token below to reset your password. It expires in "
            f"{self.settings.RESET_TOKEN_EXPIRE_MINUTES} minutes.</p>"
            f"<p><code>{escape(token)}</code></p>"
            "<p>If you did not request a reset, you can ignore this message.</p>"
        )
        return self.send(email, "Password Reset Request", html)
