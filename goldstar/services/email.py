import html
import logging
import smtplib
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr
from typing import List, Optional, Tuple

from goldstar.core.config import Settings
from goldstar.core.errors import DeliverySubmissionError, ValidationError
from goldstar.models.booking import BookingRequest

logger = logging.getLogger("goldstar")

NOT_PROVIDED = "Not provided"
NO_MESSAGE = "No additional message provided."


@dataclass
class MailMessage:
    to: str
    subject: str
    text: str
    html: str
    reply_to: Optional[str] = None


def _header(value: str) -> str:
    # Header values come from form input, never let them start a new header
    return " ".join(value.splitlines()).strip()


class Mailer:
    """SMTP transport. One connection per message."""

    def __init__(self, settings: Settings):
        self.server = settings.MAIL_SERVER
        self.port = settings.MAIL_PORT
        self.username = settings.MAIL_USERNAME
        self.password = settings.MAIL_PASSWORD
        self.use_ssl = settings.MAIL_SSL
        self.timeout = settings.MAIL_TIMEOUT
        self.sender = formataddr((settings.MAIL_SENDER_NAME, settings.MAIL_USERNAME))

    def _connect(self) -> smtplib.SMTP:
        if self.use_ssl:
            logger.debug(f"Connecting to {self.server}:{self.port} via SSL...")
            server = smtplib.SMTP_SSL(self.server, self.port, timeout=self.timeout)
        else:
            logger.debug(f"Connecting to {self.server}:{self.port} via STARTTLS...")
            server = smtplib.SMTP(self.server, self.port, timeout=self.timeout)
        try:
            if not self.use_ssl:
                server.starttls()
            if self.username:
                server.login(self.username, self.password)
        except Exception:
            server.close()
            raise
        return server

    def build(self, message: MailMessage) -> MIMEMultipart:
        msg = MIMEMultipart('alternative')
        msg['From'] = self.sender
        msg['To'] = _header(message.to)
        msg['Subject'] = _header(message.subject)
        if message.reply_to:
            msg['Reply-To'] = _header(message.reply_to)

        msg.attach(MIMEText(message.text, 'plain', 'utf-8'))
        msg.attach(MIMEText(message.html, 'html', 'utf-8'))
        return msg

    def send(self, message: MailMessage) -> None:
        msg = self.build(message)
        try:
            with self._connect() as server:
                server.sendmail(self.username, [message.to], msg.as_string())
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send email to {message.to}: {e}")
            raise DeliverySubmissionError(str(e))
        logger.info(f"Email successfully sent to {message.to}: {message.subject}")

    def verify(self) -> bool:
        """Check that the SMTP server accepts our connection and credentials."""
        try:
            with self._connect() as server:
                server.noop()
        except (smtplib.SMTPException, OSError) as e:
            logger.warning(f"SMTP verification error: {e}")
            return False
        logger.info("SMTP server is ready to take our messages")
        return True


def _text(value: Optional[str]) -> str:
    return value if value not in (None, "") else NOT_PROVIDED


def _section_html(title: str, rows: List[Tuple[str, Optional[str]]], first: bool = False) -> str:
    margin = "" if first else " margin-top: 30px;"
    lines = [
        f'<h2 style="color: #003366; border-bottom: 2px solid #003366; padding-bottom: 10px;{margin}">{title}</h2>'
    ]
    for label, value in rows:
        lines.append(f"<p><strong>{label}:</strong> {html.escape(_text(value))}</p>")
    return "\n".join(lines)


def _wrap_html(heading: str, body: str, footer: str) -> str:
    return f"""
    <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px; background-color: #f9f9f9;">
        <div style="background-color: #003366; color: white; padding: 20px; text-align: center; border-radius: 5px;">
            <h1 style="margin: 0;">{heading}</h1>
        </div>
        <div style="background-color: white; padding: 20px; margin-top: 20px; border-radius: 5px; box-shadow: 0 2px 5px rgba(0,0,0,0.1);">
            {body}
        </div>
        <div style="text-align: center; margin-top: 20px; padding: 20px; color: #666;">
            <p style="margin: 5px 0;">Generated via Gold Star Bond Cleaning</p>
            <p style="margin: 5px 0;">{footer}</p>
        </div>
    </div>
    """


def format_booking_text(booking: BookingRequest) -> str:
    """Plain-text rendering of a full booking request"""
    b = booking
    return f"""
╔════════════════════════════════════════╗
║         NEW BOOKING REQUEST            ║
╚════════════════════════════════════════╝

👤 CUSTOMER DETAILS
-------------------
• Name: {_text(b.name)}
• Email: {_text(b.email)}
• Contact: {_text(b.contactNumber)}

🏠 PROPERTY DETAILS
------------------
• Location: {_text(b.suburb)}
• Type: {_text(b.propertyType)}
• Bedrooms: {_text(b.bedrooms)}
• Bathrooms: {_text(b.bathrooms)}
• Status: {_text(b.furnished)}

🧹 REQUESTED SERVICES
-------------------
• Carpet Cleaning: {_text(b.carpetCleaning)}
• Pest Control: {_text(b.pestControl)}

📅 SCHEDULING
------------
• Preferred Date: {_text(b.date)}

💬 ADDITIONAL MESSAGE
-------------------
{_text(b.message)}

──────────────────────────────────
Generated via Gold Star Bond Cleaning
Website Booking System
──────────────────────────────────
"""


def format_booking_html(booking: BookingRequest) -> str:
    """HTML rendering of a full booking request, user input escaped"""
    b = booking
    sections = [
        _section_html("👤 Customer Details", [
            ("Name", b.name), ("Email", b.email), ("Contact", b.contactNumber),
        ], first=True),
        _section_html("🏠 Property Details", [
            ("Location", b.suburb), ("Property Type", b.propertyType),
            ("Bedrooms", b.bedrooms), ("Bathrooms", b.bathrooms), ("Status", b.furnished),
        ]),
        _section_html("🧹 Requested Services", [
            ("Carpet Cleaning", b.carpetCleaning), ("Pest Control", b.pestControl),
        ]),
        _section_html("📅 Scheduling", [("Preferred Date", b.date)]),
        '<h2 style="color: #003366; border-bottom: 2px solid #003366; padding-bottom: 10px; margin-top: 30px;">💬 Additional Message</h2>',
        f'<p style="background-color: #f5f5f5; padding: 15px; border-radius: 5px;">{html.escape(b.message or NO_MESSAGE)}</p>',
    ]
    return _wrap_html("New Booking Request", "\n".join(sections), "Website Booking System")


def format_quick_booking_text(email: str, phone: Optional[str]) -> str:
    return f"""
╔════════════════════════════════════════╗
║         QUICK BOOKING REQUEST          ║
╚════════════════════════════════════════╝

👤 CUSTOMER DETAILS
-------------------
• Email: {email}
• Contact: {_text(phone)}

📝 REQUEST DETAILS
-----------------
• Type: Quick Booking
• Default Package: Bond Cleaning
• Bedrooms: 1
• Bathrooms: 1

──────────────────────────────────
Generated via Gold Star Bond Cleaning
Quick Booking System
──────────────────────────────────
"""


def format_quick_booking_html(email: str, phone: Optional[str]) -> str:
    body = _section_html("👤 Customer Details", [("Email", email), ("Contact", phone)], first=True)
    return _wrap_html("⚡ Quick Booking Request", body, "Quick Booking System")


class NotificationService:
    def __init__(self, mailer: Mailer, recipient: str):
        self.mailer = mailer
        self.recipient = recipient

    def send_booking_notification(self, booking: BookingRequest) -> None:
        message = MailMessage(
            to=self.recipient,
            subject=f"🏠 New Booking Request from {_text(booking.suburb)} for {_text(booking.propertyType)}",
            text=format_booking_text(booking),
            html=format_booking_html(booking),
            reply_to=booking.email or None,
        )
        self.mailer.send(message)

    def send_quick_booking_notification(self, email: Optional[str], phone: Optional[str] = None) -> None:
        if not email or not email.strip():
            raise ValidationError("Email is required")

        message = MailMessage(
            to=self.recipient,
            subject="⚡ Quick Booking Request",
            text=format_quick_booking_text(email, phone),
            html=format_quick_booking_html(email, phone),
            reply_to=email,
        )
        self.mailer.send(message)
