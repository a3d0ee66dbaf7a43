import os
import smtplib
from email.mime.text import MIMEText
import logging
from typing import Optional, Tuple

logger = logging.getLogger(__name__)

# --- Email Configuration ---
SMTP_SERVER = os.getenv("SMTP_SERVER")
SMTP_PORT = int(os.getenv("SMTP_PORT", 587))
SMTP_USER = os.getenv("SMTP_USER")
SMTP_PASSWORD = os.getenv("SMTP_PASSWORD")
EMAIL_SENDER = os.getenv("EMAIL_SENDER", "pollopollo@pollopollo.org")

SIGNATURE = "\n\nSincerely,\nThe PolloPollo Project"
DISCORD_URL = "https://discord.pollopollo.org"


class EmailClient:
    """Sends plain-text emails over SMTP. Failures are returned, never raised."""

    def __init__(
        self,
        server: Optional[str] = SMTP_SERVER,
        port: int = SMTP_PORT,
        user: Optional[str] = SMTP_USER,
        password: Optional[str] = SMTP_PASSWORD,
        sender: Optional[str] = EMAIL_SENDER,
    ):
        self.server = server
        self.port = port
        self.user = user
        self.password = password
        self.sender = sender

    def send_email(self, to_email: str, subject: str, body: str) -> Tuple[bool, Optional[str]]:
        if not all([self.server, self.port, self.user, self.password, self.sender]):
            logger.error("SMTP settings are not fully configured. Cannot send email.")
            return False, "SMTP settings are not fully configured"

        message = MIMEText(body, "plain")
        message["Subject"] = subject
        message["From"] = self.sender
        message["To"] = to_email

        try:
            with smtplib.SMTP(self.server, self.port) as server:
                server.starttls()
                server.login(self.user, self.password)
                server.sendmail(self.sender, to_email, message.as_string())
            logger.info(f"Email sent successfully to {to_email}")
            return True, None
        except Exception as e:
            logger.error(f"Failed to send email to {to_email}: {e}")
            return False, str(e)


def get_email_client() -> EmailClient:
    return EmailClient()


# Email Templates
def get_donation_email(product_title: str, producer_address: str) -> Tuple[str, str]:
    """Receiver may now pick up the product at the shop"""
    subject = "You received a donation on PolloPollo!"
    body = (
        "Congratulations!\n\n"
        f"A donation has just been made to fill your application for {product_title}. "
        f"You can now go and receive the product at the shop with address: {producer_address}. "
        "You must confirm reception of the product when you get there.\n\n"
        "Follow these steps to confirm reception:\n"
        "-Log on to pollopollo.org\n"
        "-Click on your user and select \"profile\"\n"
        "-Change \"Open applications\" to \"Pending applications\"\n"
        "-Click on \"Confirm Receival\"\n\n"
        "After 10-15 minutes, the confirmation goes through and the shop will be notified of your confirmation.\n\n"
        f"If you have questions or experience problems, please join {DISCORD_URL} "
        "or write an email to pollopollo@pollopollo.org"
        f"{SIGNATURE}"
    )
    return subject, body


def get_thank_you_email() -> Tuple[str, str]:
    subject = "Thank you for using PolloPollo"
    body = (
        "Thank you very much for using PolloPollo.\n\n"
        f"If you have suggestions for improvements or feedback, please join our Discord server: {DISCORD_URL} and let us know.\n\n"
        "The PolloPollo project is created and maintained by volunteers. "
        "We rely solely on the help of volunteers to grow the platform.\n\n"
        "You can help us help more people by asking shops to join and add products that people in need can apply for."
        "\n\nWe hope you enjoyed using PolloPollo"
        f"{SIGNATURE}"
    )
    return subject, body


def get_producer_confirmation_email(
    receiver_name: str,
    application_id: int,
    product_title: str,
    amount_bytes: Optional[int],
    amount_usd: Optional[int],
    shared_wallet: str
) -> Tuple[str, str]:
    """Tell the producer that the receiver picked up the product"""
    subject = f"{receiver_name} confirmed receipt of application #{application_id}"
    body = (
        f"{receiver_name} has just confirmed receipt of the product {product_title}.\n\n"
        f"The application ID is #{application_id} and contains {amount_bytes} bytes "
        f"which is roughly {amount_usd} USD at current rates.\n\n"
        "To withdraw the money, open your Obyte Wallet and find the Smart Wallet address "
        f"starting with {shared_wallet[:4]}.\n\n"
        f"Thank you for using PolloPollo and if you have suggestions for improvements, please join our Discord server: {DISCORD_URL} and let us know.\n\n"
        "The PolloPollo project is created and maintained by volunteers. "
        "We rely solely on the help of volunteers to grow the platform.\n\n"
        "You can help us help more people by adding more products or encouraging other shops "
        "to join and add their products that people in need can apply for."
        "\n\nWe hope you enjoyed using PolloPollo."
        f"{SIGNATURE}"
    )
    return subject, body
