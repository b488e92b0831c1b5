"""SMTP client wrapper for email delivery.

Thin wrapper around smtplib with TLS/SSL support, authentication and
connection cleanup.
"""

import logging
import smtplib
import ssl
from email.message import EmailMessage
from typing import Callable, Optional

from .models import SMTPDeliveryError
from .session import MailSession

logger = logging.getLogger(__name__)


class SMTPClient:
    """Send email messages through the server described by a MailSession.

    The smtplib factories are injectable so tests never open sockets.
    """

    def __init__(
        self,
        smtp_factory: Optional[Callable] = None,
        smtp_ssl_factory: Optional[Callable] = None,
    ):
        self.smtp_factory = smtp_factory or smtplib.SMTP
        self.smtp_ssl_factory = smtp_ssl_factory or smtplib.SMTP_SSL

    def send(self, message: EmailMessage, session: MailSession) -> None:
        """Send one message.

        Port 465 uses implicit TLS; other ports upgrade with STARTTLS when the
        session asks for TLS. The connection is always closed.

        Raises:
            SMTPDeliveryError: If message delivery fails
        """
        smtp = None
        try:
            if session.port == 465:
                logger.debug(f"Connecting to {session.host}:{session.port} with implicit TLS")
                context = ssl.create_default_context()
                smtp = self.smtp_ssl_factory(session.host, session.port, context=context)
            else:
                logger.debug(f"Connecting to {session.host}:{session.port}")
                smtp = self.smtp_factory(session.host, session.port)

                if session.use_tls:
                    logger.debug("Upgrading connection with STARTTLS")
                    context = ssl.create_default_context()
                    smtp.starttls(context=context)

            credentials = session.credentials()
            if credentials:
                logger.debug(f"Authenticating as {credentials[0]}")
                smtp.login(*credentials)
            else:
                logger.debug("No authentication credentials provided, proceeding without auth")

            smtp.send_message(message)
            logger.debug(f"Message sent successfully to {message['To']}")

        except smtplib.SMTPException as e:
            raise SMTPDeliveryError(f"SMTP error during message delivery: {e}") from e
        except OSError as e:
            raise SMTPDeliveryError(f"Network error during SMTP connection: {e}") from e
        except Exception as e:
            raise SMTPDeliveryError(f"Unexpected error during SMTP delivery: {e}") from e
        finally:
            if smtp is not None:
                try:
                    smtp.quit()
                except Exception as e:
                    logger.warning(f"Error closing SMTP connection: {e}")
