"""SMTP mail transport.

A thin wrapper around smtplib with TLS/SSL support, optional authentication
and per-message connection lifecycle. Every failure surfaces as
``MailTransportError`` so the sender can treat it as one retryable attempt.
"""

import smtplib
import ssl
from email.message import EmailMessage
from typing import Callable, Optional

from notification_system.config.environment import EnvironmentConfig
from notification_system.logging import get_logger

from .models import MailTransportError

logger = get_logger(__name__, component="smtp")


class SMTPClient:
    """Mail transport delivering one message per SMTP connection.

    Connection settings are bound at construction; factories can be injected
    to replace smtplib in tests.
    """

    def __init__(
        self,
        env_config: EnvironmentConfig,
        use_tls: bool = True,
        timeout: float = 10.0,
        smtp_factory: Optional[Callable] = None,
        smtp_ssl_factory: Optional[Callable] = None,
    ):
        """Initialize SMTP client.

        Args:
            env_config: Environment configuration with SMTP host, port and credentials
            use_tls: Upgrade plain connections with STARTTLS
            timeout: Socket timeout in seconds
            smtp_factory: Replacement for smtplib.SMTP
            smtp_ssl_factory: Replacement for smtplib.SMTP_SSL
        """
        self.env_config = env_config
        self.use_tls = use_tls
        self.timeout = timeout
        self.smtp_factory = smtp_factory or smtplib.SMTP
        self.smtp_ssl_factory = smtp_ssl_factory or smtplib.SMTP_SSL

    def send(self, message: EmailMessage) -> None:
        """Deliver a single message.

        Args:
            message: Fully built EmailMessage

        Raises:
            MailTransportError: If connecting, authenticating or sending fails
        """
        host = self.env_config.smtp_host
        port = self.env_config.smtp_port
        smtp = None
        try:
            if port == 465:
                # Implicit TLS
                logger.debug(f"Connecting to {host}:{port} with implicit TLS")
                smtp = self.smtp_ssl_factory(
                    host, port, timeout=self.timeout, context=ssl.create_default_context()
                )
            else:
                logger.debug(f"Connecting to {host}:{port}")
                smtp = self.smtp_factory(host, port, timeout=self.timeout)

                if self.use_tls:
                    logger.debug("Upgrading connection with STARTTLS")
                    smtp.starttls(context=ssl.create_default_context())

            if self.env_config.has_smtp_credentials:
                logger.debug(f"Authenticating as {self.env_config.smtp_user}")
                smtp.login(self.env_config.smtp_user, self.env_config.smtp_pass)

            smtp.send_message(message)
            logger.debug(f"Message handed to SMTP server for {message['To']}")

        except smtplib.SMTPException as e:
            raise MailTransportError(f"SMTP error during message delivery: {e}") from e
        except OSError as e:
            raise MailTransportError(f"Network error during SMTP connection: {e}") from e
        except Exception as e:
            raise MailTransportError(f"Unexpected error during SMTP delivery: {e}") from e
        finally:
            if smtp is not None:
                try:
                    smtp.quit()
                except Exception as e:
                    logger.warning(f"Error closing SMTP connection: {e}")


def build_message(sender: str, recipient: str, subject: str, text_body: str) -> EmailMessage:
    """Assemble a plain text message.

    Args:
        sender: From address
        recipient: Single To address
        subject: Subject line
        text_body: Plain text body

    Returns:
        EmailMessage ready for a transport
    """
    message = EmailMessage()
    message["Subject"] = subject
    message["From"] = sender
    message["To"] = recipient
    message.set_content(text_body)
    return message
