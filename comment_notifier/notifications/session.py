"""Mail sessions: transport properties plus an authenticator."""

from typing import Any, Dict, Mapping, Optional, Tuple

from .models import MailSessionError


class SMTPAuthenticator:
    """Provide SMTP credentials from the transport properties."""

    def __init__(self, properties: Mapping[str, Any]):
        self._user = properties.get("user")
        self._password = properties.get("password")

    def credentials(self) -> Optional[Tuple[str, str]]:
        """Return (user, password), or None when authentication is not configured."""
        if self._user and self._password:
            return self._user, self._password
        return None


class MailSession:
    """Transport properties and credentials used for one submission.

    The property bag is kept as given; only the accessors below interpret it.
    """

    def __init__(
        self,
        properties: Mapping[str, Any],
        authenticator: Optional[SMTPAuthenticator] = None,
        use_tls: bool = True,
    ):
        self.properties: Dict[str, Any] = dict(properties)
        self.authenticator = authenticator
        self.use_tls = use_tls

    @property
    def host(self) -> str:
        return self.properties["host"]

    @property
    def port(self) -> int:
        return int(self.properties["port"])

    @property
    def from_address(self) -> Optional[str]:
        return self.properties.get("from")

    def credentials(self) -> Optional[Tuple[str, str]]:
        if self.authenticator is None:
            return None
        return self.authenticator.credentials()

    def sender_address(self, sender_name: str) -> str:
        """Build the From header: explicit from address, then SMTP user, then noreply@host."""
        credentials = self.credentials()
        if self.from_address:
            sender_email = self.from_address
        elif credentials:
            sender_email = credentials[0]
        else:
            sender_email = f"noreply@{self.host}"

        return f"{sender_name} <{sender_email}>"


def create_session(properties: Mapping[str, Any], use_tls: bool = True) -> MailSession:
    """Build an authenticated mail session.

    Raises:
        MailSessionError: If host or port is missing or the port is not a number
    """
    if not properties.get("host"):
        raise MailSessionError("Mail transport property 'host' is not set")

    try:
        port = int(properties.get("port"))
    except (TypeError, ValueError) as e:
        raise MailSessionError(
            f"Mail transport property 'port' is invalid: {properties.get('port')!r}"
        ) from e
    if port < 1 or port > 65535:
        raise MailSessionError(f"Mail transport port out of range: {port}")

    return MailSession(properties, SMTPAuthenticator(properties), use_tls=use_tls)
