"""Docker endpoint models."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional
from urllib.parse import urlsplit

from docker.tls import TLSConfig


class EndpointScheme(str, Enum):
    """URI scheme of a Docker endpoint."""

    HTTP = "http"
    HTTPS = "https"
    TCP = "tcp"
    UNIX = "unix"
    OTHER = "other"

    @classmethod
    def from_uri(cls, uri: str) -> "EndpointScheme":
        scheme = urlsplit(uri).scheme.lower()
        try:
            return cls(scheme)
        except ValueError:
            return cls.OTHER


@dataclass(frozen=True)
class EndpointConfig:
    """A resolved Docker endpoint.

    Produced by an endpoint strategy and never modified afterwards.
    """

    scheme: EndpointScheme
    host: Optional[str]
    raw_uri: str
    tls_verify: bool = False
    cert_path: Optional[str] = None
    source: str = "unknown"

    @classmethod
    def from_uri(
        cls,
        uri: str,
        tls_verify: bool = False,
        cert_path: Optional[str] = None,
        source: str = "unknown",
    ) -> "EndpointConfig":
        """Build an endpoint from a raw Docker host URI.

        Args:
            uri: Docker host URI, e.g. ``tcp://192.168.99.100:2376`` or
                ``unix:///var/run/docker.sock``
            tls_verify: Whether the daemon certificate must be verified
            cert_path: Directory holding ``ca.pem``, ``cert.pem`` and ``key.pem``
            source: Name of the strategy that produced the endpoint

        Returns:
            EndpointConfig for the URI
        """
        return cls(
            scheme=EndpointScheme.from_uri(uri),
            host=urlsplit(uri).hostname,
            raw_uri=uri,
            tls_verify=tls_verify,
            cert_path=cert_path,
            source=source,
        )

    @property
    def host_ip(self) -> Optional[str]:
        """IP address (or hostname) of the host running Docker."""
        if self.scheme in (EndpointScheme.HTTP, EndpointScheme.HTTPS, EndpointScheme.TCP):
            return self.host
        if self.scheme == EndpointScheme.UNIX:
            return "localhost"
        return None

    def tls_config(self) -> Optional[TLSConfig]:
        """TLS settings for the Docker client, or None for plain connections."""
        if not self.tls_verify and not self.cert_path:
            return None
        cert_dir = Path(self.cert_path) if self.cert_path else None
        client_cert = None
        ca_cert = None
        if cert_dir is not None:
            client_cert = (str(cert_dir / "cert.pem"), str(cert_dir / "key.pem"))
            ca_cert = str(cert_dir / "ca.pem") if self.tls_verify else None
        return TLSConfig(
            client_cert=client_cert,
            ca_cert=ca_cert,
            verify=self.tls_verify,
        )

    def to_dict(self) -> dict:
        return {
            "scheme": self.scheme.value,
            "host": self.host,
            "raw_uri": self.raw_uri,
            "host_ip": self.host_ip,
            "tls_verify": self.tls_verify,
            "cert_path": self.cert_path,
            "source": self.source,
        }
