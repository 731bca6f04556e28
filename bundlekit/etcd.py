"""Connection settings for etcd and a probe of the server's version."""

from __future__ import annotations

import http.client
import json
import logging
import ssl
import urllib.error
import urllib.request
from dataclasses import dataclass

log = logging.getLogger(__name__)

_VERSION_TIMEOUT = 30.0


class EtcdError(Exception):
    """Raised when etcd cannot be reached or answers with an error."""


@dataclass
class EtcdConfig:
    """Where etcd runs and which TLS files to use when talking to it."""

    host: str = ""
    ca_file: str = ""
    client_cert: str = ""
    client_key: str = ""
    port: int = 0

    def endpoint(self) -> str:
        """Return the client endpoint; a CA file means the connection uses TLS."""
        scheme = "https" if self.ca_file else "http"
        return f"{scheme}://{self.host}:{self.port}"

    def ssl_context(self) -> ssl.SSLContext | None:
        """Return a TLS context for the configured files, or None when none are set."""
        if not (self.client_cert or self.client_key or self.ca_file):
            return None
        try:
            context = ssl.create_default_context(cafile=self.ca_file or None)
            if self.client_cert and self.client_key:
                context.load_cert_chain(self.client_cert, self.client_key)
        except (OSError, ValueError) as exc:
            raise EtcdError(f"unable to build TLS configuration: {exc}") from exc
        return context


def _text_field(data: dict, key: str) -> str:
    value = data.get(key, "")
    if value is None:
        return ""
    if not isinstance(value, str):
        raise EtcdError(f"etcd version field {key!r} is not a string")
    return value


def get_etcd_version(config: EtcdConfig) -> tuple[str, str]:
    """Ask etcd for its version and return (server version, cluster version)."""
    url = f"http://{config.host}:{config.port}/version"
    try:
        with urllib.request.urlopen(url, timeout=_VERSION_TIMEOUT) as response:
            status = response.status
            body = response.read()
    except urllib.error.HTTPError as exc:
        body = exc.read() or b""
        raise EtcdError(
            f"etcd answered with status {exc.code}: {body.decode('utf-8', 'replace')}"
        ) from exc
    except (urllib.error.URLError, OSError, ValueError, http.client.HTTPException) as exc:
        raise EtcdError(f"unable to reach etcd at {url}: {exc}") from exc

    if status != 200:
        raise EtcdError(f"etcd answered with status {status}: {body.decode('utf-8', 'replace')}")

    try:
        data = json.loads(body)
    except ValueError as exc:
        raise EtcdError(f"invalid version response from etcd: {exc}") from exc
    if not isinstance(data, dict):
        raise EtcdError("version response from etcd is not a JSON object")
    return _text_field(data, "etcdserver"), _text_field(data, "etcdcluster")