from __future__ import annotations

import logging
import secrets
import ssl
import tempfile
from os import PathLike
from pathlib import Path

import certifi
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.serialization import pkcs12

from wxpay import config
from wxpay.errors import ConfigurationError

logger = logging.getLogger(__name__)


class Account:
    """Merchant identity plus the optional API client certificate.

    ``app_id``, ``mch_id``, ``api_key`` and ``sandbox`` are fixed at
    construction. The certificate (the ``apiclient_cert.p12`` archive
    downloaded from the merchant platform) can be attached later with
    :meth:`set_cert_data` or :meth:`set_cert_file`.
    """

    def __init__(
        self,
        app_id: str,
        mch_id: str,
        api_key: str,
        *,
        sandbox: bool = False,
        cert_data: bytes | None = None,
    ) -> None:
        self._app_id = app_id
        self._mch_id = mch_id
        self._api_key = api_key
        self._sandbox = sandbox
        self._cert_data = cert_data

    @classmethod
    def from_env(cls) -> Account:
        """Build an account from the ``WXPAY_*`` environment settings."""
        s = config.settings
        if not (s.app_id and s.mch_id and s.api_key):
            raise ConfigurationError("WXPAY_APP_ID, WXPAY_MCH_ID and WXPAY_API_KEY must be set")
        account = cls(s.app_id, s.mch_id, s.api_key, sandbox=s.sandbox)
        if s.cert_path:
            account.set_cert_file(s.cert_path)
        return account

    @property
    def app_id(self) -> str:
        return self._app_id

    @property
    def mch_id(self) -> str:
        return self._mch_id

    @property
    def api_key(self) -> str:
        return self._api_key

    @property
    def sandbox(self) -> bool:
        return self._sandbox

    @property
    def cert_data(self) -> bytes | None:
        return self._cert_data

    @property
    def has_cert(self) -> bool:
        return bool(self._cert_data)

    def set_cert_data(self, cert_data: bytes) -> None:
        self._cert_data = cert_data

    def set_cert_file(self, cert_path: str | PathLike[str]) -> None:
        """Load the PKCS#12 archive from disk. I/O errors propagate as ``OSError``."""
        self._cert_data = Path(cert_path).read_bytes()

    def ssl_context(self) -> ssl.SSLContext:
        """Return a TLS context presenting this merchant's client certificate.

        The archive's passphrase is the merchant id, as issued by the
        platform. Raises :class:`ConfigurationError` when no certificate is
        attached or the archive cannot be opened.
        """
        if not self._cert_data:
            raise ConfigurationError("certificate data is empty", {"mch_id": self._mch_id})

        try:
            key, cert, chain = pkcs12.load_key_and_certificates(
                self._cert_data, self._mch_id.encode("utf-8")
            )
        except ValueError as exc:
            logger.warning("Failed to open client certificate for merchant %s", self._mch_id)
            raise ConfigurationError(
                "cannot load PKCS#12 certificate", {"mch_id": self._mch_id, "error": str(exc)}
            ) from exc
        if key is None or cert is None:
            raise ConfigurationError(
                "PKCS#12 archive has no private key or certificate", {"mch_id": self._mch_id}
            )

        # ssl only loads client identities from files; keep them encrypted on
        # disk for the short time they exist.
        password = secrets.token_hex(16)
        cert_pem = b"".join(
            c.public_bytes(serialization.Encoding.PEM) for c in [cert, *(chain or [])]
        )
        key_pem = key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.BestAvailableEncryption(password.encode("utf-8")),
        )

        ctx = ssl.create_default_context(cafile=certifi.where())
        with tempfile.TemporaryDirectory(prefix="wxpay-") as tmp:
            cert_file = Path(tmp) / "apiclient_cert.pem"
            key_file = Path(tmp) / "apiclient_key.pem"
            cert_file.write_bytes(cert_pem)
            key_file.write_bytes(key_pem)
            try:
                ctx.load_cert_chain(str(cert_file), str(key_file), password=password)
            except ssl.SSLError as exc:
                logger.warning("Client certificate rejected by ssl for merchant %s", self._mch_id)
                raise ConfigurationError(
                    "cannot use client certificate", {"mch_id": self._mch_id, "error": str(exc)}
                ) from exc
        return ctx

    def __repr__(self) -> str:
        return (
            f"Account(app_id={self._app_id!r}, mch_id={self._mch_id!r}, "
            f"sandbox={self._sandbox!r}, has_cert={self.has_cert!r})"
        )
