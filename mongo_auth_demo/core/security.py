"""
Service account token supply for MONGODB-OIDC authentication.

The driver asks for a token on the initial connection and again whenever
the server requests reauthentication. Tokens are self-signed RS256 JWT
assertions built from a service account key; they expire, so the supplier
caches one until it is close to expiry and then signs a fresh one.
"""
import json
import time
from pathlib import Path
from typing import Callable, Optional, Protocol

from jose import jwt
from jose.exceptions import JOSEError
from pydantic import BaseModel, Field, ValidationError
from pymongo.auth_oidc import OIDCCallback, OIDCCallbackContext, OIDCCallbackResult

from mongo_auth_demo.core.exceptions import ConnectionFailedError
from mongo_auth_demo.models.mechanism import MechanismKind

CLOUD_PLATFORM_SCOPE = "https://www.googleapis.com/auth/cloud-platform"
TOKEN_LIFETIME_SECONDS = 3600
REFRESH_MARGIN_SECONDS = 300


class TokenSupplier(Protocol):
    """Supplies a currently valid token string, or raises."""

    def get_token(self) -> str:
        ...


class ServiceAccountKey(BaseModel):
    """Fields of a service account key document that signing needs."""
    client_email: str = Field(..., min_length=1)
    private_key: str = Field(..., min_length=1)
    project_id: Optional[str] = None
    private_key_id: Optional[str] = None


def load_service_account_key(
    key_file: Optional[str] = None,
    client_email: Optional[str] = None,
    private_key: Optional[str] = None,
    project_id: Optional[str] = None,
) -> ServiceAccountKey:
    """
    Load a service account key from a JSON key file or inline values.

    The key file wins when it exists; `~` in its path is expanded. Inline
    private keys copied from environment variables often carry literal
    "\\n" sequences; those are turned back into newlines.

    Raises:
        ConnectionFailedError: If the key cannot be read or is incomplete
    """
    try:
        path = Path(key_file).expanduser() if key_file else None
        if path and path.is_file():
            data = json.loads(path.read_text(encoding="utf-8"))
            return ServiceAccountKey.model_validate(data)

        return ServiceAccountKey(
            client_email=client_email or "",
            private_key=(private_key or "").replace("\\n", "\n"),
            project_id=project_id,
        )
    except (OSError, ValueError, ValidationError) as e:
        raise ConnectionFailedError(
            f"Could not load service account key: {e}",
            MechanismKind.SERVICE_ACCOUNT_OIDC,
        ) from e


class ServiceAccountTokenSupplier:
    """
    Signs service account assertions and caches them until near expiry.

    Not safe for concurrent use; a demo run has one connection in flight.
    """

    def __init__(
        self,
        audience: str,
        key_file: Optional[str] = None,
        client_email: Optional[str] = None,
        private_key: Optional[str] = None,
        project_id: Optional[str] = None,
        lifetime_seconds: int = TOKEN_LIFETIME_SECONDS,
        refresh_margin_seconds: int = REFRESH_MARGIN_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self.audience = audience
        self.key_file = key_file
        self.client_email = client_email
        self.private_key = private_key
        self.project_id = project_id
        self.lifetime_seconds = lifetime_seconds
        self.refresh_margin_seconds = refresh_margin_seconds
        self._clock = clock
        self._key: Optional[ServiceAccountKey] = None
        self._token: Optional[str] = None
        self._expires_at: float = 0.0

    @property
    def expires_at(self) -> float:
        """Epoch seconds at which the cached token expires (0 when none)."""
        return self._expires_at

    def load_key(self) -> ServiceAccountKey:
        """Load the service account key once and keep it."""
        if self._key is None:
            self._key = load_service_account_key(
                key_file=self.key_file,
                client_email=self.client_email,
                private_key=self.private_key,
                project_id=self.project_id,
            )
        return self._key

    def get_token(self) -> str:
        """
        Return a token valid for at least the refresh margin.

        Raises:
            ConnectionFailedError: If the key is unusable or signing fails
        """
        now = self._clock()
        if self._token is not None and now < self._expires_at - self.refresh_margin_seconds:
            return self._token

        key = self.load_key()
        issued_at = int(now)
        expires_at = issued_at + self.lifetime_seconds
        claims = {
            "iss": key.client_email,
            "sub": key.client_email,
            "aud": self.audience,
            "iat": issued_at,
            "exp": expires_at,
            "scope": CLOUD_PLATFORM_SCOPE,
        }
        headers = {"kid": key.private_key_id} if key.private_key_id else None

        try:
            token = jwt.encode(claims, key.private_key, algorithm="RS256", headers=headers)
        except JOSEError as e:
            raise ConnectionFailedError(
                f"Could not sign service account assertion: {e}",
                MechanismKind.SERVICE_ACCOUNT_OIDC,
            ) from e

        self._token = token
        self._expires_at = float(expires_at)
        return token


class ServiceAccountOIDCCallback(OIDCCallback):
    """Adapts a TokenSupplier to the driver's OIDC callback interface."""

    def __init__(self, supplier: TokenSupplier):
        self.supplier = supplier

    def fetch(self, context: OIDCCallbackContext) -> OIDCCallbackResult:
        return OIDCCallbackResult(access_token=self.supplier.get_token())
