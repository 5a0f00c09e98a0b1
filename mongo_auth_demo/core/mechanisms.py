"""
Per-mechanism descriptor table.

Each descriptor lists the credential fields a mechanism needs, how its
connection string is assembled, which driver options it emits, and the
text used when the demo narrates or troubleshoots it. The configurator
is generic over this table.
"""
from dataclasses import dataclass, field
from typing import Any, Callable
from urllib.parse import quote

from mongo_auth_demo.core.security import ServiceAccountOIDCCallback, ServiceAccountTokenSupplier
from mongo_auth_demo.models.credentials import CredentialBundle
from mongo_auth_demo.models.mechanism import MechanismKind

EXTERNAL_AUTH_SOURCE = "$external"

LOCAL_TIMEOUT_MS = 5_000
CLOUD_TIMEOUT_MS = 10_000
OIDC_TIMEOUT_MS = 15_000


@dataclass(frozen=True)
class Requirement:
    """
    A required credential, satisfied by any one of its alternatives.

    Each alternative is a group of fields that must all be set.
    """
    alternatives: tuple[tuple[str, ...], ...]

    @classmethod
    def field(cls, name: str) -> "Requirement":
        return cls(((name,),))

    @classmethod
    def one_of(cls, *alternatives: tuple[str, ...]) -> "Requirement":
        return cls(tuple(tuple(alt) for alt in alternatives))

    @property
    def fields(self) -> frozenset[str]:
        return frozenset(name for alt in self.alternatives for name in alt)


@dataclass(frozen=True)
class MechanismDescriptor:
    """Everything the configurator and demo runner need to know about a mechanism."""
    kind: MechanismKind
    name: str
    description: str
    auth_method: str
    requirements: tuple[Requirement, ...]
    build_uri: Callable[[CredentialBundle], str]
    build_options: Callable[[CredentialBundle, int], dict[str, Any]]
    resolve_timeout_ms: Callable[[CredentialBundle], int]
    option_keys: frozenset[str]
    file_fields: frozenset[str] = frozenset()
    env_vars: dict[str, str] = field(default_factory=dict)
    narration: tuple[str, ...] = ()
    hints: tuple[str, ...] = ()
    simulated_fields: dict[str, Any] = field(default_factory=dict)
    document_fields: Callable[[CredentialBundle], dict[str, Any]] = lambda bundle: {}

    @property
    def required_fields(self) -> frozenset[str]:
        names: set[str] = set()
        for requirement in self.requirements:
            names |= requirement.fields
        return frozenset(names)

    @property
    def greeting(self) -> str:
        return f"Hello from {self.name}!"


def _encode(value: str) -> str:
    """Percent-encode a URI userinfo component, reserved characters included."""
    return quote(value, safe="")


def _constant(timeout_ms: int) -> Callable[[CredentialBundle], int]:
    return lambda bundle: timeout_ms


# ==================== Password ====================

def _password_uri(bundle: CredentialBundle) -> str:
    return (
        f"mongodb://{_encode(bundle.get('username'))}:{_encode(bundle.get('password'))}"
        f"@{bundle.get('host')}:{bundle.get('port')}/{bundle.get('database')}"
        f"?authSource={bundle.get('auth_source')}"
    )


def _password_options(bundle: CredentialBundle, timeout_ms: int) -> dict[str, Any]:
    return {"serverSelectionTimeoutMS": timeout_ms}


# ==================== X.509 Certificate ====================

def _certificate_uri(bundle: CredentialBundle) -> str:
    if bundle.is_set("cluster"):
        return f"mongodb+srv://{bundle.get('cluster')}/{bundle.get('database')}"
    return f"mongodb://{bundle.get('host')}:{bundle.get('port')}/{bundle.get('database')}"


def _certificate_options(bundle: CredentialBundle, timeout_ms: int) -> dict[str, Any]:
    options: dict[str, Any] = {
        "tls": True,
        "tlsCertificateKeyFile": bundle.path("cert_file"),
        "tlsCAFile": bundle.path("ca_file"),
        "authMechanism": "MONGODB-X509",
        "serverSelectionTimeoutMS": timeout_ms,
    }
    # Without a subject the server derives the user from the certificate
    if bundle.is_set("subject"):
        options["username"] = bundle.get("subject")
    return options


def _certificate_timeout(bundle: CredentialBundle) -> int:
    return CLOUD_TIMEOUT_MS if bundle.is_set("cluster") else LOCAL_TIMEOUT_MS


# ==================== AWS IAM ====================

def _aws_uri(bundle: CredentialBundle) -> str:
    return (
        f"mongodb+srv://{bundle.get('cluster_url')}/{bundle.get('database')}"
        f"?authSource={EXTERNAL_AUTH_SOURCE}&authMechanism=MONGODB-AWS"
    )


def _aws_options(bundle: CredentialBundle, timeout_ms: int) -> dict[str, Any]:
    options: dict[str, Any] = {
        "username": bundle.get("access_key_id"),
        "password": bundle.get("secret_access_key"),
        "serverSelectionTimeoutMS": timeout_ms,
    }
    if bundle.is_set("session_token"):
        options["authMechanismProperties"] = {"AWS_SESSION_TOKEN": bundle.get("session_token")}
    return options


# ==================== Atlas API Key ====================

def _api_key_uri(bundle: CredentialBundle) -> str:
    return (
        f"mongodb+srv://{_encode(bundle.get('public_key'))}:{_encode(bundle.get('private_key'))}"
        f"@{bundle.get('cluster_url')}/{bundle.get('database')}"
        f"?authSource={EXTERNAL_AUTH_SOURCE}"
    )


def _api_key_options(bundle: CredentialBundle, timeout_ms: int) -> dict[str, Any]:
    return {"serverSelectionTimeoutMS": timeout_ms}


# ==================== OIDC Service Account ====================

def _oidc_uri(bundle: CredentialBundle) -> str:
    return (
        f"mongodb+srv://{bundle.get('cluster_url')}/{bundle.get('database')}"
        f"?authSource={EXTERNAL_AUTH_SOURCE}&authMechanism=MONGODB-OIDC"
    )


def build_token_supplier(bundle: CredentialBundle) -> ServiceAccountTokenSupplier:
    """Token supplier for a complete service account bundle."""
    return ServiceAccountTokenSupplier(
        audience=bundle.get("audience"),
        key_file=bundle.path("key_file"),
        client_email=bundle.get("client_email"),
        private_key=bundle.get("private_key"),
        project_id=bundle.get("project_id"),
    )


def _oidc_options(bundle: CredentialBundle, timeout_ms: int) -> dict[str, Any]:
    callback = ServiceAccountOIDCCallback(build_token_supplier(bundle))
    return {
        "authMechanismProperties": {"OIDC_CALLBACK": callback},
        "serverSelectionTimeoutMS": timeout_ms,
    }


# ==================== Descriptor Table ====================

MECHANISMS: dict[MechanismKind, MechanismDescriptor] = {
    MechanismKind.PASSWORD: MechanismDescriptor(
        kind=MechanismKind.PASSWORD,
        name="Password Authentication",
        description="Username/password authentication",
        auth_method="password",
        requirements=(
            Requirement.field("host"),
            Requirement.field("port"),
            Requirement.field("username"),
            Requirement.field("password"),
            Requirement.field("auth_source"),
            Requirement.field("database"),
        ),
        build_uri=_password_uri,
        build_options=_password_options,
        resolve_timeout_ms=_constant(LOCAL_TIMEOUT_MS),
        option_keys=frozenset({"serverSelectionTimeoutMS"}),
        env_vars={
            "host": "MONGO_HOST",
            "port": "MONGO_PORT",
            "username": "MONGO_USERNAME",
            "password": "MONGO_PASSWORD",
            "auth_source": "MONGO_AUTH_SOURCE",
            "database": "MONGO_DATABASE",
        },
        narration=(
            "1. Building connection string with username and password",
            "2. Connecting to MongoDB",
            "   - SCRAM challenge/response against the auth source database",
            "3. Connection established with the user's roles",
        ),
        hints=(
            "Check that MongoDB is running and reachable at the configured host and port",
            "Verify the username, password and auth source database",
            "Make sure the user has roles on the target database",
        ),
        simulated_fields={"user": "simulated-user"},
        document_fields=lambda bundle: {"user": bundle.get("username")},
    ),
    MechanismKind.CERTIFICATE: MechanismDescriptor(
        kind=MechanismKind.CERTIFICATE,
        name="X.509 Certificate Authentication",
        description="Certificate-based authentication",
        auth_method="certificate",
        requirements=(
            Requirement.field("cert_file"),
            Requirement.field("ca_file"),
            Requirement.one_of(("cluster",), ("host", "port")),
            Requirement.field("database"),
        ),
        build_uri=_certificate_uri,
        build_options=_certificate_options,
        resolve_timeout_ms=_certificate_timeout,
        option_keys=frozenset({
            "tls",
            "tlsCertificateKeyFile",
            "tlsCAFile",
            "authMechanism",
            "serverSelectionTimeoutMS",
            "username",
        }),
        file_fields=frozenset({"cert_file", "ca_file"}),
        env_vars={
            "cert_file": "CERT_FILE_PATH",
            "ca_file": "CA_FILE_PATH",
            "subject": "CERT_SUBJECT",
            "cluster": "CERT_MONGO_CLUSTER",
            "host": "CERT_MONGO_HOST",
            "port": "CERT_MONGO_PORT",
            "database": "CERT_MONGO_DATABASE",
        },
        narration=(
            "1. Loading X.509 certificate and private key",
            "2. Establishing TLS connection",
            "   - TLS handshake with MongoDB server",
            "   - Certificate validation against CA",
            "3. Authenticating with X.509",
            "   - MongoDB maps the certificate subject to a $external user",
            "4. Connection established and authenticated",
        ),
        hints=(
            "Ensure certificates are properly generated and signed by the configured CA",
            "Verify MongoDB is configured for TLS and X.509 authentication",
            "Check that a $external user exists for the certificate subject",
        ),
        simulated_fields={
            "certSubject": "CN=client,OU=MyOrgUnit,O=MyOrg,L=MyCity,ST=MyState,C=US",
        },
        document_fields=lambda bundle: {"certSubject": bundle.get("subject")},
    ),
    MechanismKind.AWS_IAM: MechanismDescriptor(
        kind=MechanismKind.AWS_IAM,
        name="AWS IAM Authentication",
        description="AWS credentials authentication for Atlas",
        auth_method="aws-iam",
        requirements=(
            Requirement.field("access_key_id"),
            Requirement.field("secret_access_key"),
            Requirement.field("region"),
            Requirement.field("cluster_url"),
            Requirement.field("database"),
        ),
        build_uri=_aws_uri,
        build_options=_aws_options,
        resolve_timeout_ms=_constant(CLOUD_TIMEOUT_MS),
        option_keys=frozenset({
            "username",
            "password",
            "authMechanismProperties",
            "serverSelectionTimeoutMS",
        }),
        env_vars={
            "access_key_id": "AWS_ACCESS_KEY_ID",
            "secret_access_key": "AWS_SECRET_ACCESS_KEY",
            "session_token": "AWS_SESSION_TOKEN",
            "region": "AWS_REGION",
            "cluster_url": "AWS_MONGO_CLUSTER_URL",
            "database": "AWS_MONGO_DATABASE",
        },
        narration=(
            "1. Loading AWS credentials",
            "   - Access Key ID: AWS_ACCESS_KEY_ID",
            "   - Secret Access Key: AWS_SECRET_ACCESS_KEY",
            "   - Session Token: AWS_SESSION_TOKEN (if using temporary credentials)",
            "2. Connecting to MongoDB Atlas",
            "   - Authentication Source: $external",
            "   - Mechanism: MONGODB-AWS",
            "3. AWS IAM Authentication Process",
            "   - MongoDB Atlas validates the signed STS request",
            "   - IAM policies determine database permissions",
            "4. Connection established with IAM permissions",
        ),
        hints=(
            "Ensure AWS credentials are properly configured",
            "Verify the MongoDB Atlas cluster allows AWS IAM authentication",
            "Check that a database user exists for the IAM user or role ARN",
        ),
        simulated_fields={"awsRegion": "us-east-1", "awsUser": "simulated-aws-user"},
        document_fields=lambda bundle: {"awsRegion": bundle.get("region")},
    ),
    MechanismKind.API_KEY: MechanismDescriptor(
        kind=MechanismKind.API_KEY,
        name="API Key Authentication",
        description="Atlas API key authentication",
        auth_method="api-key",
        requirements=(
            Requirement.field("public_key"),
            Requirement.field("private_key"),
            Requirement.field("cluster_url"),
            Requirement.field("database"),
        ),
        build_uri=_api_key_uri,
        build_options=_api_key_options,
        resolve_timeout_ms=_constant(CLOUD_TIMEOUT_MS),
        option_keys=frozenset({"serverSelectionTimeoutMS"}),
        env_vars={
            "public_key": "MONGODB_API_PUBLIC_KEY",
            "private_key": "MONGODB_API_PRIVATE_KEY",
            "cluster_url": "API_KEY_MONGO_CLUSTER_URL",
            "database": "API_KEY_MONGO_DATABASE",
            "project_id": "ATLAS_PROJECT_ID",
            "cluster_name": "ATLAS_CLUSTER_NAME",
        },
        narration=(
            "1. Loading MongoDB Atlas API keys",
            "   - Public Key: MONGODB_API_PUBLIC_KEY",
            "   - Private Key: MONGODB_API_PRIVATE_KEY",
            "2. Connecting to MongoDB Atlas",
            "   - Authentication Source: $external",
            "3. API Key Authentication Process",
            "   - Atlas validates the API key pair",
            "   - Public key identifies the application",
            "   - Permissions determined by API key configuration",
            "4. Connection established with API key permissions",
        ),
        hints=(
            "Ensure API keys are properly generated in Atlas",
            "Verify API key permissions for database access",
            "Check if the API key is active and not revoked",
            "Add this machine's IP address to the API key access list",
        ),
        simulated_fields={"apiKeyPublic": "simulated-public-key"},
        document_fields=lambda bundle: {"apiKeyPublic": bundle.get("public_key")},
    ),
    MechanismKind.SERVICE_ACCOUNT_OIDC: MechanismDescriptor(
        kind=MechanismKind.SERVICE_ACCOUNT_OIDC,
        name="Service Account Authentication",
        description="OIDC service account authentication",
        auth_method="service-account",
        requirements=(
            Requirement.one_of(("key_file",), ("client_email", "private_key", "project_id")),
            Requirement.field("audience"),
            Requirement.field("issuer"),
            Requirement.field("cluster_url"),
            Requirement.field("database"),
        ),
        build_uri=_oidc_uri,
        build_options=_oidc_options,
        resolve_timeout_ms=_constant(OIDC_TIMEOUT_MS),
        option_keys=frozenset({"authMechanismProperties", "serverSelectionTimeoutMS"}),
        file_fields=frozenset({"key_file"}),
        env_vars={
            "key_file": "GOOGLE_APPLICATION_CREDENTIALS",
            "client_email": "SERVICE_ACCOUNT_CLIENT_EMAIL",
            "private_key": "SERVICE_ACCOUNT_PRIVATE_KEY",
            "project_id": "SERVICE_ACCOUNT_PROJECT_ID",
            "audience": "OIDC_AUDIENCE",
            "issuer": "OIDC_ISSUER",
            "cluster_url": "SERVICE_ACCOUNT_MONGO_CLUSTER_URL",
            "database": "SERVICE_ACCOUNT_MONGO_DATABASE",
        },
        narration=(
            "1. Loading service account credentials",
            "2. Generating JWT token",
            "   - Creating JWT with service account claims",
            "   - Signing with private key (RS256)",
            "   - Setting 1-hour expiration",
            "3. OIDC Authentication Flow",
            "   - Driver requests a token through the callback",
            "   - MongoDB validates the OIDC token against the issuer",
            "4. Connection established with service account permissions",
        ),
        hints=(
            "Ensure the service account key is valid and not revoked",
            "Verify Atlas has a workforce or workload identity provider for the issuer",
            "Check that the token audience matches the identity provider configuration",
        ),
        simulated_fields={"serviceAccount": "service-account@project.iam.gserviceaccount.com"},
    ),
}


def get_descriptor(kind: MechanismKind) -> MechanismDescriptor:
    """Look up the descriptor for a mechanism."""
    return MECHANISMS[MechanismKind(kind)]
