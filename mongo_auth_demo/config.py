"""
Configuration loaded from environment variables.

Each mechanism has its own settings class whose field names match the
environment variables the demos document. Settings are read once and
converted into an immutable CredentialBundle, which is what the rest of
the package consumes.
"""
from abc import abstractmethod
from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from mongo_auth_demo.models.credentials import CredentialBundle
from mongo_auth_demo.models.mechanism import MechanismKind

DEFAULT_CLUSTER_URL = "cluster0.example.mongodb.net"
DEFAULT_DATABASE = "testdb"


class AppSettings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    log_level: str = "INFO"
    debug: bool = False


class MechanismSettings(BaseSettings):
    """Base for per-mechanism credential settings; instantiate a subclass."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @abstractmethod
    def to_bundle(self) -> CredentialBundle:
        """Convert these settings into the mechanism's credential bundle."""


class PasswordSettings(MechanismSettings):
    """Username/password against a self-hosted server."""

    mongo_host: str = "localhost"
    mongo_port: int = 27017
    mongo_username: str = "admin"
    mongo_password: str = "password"
    mongo_auth_source: str = "admin"
    mongo_database: str = DEFAULT_DATABASE

    def to_bundle(self) -> CredentialBundle:
        return CredentialBundle.of(
            host=self.mongo_host,
            port=self.mongo_port,
            username=self.mongo_username,
            password=self.mongo_password,
            auth_source=self.mongo_auth_source,
            database=self.mongo_database,
        )


class CertificateSettings(MechanismSettings):
    """X.509 client certificate. CERT_MONGO_CLUSTER takes precedence over host/port."""

    cert_file_path: str = "./certs/client.pem"
    ca_file_path: str = "./certs/ca.pem"
    cert_subject: Optional[str] = None
    cert_mongo_cluster: Optional[str] = None
    cert_mongo_host: str = "localhost"
    cert_mongo_port: int = 27017
    cert_mongo_database: str = DEFAULT_DATABASE

    def to_bundle(self) -> CredentialBundle:
        return CredentialBundle.of(
            cert_file=self.cert_file_path,
            ca_file=self.ca_file_path,
            subject=self.cert_subject,
            cluster=self.cert_mongo_cluster,
            host=self.cert_mongo_host,
            port=self.cert_mongo_port,
            database=self.cert_mongo_database,
        )


class AwsSettings(MechanismSettings):
    """AWS IAM credentials for Atlas."""

    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None
    aws_session_token: Optional[str] = None
    aws_region: str = "us-east-1"
    aws_mongo_cluster_url: str = DEFAULT_CLUSTER_URL
    aws_mongo_database: str = DEFAULT_DATABASE

    def to_bundle(self) -> CredentialBundle:
        return CredentialBundle.of(
            access_key_id=self.aws_access_key_id,
            secret_access_key=self.aws_secret_access_key,
            session_token=self.aws_session_token,
            region=self.aws_region,
            cluster_url=self.aws_mongo_cluster_url,
            database=self.aws_mongo_database,
        )


class ApiKeySettings(MechanismSettings):
    """Atlas programmatic API key pair."""

    mongodb_api_public_key: Optional[str] = None
    mongodb_api_private_key: Optional[str] = None
    api_key_mongo_cluster_url: str = DEFAULT_CLUSTER_URL
    api_key_mongo_database: str = DEFAULT_DATABASE
    atlas_project_id: Optional[str] = None
    atlas_cluster_name: Optional[str] = None

    def to_bundle(self) -> CredentialBundle:
        return CredentialBundle.of(
            public_key=self.mongodb_api_public_key,
            private_key=self.mongodb_api_private_key,
            cluster_url=self.api_key_mongo_cluster_url,
            database=self.api_key_mongo_database,
            project_id=self.atlas_project_id,
            cluster_name=self.atlas_cluster_name,
        )


class ServiceAccountSettings(MechanismSettings):
    """OIDC service account, from a key file or inline variables."""

    google_application_credentials: str = "./service-account-key.json"
    service_account_client_email: Optional[str] = None
    service_account_private_key: Optional[str] = None
    service_account_project_id: Optional[str] = None
    oidc_audience: str = "mongodb://atlas"
    oidc_issuer: str = "https://accounts.google.com"
    service_account_mongo_cluster_url: str = DEFAULT_CLUSTER_URL
    service_account_mongo_database: str = DEFAULT_DATABASE

    def to_bundle(self) -> CredentialBundle:
        return CredentialBundle.of(
            key_file=self.google_application_credentials,
            client_email=self.service_account_client_email,
            private_key=self.service_account_private_key,
            project_id=self.service_account_project_id,
            audience=self.oidc_audience,
            issuer=self.oidc_issuer,
            cluster_url=self.service_account_mongo_cluster_url,
            database=self.service_account_mongo_database,
        )


SETTINGS_BY_KIND: dict[MechanismKind, type[MechanismSettings]] = {
    MechanismKind.PASSWORD: PasswordSettings,
    MechanismKind.CERTIFICATE: CertificateSettings,
    MechanismKind.AWS_IAM: AwsSettings,
    MechanismKind.API_KEY: ApiKeySettings,
    MechanismKind.SERVICE_ACCOUNT_OIDC: ServiceAccountSettings,
}


def load_bundle(kind: MechanismKind, **overrides) -> CredentialBundle:
    """
    Read a mechanism's settings from the environment and build its bundle.

    Args:
        kind: Mechanism whose settings to read
        **overrides: Settings init arguments (e.g. `_env_file=None` in tests)

    Returns:
        A fresh CredentialBundle; the environment is re-read on every call
    """
    settings_cls = SETTINGS_BY_KIND[MechanismKind(kind)]
    return settings_cls(**overrides).to_bundle()


@lru_cache
def get_settings() -> AppSettings:
    """Get cached settings instance."""
    return AppSettings()
