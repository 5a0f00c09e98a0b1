"""
Authentication mechanism identifiers.
"""
from enum import Enum


class MechanismKind(str, Enum):
    """
    Supported MongoDB authentication mechanisms.

    Values double as the CLI keys used to select a demo.
    """
    PASSWORD = "password"
    CERTIFICATE = "certificate"
    AWS_IAM = "aws"
    API_KEY = "apikey"
    SERVICE_ACCOUNT_OIDC = "serviceaccount"

    @classmethod
    def from_cli(cls, value: str) -> "MechanismKind":
        """
        Resolve a CLI argument to a mechanism.

        Raises:
            ValueError: If the value names no known mechanism
        """
        return cls(value.strip().lower())
