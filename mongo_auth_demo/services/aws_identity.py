"""
AWS caller identity lookup for the IAM demo.

The boto3 session is always built from the bundle's explicit credentials;
ambient SDK configuration (shared credentials file, instance metadata) is
neither read nor modified.
"""
import asyncio
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from pydantic import BaseModel, Field

from mongo_auth_demo.core.exceptions import ConnectionFailedError
from mongo_auth_demo.models.credentials import CredentialBundle
from mongo_auth_demo.models.mechanism import MechanismKind


class AwsIdentity(BaseModel):
    """Result of STS GetCallerIdentity."""
    arn: str = Field(..., description="IAM user or assumed role ARN")
    account: str = Field(..., description="AWS account id")
    user_id: Optional[str] = Field(None, description="Unique id of the caller")


def build_session(bundle: CredentialBundle) -> boto3.Session:
    """Create a boto3 session from explicit bundle credentials."""
    return boto3.Session(
        aws_access_key_id=bundle.get("access_key_id"),
        aws_secret_access_key=bundle.get("secret_access_key"),
        aws_session_token=bundle.get("session_token") or None,
        region_name=bundle.get("region"),
    )


class AwsIdentityService:
    """Validates AWS credentials before the database handshake."""

    def __init__(self, bundle: CredentialBundle):
        self.session = build_session(bundle)

    async def get_caller_identity(self) -> AwsIdentity:
        """
        Ask STS who the credentials belong to.

        Raises:
            ConnectionFailedError: If STS rejects the credentials or is unreachable
        """
        try:
            sts = self.session.client("sts")
            response = await asyncio.to_thread(sts.get_caller_identity)
        except (BotoCoreError, ClientError) as e:
            raise ConnectionFailedError(
                f"AWS credential validation failed: {e}", MechanismKind.AWS_IAM
            ) from e

        return AwsIdentity(
            arn=response["Arn"],
            account=response["Account"],
            user_id=response.get("UserId"),
        )
