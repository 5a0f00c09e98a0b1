"""
Service layer - demo orchestration and cloud API clients.
"""
from mongo_auth_demo.services.atlas_api import AtlasAPI
from mongo_auth_demo.services.aws_identity import AwsIdentity, AwsIdentityService
from mongo_auth_demo.services.demo_runner import AuthDemoRunner, DemoResult, DemoStatus

__all__ = [
    "AtlasAPI",
    "AwsIdentity",
    "AwsIdentityService",
    "AuthDemoRunner",
    "DemoResult",
    "DemoStatus",
]
