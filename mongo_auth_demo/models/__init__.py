"""
Pydantic models for credentials, connection plans and demo results.
"""
from mongo_auth_demo.models.mechanism import MechanismKind
from mongo_auth_demo.models.credentials import CredentialBundle, ValidationResult
from mongo_auth_demo.models.plan import ConnectionPlan
from mongo_auth_demo.models.operation_log import OperationLog, OperationStep, Steps

__all__ = [
    "MechanismKind",
    "CredentialBundle",
    "ValidationResult",
    "ConnectionPlan",
    "OperationLog",
    "OperationStep",
    "Steps",
]
