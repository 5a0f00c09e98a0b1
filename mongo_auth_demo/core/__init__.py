"""
Core module - mechanism table, configurator, token signing and errors.
"""
from mongo_auth_demo.core.configurator import (
    validate,
    build_plan,
    describe_simulation,
    describe_missing,
)
from mongo_auth_demo.core.exceptions import (
    AuthDemoError,
    ConfigurationError,
    ConnectionFailedError,
    OperationError,
)
from mongo_auth_demo.core.mechanisms import MECHANISMS, MechanismDescriptor, get_descriptor

__all__ = [
    "validate",
    "build_plan",
    "describe_simulation",
    "describe_missing",
    "AuthDemoError",
    "ConfigurationError",
    "ConnectionFailedError",
    "OperationError",
    "MECHANISMS",
    "MechanismDescriptor",
    "get_descriptor",
]
