"""
Credential-aware connection configurator.

Turns a CredentialBundle into a ConnectionPlan for a given mechanism, or
reports which fields are missing. Simulation output for incomplete bundles
comes from a fixed dataset so demos run without real infrastructure.

Every function here is a pure transform of its arguments apart from the
file-existence checks made during validation.
"""
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from mongo_auth_demo.core.exceptions import ConfigurationError
from mongo_auth_demo.core.mechanisms import MechanismDescriptor, get_descriptor
from mongo_auth_demo.models.credentials import CredentialBundle, ValidationResult
from mongo_auth_demo.models.mechanism import MechanismKind
from mongo_auth_demo.models.operation_log import OperationLog, Steps
from mongo_auth_demo.models.plan import ConnectionPlan

SIMULATED_DATABASES = ["admin", "config", "local", "testdb"]
SIMULATED_COLLECTIONS = ["auth_demo", "users", "logs"]
SIMULATED_DOCUMENT_ID = "simulated_id"
SIMULATED_STATS = {
    "collections": 3,
    "dataSize": 512,
    "indexSize": 4096,
    "objects": 1,
}

DEMO_COLLECTION = "auth_demo"


def _file_missing(bundle: CredentialBundle, name: str) -> bool:
    return not Path(bundle.path(name)).is_file()


def validate(bundle: CredentialBundle, kind: MechanismKind) -> ValidationResult:
    """
    Check a bundle against a mechanism's requirements.

    A requirement with alternatives is met when every field of one
    alternative is set (and, for file fields, points at an existing file).
    When none is met, the gaps of every alternative are reported.

    Args:
        bundle: Credential material to check
        kind: Mechanism the bundle should satisfy

    Returns:
        ValidationResult naming unset fields and fields with bad file paths
    """
    descriptor = get_descriptor(kind)
    missing: set[str] = set()
    missing_files: set[str] = set()

    for requirement in descriptor.requirements:
        gaps: set[str] = set()
        bad_files: set[str] = set()
        for alternative in requirement.alternatives:
            unset = {name for name in alternative if not bundle.is_set(name)}
            not_found = {
                name for name in alternative
                if name in descriptor.file_fields
                and name not in unset
                and _file_missing(bundle, name)
            }
            if not unset and not not_found:
                break
            gaps |= unset
            bad_files |= not_found
        else:
            missing |= gaps | bad_files
            missing_files |= bad_files

    return ValidationResult(
        complete=not missing,
        missing=frozenset(missing),
        missing_files=frozenset(missing_files),
    )


def build_plan(bundle: CredentialBundle, kind: MechanismKind) -> ConnectionPlan:
    """
    Build the connection plan for a complete bundle.

    Raises:
        ConfigurationError: If the bundle is incomplete for the mechanism, or
            the mechanism emitted an option outside its vocabulary
    """
    descriptor = get_descriptor(kind)
    result = validate(bundle, descriptor.kind)
    if not result.complete:
        raise ConfigurationError(
            describe_missing(result, descriptor),
            kind=descriptor.kind,
            missing=result.missing,
            missing_files=result.missing_files,
        )

    timeout_ms = descriptor.resolve_timeout_ms(bundle)
    options = descriptor.build_options(bundle, timeout_ms)

    unexpected = set(options) - descriptor.option_keys
    if unexpected:
        raise ConfigurationError(
            f"{descriptor.name} does not accept options: {', '.join(sorted(unexpected))}",
            kind=descriptor.kind,
        )

    return ConnectionPlan(
        kind=descriptor.kind,
        endpoint_uri=descriptor.build_uri(bundle),
        database=bundle.get("database"),
        mechanism_options=options,
        timeout_ms=timeout_ms,
    )


def describe_missing(result: ValidationResult, descriptor: MechanismDescriptor) -> str:
    """Human-readable summary of what to fix, naming environment variables."""
    parts = []
    if result.unset:
        names = [
            descriptor.env_vars.get(name, name)
            for name in sorted(result.unset)
        ]
        parts.append(f"set {', '.join(names)}")
    if result.missing_files:
        names = [
            descriptor.env_vars.get(name, name)
            for name in sorted(result.missing_files)
        ]
        parts.append(f"file not found for {', '.join(names)}")
    detail = "; ".join(parts) if parts else "no missing fields"
    return f"{descriptor.name} credentials incomplete: {detail}"


def build_document(kind: MechanismKind, extra: dict[str, Any]) -> dict[str, Any]:
    """Demo document written by a run of the given mechanism."""
    descriptor = get_descriptor(kind)
    return {
        "timestamp": datetime.now(timezone.utc),
        "authMethod": descriptor.auth_method,
        "message": descriptor.greeting,
        **extra,
    }


def describe_simulation(kind: MechanismKind) -> OperationLog:
    """
    Fixed placeholder results for a mechanism whose credentials are missing.

    Only the document timestamp differs between calls.
    """
    descriptor = get_descriptor(kind)
    document = {
        "_id": SIMULATED_DOCUMENT_ID,
        **build_document(descriptor.kind, dict(descriptor.simulated_fields)),
    }

    log = OperationLog(kind=descriptor.kind, simulated=True)
    log.add(Steps.DATABASES, "Databases", list(SIMULATED_DATABASES))
    log.add(Steps.COLLECTIONS, "Collections", list(SIMULATED_COLLECTIONS))
    log.add(Steps.INSERTED_DOCUMENT, "Inserted Document", document)
    log.add(Steps.SAMPLE_DOCUMENTS, f"Sample Documents from {DEMO_COLLECTION}", [dict(document)])
    log.add(Steps.STATS, "Database Statistics", dict(SIMULATED_STATS))
    return log
