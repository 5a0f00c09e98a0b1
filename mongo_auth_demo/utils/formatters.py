"""
Centralized formatting utilities for console narration.
"""
import json
import re
from typing import Any, Iterable, Optional

from mongo_auth_demo.models.mechanism import MechanismKind
from mongo_auth_demo.models.operation_log import OperationLog, OperationStep, Steps
from mongo_auth_demo.models.plan import ConnectionPlan

RULE_WIDTH = 50
SIMULATED_TAG = "[SIMULATED]"

_USERINFO_PASSWORD = re.compile(r"^(?P<scheme>mongodb(?:\+srv)?://)(?P<user>[^:@/]*):(?P<password>[^@/]*)@")


def format_kb(value: Optional[float]) -> str:
    """Format a byte count as kilobytes."""
    try:
        if value is None:
            return "-"
        return f"{value / 1024:.2f} KB"
    except Exception:
        return "-"


def format_stats(stats: dict[str, Any]) -> dict[str, Any]:
    """Reduce dbStats output to the fields the demo shows."""
    return {
        "collections": stats.get("collections"),
        "dataSize": format_kb(stats.get("dataSize")),
        "indexSize": format_kb(stats.get("indexSize")),
        "objects": stats.get("objects"),
    }


def _to_text(item: Any) -> str:
    if isinstance(item, (dict, list)):
        return json.dumps(item, indent=2, default=str)
    return str(item)


def format_results(title: str, data: Any, width: int = RULE_WIDTH) -> str:
    """
    Render a titled result block.

    Lists are numbered, mappings are shown as JSON, and anything else is
    printed as-is. Empty lists show "No results found".
    """
    rule = "=" * width
    lines = ["", rule, f"  {title}", rule]

    if isinstance(data, list):
        if not data:
            lines.append("No results found")
        for index, item in enumerate(data, start=1):
            lines.append(f"{index}. {_to_text(item)}")
    else:
        lines.append(_to_text(data))

    lines.append(rule)
    return "\n".join(lines)


def format_step(step: OperationStep, simulated: bool = False) -> str:
    """Render one operation log step, tagging placeholder results."""
    title = f"{SIMULATED_TAG} {step.title}" if simulated else step.title
    data = format_stats(step.data) if step.name == Steps.STATS else step.data
    return format_results(title, data)


def format_log(log: OperationLog) -> str:
    """Render every step of an operation log."""
    return "\n".join(format_step(step, log.simulated) for step in log.steps)


def format_banner(title: str, char: str = "=") -> str:
    """Title underlined to its own length."""
    return f"{title}\n{char * len(title)}"


def redact_uri(uri: str) -> str:
    """Mask the password segment of a connection string."""
    return _USERINFO_PASSWORD.sub(r"\g<scheme>\g<user>:***@", uri)


def mongosh_command(plan: ConnectionPlan) -> list[str]:
    """
    Equivalent mongosh invocation for a connection plan.

    Secrets in the URI are redacted; certificate paths are shown since
    they are not secret.
    """
    uri = redact_uri(plan.endpoint_uri)
    options = plan.mechanism_options

    if plan.kind == MechanismKind.CERTIFICATE:
        return [
            f'mongosh "{uri}" --tls '
            f"--tlsCertificateKeyFile {options.get('tlsCertificateKeyFile')} "
            f"--tlsCAFile {options.get('tlsCAFile')} "
            "--authenticationMechanism MONGODB-X509 --authenticationDatabase '$external'",
        ]
    if plan.kind == MechanismKind.AWS_IAM:
        return [
            "// Set AWS credentials first:",
            "// export AWS_ACCESS_KEY_ID=your_access_key",
            "// export AWS_SECRET_ACCESS_KEY=your_secret_key",
            f'mongosh "{uri}" --authenticationMechanism MONGODB-AWS',
        ]
    if plan.kind == MechanismKind.SERVICE_ACCOUNT_OIDC:
        return [
            "// Set service account key file:",
            "// export GOOGLE_APPLICATION_CREDENTIALS=path/to/service-account.json",
            f'mongosh "{uri}" --authenticationMechanism MONGODB-OIDC',
        ]
    return [f'mongosh "{uri}"']


COMMON_SHELL_COMMANDS = (
    "show dbs                    // List databases",
    "use myDatabase              // Switch to database",
    "show collections            // List collections",
    "db.myCollection.find()      // Query collection",
)


def format_mongosh(plan: ConnectionPlan, width: int = 60) -> str:
    """Render the mongosh equivalent block with common shell commands."""
    rule = "=" * width
    lines: list[str] = [rule, f"  MONGOSH EQUIVALENT FOR {plan.kind.value.upper()}", rule]
    lines.extend(mongosh_command(plan))
    lines.append("")
    lines.append("// Common operations after connection:")
    lines.extend(COMMON_SHELL_COMMANDS)
    lines.append(rule)
    return "\n".join(lines)


def format_hints(hints: Iterable[str]) -> str:
    """Render troubleshooting tips."""
    return "\n".join(["Tips:", *(f"   - {hint}" for hint in hints)])
