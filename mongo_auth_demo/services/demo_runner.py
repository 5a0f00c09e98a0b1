"""
Demo runner - validates credentials, connects, and runs the operation sequence.

One run per mechanism:
- Incomplete credentials: print the scripted walkthrough and simulated results
- Complete credentials: build a plan, run the mechanism's preflight, connect,
  then list databases -> list collections -> insert -> sample -> stats
- Any AuthDemoError is logged with hints; the client is always closed
"""
import asyncio
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Optional

import httpx
from motor.motor_asyncio import AsyncIOMotorClient
from pydantic import BaseModel, Field

from mongo_auth_demo.core.configurator import (
    DEMO_COLLECTION,
    build_document,
    build_plan,
    describe_missing,
    describe_simulation,
    validate,
)
from mongo_auth_demo.core.exceptions import AuthDemoError, ConfigurationError
from mongo_auth_demo.core.mechanisms import MechanismDescriptor, get_descriptor
from mongo_auth_demo.database.connections import ClientFactory, open_client
from mongo_auth_demo.database.operations import DatabaseOperations
from mongo_auth_demo.models.credentials import CredentialBundle, ValidationResult
from mongo_auth_demo.models.mechanism import MechanismKind
from mongo_auth_demo.models.operation_log import OperationLog, Steps
from mongo_auth_demo.models.plan import ConnectionPlan
from mongo_auth_demo.services.atlas_api import AtlasAPI
from mongo_auth_demo.services.aws_identity import AwsIdentityService
from mongo_auth_demo.utils.formatters import (
    format_banner,
    format_hints,
    format_log,
    format_mongosh,
    format_results,
    format_step,
)

logger = logging.getLogger(__name__)

SAMPLE_LIMIT = 3
CLUSTER_INFO_FIELDS = ("name", "stateName", "clusterType", "mongoDBVersion")
SEPARATOR = "─" * 60


class DemoStatus(str, Enum):
    """How a demo run ended."""
    LIVE = "live"
    SIMULATED = "simulated"
    FAILED = "failed"


class DemoResult(BaseModel):
    """Outcome of one mechanism's demo."""
    kind: MechanismKind
    status: DemoStatus
    log: Optional[OperationLog] = Field(None, description="Results, when any step ran")
    error: Optional[str] = Field(None, description="Failure message")


class AuthDemoRunner:
    """Runs authentication demos against a driver and cloud SDKs supplied at construction."""

    def __init__(
        self,
        client_factory: ClientFactory = AsyncIOMotorClient,
        aws_identity_factory: Callable[[CredentialBundle], AwsIdentityService] = AwsIdentityService,
        atlas_api_factory: Callable[[str, str], AtlasAPI] = AtlasAPI,
        echo: Callable[[str], None] = print,
        debug: bool = False,
    ):
        self.client_factory = client_factory
        self.aws_identity_factory = aws_identity_factory
        self.atlas_api_factory = atlas_api_factory
        self.echo = echo
        self.debug = debug

    async def run(self, kind: MechanismKind, bundle: CredentialBundle) -> DemoResult:
        """
        Run the demo for one mechanism.

        Args:
            kind: Mechanism to demonstrate
            bundle: Credential material for that mechanism

        Returns:
            DemoResult; AuthDemoErrors are reported, not raised
        """
        descriptor = get_descriptor(kind)
        self.echo(format_banner(f"MongoDB {descriptor.name} Demo"))

        validation = validate(bundle, descriptor.kind)
        if not validation.complete:
            logger.warning(describe_missing(validation, descriptor))
            return self._simulate(descriptor, validation)

        try:
            plan = build_plan(bundle, descriptor.kind)
            self.echo(format_mongosh(plan))
            extra = await self._preflight(descriptor, bundle, plan)
            document_fields = {**descriptor.document_fields(bundle), **extra}
            log = await self._execute(plan, document_fields)
        except AuthDemoError as e:
            self._report_failure(descriptor, e)
            return DemoResult(kind=descriptor.kind, status=DemoStatus.FAILED, error=e.message)

        self.echo(f"✓ {descriptor.name} demo completed successfully")
        return DemoResult(kind=descriptor.kind, status=DemoStatus.LIVE, log=log)

    async def run_all(
        self,
        bundle_loader: Callable[[MechanismKind], CredentialBundle],
    ) -> list[DemoResult]:
        """
        Run every mechanism in turn. One mechanism failing never stops the next.

        Args:
            bundle_loader: Builds the bundle for a mechanism, e.g. from settings
        """
        self.echo(format_banner("Running All MongoDB Authentication Demos"))
        results: list[DemoResult] = []

        for kind in MechanismKind:
            try:
                results.append(await self.run(kind, bundle_loader(kind)))
            except Exception as e:
                logger.exception(f"{kind.value} demo aborted")
                results.append(DemoResult(kind=kind, status=DemoStatus.FAILED, error=str(e)))
            self.echo(f"\n{SEPARATOR}\n")

        self.echo("✓ All authentication demos completed")
        return results

    # ==================== Simulation ====================

    def _simulate(
        self,
        descriptor: MechanismDescriptor,
        validation: ValidationResult,
    ) -> DemoResult:
        self.echo(format_banner(f"{descriptor.name} Demo (Simulation Mode)"))
        self.echo("Credentials not found. This is expected in a demo environment.")
        self._echo_missing(descriptor, validation.missing, validation.missing_files)
        self.echo("Here's what would happen with proper credentials:\n")
        for line in descriptor.narration:
            self.echo(line)

        log = describe_simulation(descriptor.kind)
        self.echo("\nDatabase operations that would be performed:")
        self.echo(format_log(log))
        self.echo("No connection was made; the results above are simulated.")
        return DemoResult(kind=descriptor.kind, status=DemoStatus.SIMULATED, log=log)

    def _echo_missing(
        self,
        descriptor: MechanismDescriptor,
        missing: frozenset[str],
        missing_files: frozenset[str],
    ) -> None:
        for name in sorted(missing):
            env_var = descriptor.env_vars.get(name, name)
            if name in missing_files:
                self.echo(f"⚠ File not found for {env_var}: check the path")
            else:
                self.echo(f"⚠ {env_var} is not set")

    # ==================== Preflight ====================

    async def _preflight(
        self,
        descriptor: MechanismDescriptor,
        bundle: CredentialBundle,
        plan: ConnectionPlan,
    ) -> dict[str, Any]:
        """Mechanism-specific checks before connecting. Returns extra document fields."""
        if descriptor.kind == MechanismKind.AWS_IAM:
            return await self._preflight_aws(bundle)
        if descriptor.kind == MechanismKind.SERVICE_ACCOUNT_OIDC:
            return await self._preflight_service_account(bundle, plan)
        if descriptor.kind == MechanismKind.API_KEY and bundle.is_set("project_id"):
            await self._preflight_atlas_clusters(bundle)
        return {}

    async def _preflight_aws(self, bundle: CredentialBundle) -> dict[str, Any]:
        self.echo("Validating AWS credentials...")
        identity = await self.aws_identity_factory(bundle).get_caller_identity()
        self.echo(f"   AWS User ARN: {identity.arn}")
        self.echo(f"   AWS Account: {identity.account}")
        return {"awsUser": identity.arn}

    async def _preflight_service_account(
        self,
        bundle: CredentialBundle,
        plan: ConnectionPlan,
    ) -> dict[str, Any]:
        self.echo("Validating service account configuration...")
        callback = plan.mechanism_options["authMechanismProperties"]["OIDC_CALLBACK"]
        supplier = callback.supplier
        key = await asyncio.to_thread(supplier.load_key)
        self.echo(f"   Service Account: {key.client_email}")
        self.echo(f"   Project ID: {key.project_id or '-'}")
        self.echo(f"   Audience: {bundle.get('audience')}")
        self.echo(f"   Issuer: {bundle.get('issuer')}")
        await asyncio.to_thread(supplier.get_token)
        expires = datetime.fromtimestamp(supplier.expires_at, timezone.utc)
        self.echo(f"   Token signed, expires {expires.isoformat()}")
        return {"serviceAccount": key.client_email}

    async def _preflight_atlas_clusters(self, bundle: CredentialBundle) -> None:
        project_id = bundle.get("project_id")
        self.echo(f"Fetching clusters for Atlas project {project_id}...")
        cluster = None
        try:
            async with self.atlas_api_factory(
                bundle.get("public_key"), bundle.get("private_key")
            ) as api:
                clusters = await api.list_clusters(project_id)
                if bundle.is_set("cluster_name"):
                    cluster = await api.get_cluster(project_id, bundle.get("cluster_name"))
        except httpx.HTTPError as e:
            logger.warning(f"Atlas Admin API lookup failed: {e}")
            return
        self.echo(format_results(
            "Atlas Clusters",
            [item.get("name", "-") for item in clusters],
        ))
        if cluster is not None:
            self.echo(format_results(
                "Cluster Information",
                {key: cluster.get(key) for key in CLUSTER_INFO_FIELDS},
            ))

    # ==================== Live Run ====================

    async def _execute(self, plan: ConnectionPlan, document_fields: dict[str, Any]) -> OperationLog:
        """Connect and run the operation sequence strictly in order."""
        log = OperationLog(kind=plan.kind)

        async with open_client(plan, self.client_factory) as client:
            self.echo(f"✓ Successfully connected using {plan.kind.value} authentication")
            ops = DatabaseOperations(client)

            self._record(log, Steps.DATABASES, "Available Databases", await ops.list_databases())
            self._record(
                log,
                Steps.COLLECTIONS,
                f"Collections in {plan.database}",
                await ops.list_collections(plan.database),
            )

            document = build_document(plan.kind, document_fields)
            await ops.insert_test_document(plan.database, DEMO_COLLECTION, document)
            self._record(log, Steps.INSERTED_DOCUMENT, "Inserted Document", document)

            samples = await ops.get_sample_documents(plan.database, DEMO_COLLECTION, SAMPLE_LIMIT)
            self._record(
                log, Steps.SAMPLE_DOCUMENTS, f"Sample Documents from {DEMO_COLLECTION}", samples
            )

            stats = await ops.get_database_stats(plan.database)
            self._record(log, Steps.STATS, "Database Statistics", stats)

        return log

    def _record(self, log: OperationLog, name: str, title: str, data: Any) -> None:
        step = log.add(name, title, data)
        self.echo(format_step(step))

    # ==================== Errors ====================

    def _report_failure(self, descriptor: MechanismDescriptor, error: AuthDemoError) -> None:
        logger.error(
            f"Error in {descriptor.name} Demo: {error.message}",
            exc_info=error if self.debug else None,
        )
        self.echo(f"\nError in {descriptor.name} Demo:\n   {error.message}")
        if isinstance(error, ConfigurationError):
            self._echo_missing(descriptor, error.missing, error.missing_files)
        self.echo(format_hints(descriptor.hints))
