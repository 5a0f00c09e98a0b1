"""
Connection plan handed to the MongoDB driver.
"""
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from mongo_auth_demo.models.mechanism import MechanismKind


class ConnectionPlan(BaseModel):
    """
    Ready-to-use endpoint and driver options for one connection attempt.

    Built fresh for every attempt and never persisted.
    """
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    kind: MechanismKind = Field(..., description="Mechanism the plan authenticates with")
    endpoint_uri: str = Field(..., description="MongoDB connection string")
    database: str = Field(..., description="Database the demo works against")
    mechanism_options: dict[str, Any] = Field(
        default_factory=dict,
        description="Keyword options for the driver client",
    )
    timeout_ms: int = Field(..., description="Server selection timeout in milliseconds")

    def client_kwargs(self) -> dict[str, Any]:
        """Driver keyword arguments for this plan."""
        return dict(self.mechanism_options)
