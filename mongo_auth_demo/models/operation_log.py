"""
Operation log produced by a live or simulated demo run.
"""
from typing import Any, Optional

from pydantic import BaseModel, Field

from mongo_auth_demo.models.mechanism import MechanismKind


class Steps:
    """Step names, in execution order."""
    DATABASES = "databases"
    COLLECTIONS = "collections"
    INSERTED_DOCUMENT = "inserted_document"
    SAMPLE_DOCUMENTS = "sample_documents"
    STATS = "stats"

    ORDER = (DATABASES, COLLECTIONS, INSERTED_DOCUMENT, SAMPLE_DOCUMENTS, STATS)


class OperationStep(BaseModel):
    """A single named step and its result."""
    name: str = Field(..., description="Step identifier, see Steps")
    title: str = Field(..., description="Display title")
    data: Any = Field(None, description="Step result")


class OperationLog(BaseModel):
    """Ordered results of one demo run. Display only."""
    kind: MechanismKind
    simulated: bool = Field(default=False, description="Results are placeholders")
    steps: list[OperationStep] = Field(default_factory=list)

    def add(self, name: str, title: str, data: Any) -> OperationStep:
        """Append a step and return it."""
        step = OperationStep(name=name, title=title, data=data)
        self.steps.append(step)
        return step

    def get(self, name: str) -> Optional[Any]:
        """Data for the named step, or None if it never ran."""
        for step in self.steps:
            if step.name == name:
                return step.data
        return None

    def step_names(self) -> list[str]:
        return [step.name for step in self.steps]
