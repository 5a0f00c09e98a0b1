"""
Credential bundle and validation result models.
"""
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CredentialBundle(BaseModel):
    """
    Externally supplied credential material for one mechanism.

    Maps field names to optional string values. Values are stripped of
    surrounding whitespace and numbers are stored as strings. Bundles are
    immutable; use `replace` or `without` to derive a modified copy.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True, coerce_numbers_to_str=True)

    entries: dict[str, Optional[str]] = Field(
        default_factory=dict,
        description="Credential field name to value",
    )

    @classmethod
    def of(cls, **entries: Optional[str]) -> "CredentialBundle":
        """Build a bundle from keyword arguments."""
        return cls(entries=entries)

    def get(self, name: str) -> Optional[str]:
        """Get a field value, or None when absent."""
        return self.entries.get(name)

    def is_set(self, name: str) -> bool:
        """True if the field holds a non-empty string."""
        value = self.entries.get(name)
        return isinstance(value, str) and value != ""

    def path(self, name: str) -> Optional[str]:
        """File field value with `~` expanded, or None when unset."""
        if not self.is_set(name):
            return None
        return str(Path(self.entries[name]).expanduser())

    def replace(self, **overrides: Optional[str]) -> "CredentialBundle":
        """Return a copy with the given fields replaced."""
        return CredentialBundle(entries={**self.entries, **overrides})

    def without(self, *names: str) -> "CredentialBundle":
        """Return a copy with the given fields removed."""
        return CredentialBundle(
            entries={k: v for k, v in self.entries.items() if k not in names}
        )


class ValidationResult(BaseModel):
    """Outcome of checking a bundle against a mechanism's requirements."""
    model_config = ConfigDict(frozen=True)

    complete: bool = Field(..., description="All required fields are usable")
    missing: frozenset[str] = Field(
        default_factory=frozenset,
        description="Required fields that are unset or point at a missing file",
    )
    missing_files: frozenset[str] = Field(
        default_factory=frozenset,
        description="Subset of missing fields whose file path does not exist",
    )

    @property
    def unset(self) -> frozenset[str]:
        """Missing fields that were never set (as opposed to bad file paths)."""
        return self.missing - self.missing_files
