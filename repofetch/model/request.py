"""Pydantic models describing a single fetch invocation."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator


def validate_non_empty_string(v: str) -> str:
    """Validate that a string is not empty."""
    if not v or not v.strip():
        raise ValueError("must be a non-empty string")
    return v


class GitHostKind(str, Enum):
    """Git hosting services whose credentials can be embedded in URLs."""

    bitbucket = "bitbucket"
    github = "github"
    cloudsource = "cloudsource"


class FetchRequest(BaseModel):
    """Everything the fetch core needs, resolved once at the boundary."""

    model_config = ConfigDict(frozen=True)

    repository_name: str = Field(..., description="Repository name, for logging")
    repository_url: str = Field(
        ..., description="Clone URL, possibly with credentials", repr=False
    )
    branch: str = Field(..., description="Branch to clone")
    revision: str = Field("", description="Revision to check out, empty for tip")
    shallow: bool = Field(True, description="Limit the history depth of the clone")
    shallow_depth: int = Field(50, ge=1, description="History depth when shallow")
    subdirectory: str = Field(".", description="Target, relative to the workspace")
    git_host_kind: Optional[GitHostKind] = Field(
        None, description="Host whose credential form submodule URLs get"
    )
    token: SecretStr = Field(
        SecretStr(""), description="Token embedded into submodule URLs"
    )

    @field_validator("repository_name", "repository_url", "branch")
    @classmethod
    def validate_required(cls, v: str) -> str:
        return validate_non_empty_string(v)

    @field_validator("subdirectory")
    @classmethod
    def validate_subdirectory(cls, v: str) -> str:
        return v.strip() or "."

    @field_validator("git_host_kind", mode="before")
    @classmethod
    def validate_host_kind(cls, v):
        # Unknown hosts are not a validation error: they only matter once a
        # submodule manifest has to be rewritten.
        if isinstance(v, str) and v not in GitHostKind.__members__:
            return None
        return v

    @property
    def has_revision(self) -> bool:
        return bool(self.revision)
