"""Reading API tokens from the credential files the CI server injects."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from repofetch.config import get_credentials_dir
from repofetch.exceptions import CredentialsError
from repofetch.model.request import GitHostKind

logger = logging.getLogger(__name__)


class TokenProperties(BaseModel):
    token: str = ""


class APITokenCredentials(BaseModel):
    """One entry of an injected credentials file."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = ""
    type: str = ""
    additional_properties: TokenProperties = Field(
        default_factory=TokenProperties, alias="additionalProperties"
    )


_credentials_list = TypeAdapter(List[APITokenCredentials])


def default_token_path(host_kind: GitHostKind) -> Path:
    """e.g. /credentials/github_api_token.json"""
    return get_credentials_dir() / f"{host_kind.value}_api_token.json"


def read_api_token(path: Path) -> str:
    """
    Read the token of the first credential in an injected credentials file.

    Args:
        path: Path to the JSON credentials file

    Returns:
        The token, or an empty string if the file does not exist

    Raises:
        CredentialsError: If the file cannot be read or parsed, or is empty
    """
    path = Path(path)
    if not path.exists():
        return ""

    logger.info(f"Reading credentials from file at path {path}...")
    try:
        content = path.read_bytes()
    except OSError as e:
        raise CredentialsError(str(path), f"failed reading file: {e}") from e

    try:
        credentials = _credentials_list.validate_json(content)
    except ValidationError as e:
        raise CredentialsError(str(path), f"failed unmarshalling: {e}") from e

    if not credentials:
        raise CredentialsError(str(path), "no credentials in file")

    return credentials[0].additional_properties.token


@dataclass(frozen=True)
class CredentialSet:
    """Tokens for each supported host; empty strings for hosts without one."""

    bitbucket: str = ""
    github: str = ""
    cloudsource: str = ""

    def token_for(self, host_kind: GitHostKind) -> str:
        return getattr(self, host_kind.value)

    @property
    def active_host_kind(self) -> Optional[GitHostKind]:
        """
        The host whose credentials are used for cloning.

        When several tokens are present the last one in bitbucket, github,
        cloudsource order wins, matching ``urls.build_repository_url``.
        """
        active = None
        for host_kind in GitHostKind:
            if self.token_for(host_kind):
                active = host_kind
        return active

    @property
    def active_token(self) -> str:
        host_kind = self.active_host_kind
        return self.token_for(host_kind) if host_kind else ""


def load_credentials(
    bitbucket_path: Optional[Path] = None,
    github_path: Optional[Path] = None,
    cloudsource_path: Optional[Path] = None,
) -> CredentialSet:
    """Read every host's token file, using the default location where no path is given."""
    paths = {
        GitHostKind.bitbucket: bitbucket_path,
        GitHostKind.github: github_path,
        GitHostKind.cloudsource: cloudsource_path,
    }
    tokens = {
        host_kind.value: read_api_token(path or default_token_path(host_kind))
        for host_kind, path in paths.items()
    }
    return CredentialSet(**tokens)
