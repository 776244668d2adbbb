"""Authenticated clone URLs for the supported git hosts."""

from repofetch.credentials import CredentialSet
from repofetch.git.submodules import credential_prefix
from repofetch.model.request import GitHostKind

PUBLIC_URL_PREFIX = "https://"


def build_repository_url(
    source: str, owner: str, name: str, credentials: CredentialSet
) -> str:
    """
    Build the clone URL of ``owner/name`` on ``source``.

    Examples:
        no token    -> https://github.com/owner/repo
        bitbucket   -> https://x-token-auth:T@bitbucket.org/owner/repo
        github      -> https://x-access-token:T@github.com/owner/repo
        cloudsource -> https://git:T@source.developers.google.com/p/owner/r/repo

    Args:
        source: Host name, e.g. github.com
        owner: Repository owner (or cloud project)
        name: Repository name
        credentials: Available tokens, see ``CredentialSet.active_host_kind``

    Returns:
        The clone URL
    """
    host_kind = credentials.active_host_kind
    if host_kind is None:
        return f"https://{source}/{owner}/{name}"

    prefix = credential_prefix(host_kind, credentials.token_for(host_kind))
    if host_kind == GitHostKind.cloudsource:
        return f"{prefix}{source}/p/{owner}/r/{name}"
    return f"{prefix}{source}/{owner}/{name}"


def build_override_url(
    source: str, owner: str, repository: str, credentials: CredentialSet
) -> str:
    """
    Clone URL for an override repository of the same owner.

    A repository given as a full https:// URL is used as is, which allows any
    public repository to be cloned.
    """
    if repository.startswith(PUBLIC_URL_PREFIX):
        return repository
    return build_repository_url(source, owner, repository, credentials)
