"""
Git operations for repofetch.

Layers, leaves first:
    - paths: workspace-relative target directories
    - process: the git child process, its logging and its cancellation
    - submodules: credential rewrite of .gitmodules, init/update/restore
    - clone: one clone attempt (CloneExecutor)
    - retry: retry policy and RetryingCloner
"""

from .clone import CloneExecutor, clone_arguments
from .paths import resolve_target_dir
from .process import CancellationToken, GitRunner, mask_credentials
from .retry import RetryingCloner, RetryPolicy
from .submodules import credential_prefix, rewrite_submodule_urls, update_submodules

__all__ = [
    "CancellationToken",
    "CloneExecutor",
    "GitRunner",
    "RetryPolicy",
    "RetryingCloner",
    "clone_arguments",
    "credential_prefix",
    "mask_credentials",
    "resolve_target_dir",
    "rewrite_submodule_urls",
    "update_submodules",
]
