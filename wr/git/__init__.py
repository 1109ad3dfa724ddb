"""Git operations."""

from .credentials import CredentialProvider, SshAgentCredentials
from .repository import GitError, Repository, ref_by_branch, ref_by_tag

__all__ = [
    "CredentialProvider",
    "GitError",
    "Repository",
    "SshAgentCredentials",
    "ref_by_branch",
    "ref_by_tag",
]
