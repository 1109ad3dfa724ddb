"""Process exit codes.

The numeric values are part of the CLI contract and should remain stable:
- 0: Success
- 2: Environment error (missing tools, bad configuration, repository not
  ready or nothing to release)
- 3: Deploy error (pipeline not found, deploy timed out, deploy job failed)
- 4: Network error (fetch/push rejected, GitLab API unreachable)
- 6: Cancelled by the user

1 and 2 are also what click exits with on its own aborts and usage errors.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for the wr command."""

    OK = 0
    ENV_ERROR = 2
    DEPLOY_ERROR = 3
    NETWORK_ERROR = 4
    CANCELLED = 6

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK
