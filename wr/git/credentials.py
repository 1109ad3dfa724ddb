"""Credentials for network git operations.

Fetch and push go through the system ssh client, which asks the running
ssh-agent for keys. The provider only shapes the child environment so that
git never blocks on an interactive prompt.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Protocol

__all__ = ["CredentialProvider", "SshAgentCredentials"]


class CredentialProvider(Protocol):
    def env(self) -> dict[str, str]:
        """Environment for a git subprocess that talks to the remote."""
        ...

    def available(self) -> bool:
        """Whether credentials can be supplied at all."""
        ...


class SshAgentCredentials:
    """ssh-agent backed credentials."""

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        self._environ = dict(os.environ if environ is None else environ)

    def available(self) -> bool:
        return bool(self._environ.get("SSH_AUTH_SOCK"))

    def env(self) -> dict[str, str]:
        out = dict(self._environ)
        out["GIT_TERMINAL_PROMPT"] = "0"
        out.setdefault("GIT_SSH_COMMAND", "ssh -o BatchMode=yes")
        return out
