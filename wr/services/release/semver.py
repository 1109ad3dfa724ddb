from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass

from wr.services.release.model import ReleaseBump


_TAG_RE = re.compile(r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)$")

INITIAL_VERSION_FIELDS = (1, 0, 0)


@dataclass(frozen=True, slots=True, order=True)
class SemVer:
    major: int
    minor: int
    patch: int

    def to_tag(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    def __str__(self) -> str:
        return self.to_tag()

    def bump(self, kind: ReleaseBump) -> "SemVer":
        match kind:
            case "major":
                return SemVer(self.major + 1, 0, 0)
            case "minor":
                return SemVer(self.major, self.minor + 1, 0)
            case "patch":
                return SemVer(self.major, self.minor, self.patch + 1)
            case _:
                raise AssertionError(f"unexpected bump kind: {kind}")


def parse_tag(tag: str) -> SemVer | None:
    """Parse a release tag (``1.2.3``); anything else is not a release tag."""
    m = _TAG_RE.match(tag.strip())
    if m is None:
        return None
    return SemVer(int(m.group(1)), int(m.group(2)), int(m.group(3)))


def latest_version(tags: Iterable[str]) -> SemVer | None:
    versions = [v for v in (parse_tag(t) for t in tags) if v is not None]
    return max(versions, default=None)


def next_version(tags: Iterable[str], kind: ReleaseBump) -> SemVer:
    """Version of the next release.

    The first release of a repository (no valid tag yet) is 1.0.0 whatever
    the bump kind.
    """
    latest = latest_version(tags)
    if latest is None:
        return SemVer(*INITIAL_VERSION_FIELDS)
    return latest.bump(kind)
