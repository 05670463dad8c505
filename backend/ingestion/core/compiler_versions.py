"""Compiler version index built from the solc build manifest.

The manifest (solc-bin `list.txt`) has one build artifact per line, e.g.
`soljson-v0.4.24+commit.e67f0147.js`. Explorers only report a short commit
hash for the compiler, so the index maps the first 6 characters of the build
identifier to the canonical version string (`0.4.24+commit.e67f0147`).
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from types import MappingProxyType
from typing import Iterator, Optional

logger = logging.getLogger(__name__)

FINGERPRINT_LENGTH = 6
COMMIT_MARKER = "commit"

_ARTIFACT_RE = re.compile(r"([a-z0-9]+)\.js$")
_VERSION_PREFIX = "soljson-v"
_VERSION_SUFFIX = ".js"
_COMPILER_TAIL_RE = re.compile(r"([a-z0-9]+)$")


def _version_from_line(line: str) -> str:
    version = line.strip()
    if version.startswith(_VERSION_PREFIX):
        version = version[len(_VERSION_PREFIX):]
    if version.endswith(_VERSION_SUFFIX):
        version = version[: -len(_VERSION_SUFFIX)]
    return version


def compiler_fingerprint(compiler: str) -> Optional[str]:
    """Fingerprint of an explorer compiler string, e.g. `v0.4.24+commit.e67f0147` -> `e67f01`."""
    match = _COMPILER_TAIL_RE.search((compiler or "").strip())
    if not match:
        return None
    return match.group(1)[:FINGERPRINT_LENGTH]


class CompilerVersionIndex(Mapping):
    """Read-only fingerprint -> version mapping.

    Built once at startup; there is no way to mutate it afterwards.
    """

    def __init__(self, versions: Mapping[str, str]) -> None:
        self._versions = MappingProxyType(dict(versions))

    @classmethod
    def from_manifest(cls, text: str) -> "CompilerVersionIndex":
        """Parse a newline-delimited manifest.

        Lines that do not end in `<identifier>.js` are ignored. When two lines
        share a fingerprint the later one wins, unless the earlier version
        already carries a full commit marker.
        """
        versions: dict[str, str] = {}
        for line in text.splitlines():
            parsed = _ARTIFACT_RE.search(line.strip())
            if not parsed:
                continue

            fingerprint = parsed.group(1)[:FINGERPRINT_LENGTH]
            existing = versions.get(fingerprint)
            if existing is not None and COMMIT_MARKER in existing:
                continue

            versions[fingerprint] = _version_from_line(line)

        logger.info(f"Compiler index built with {len(versions)} fingerprints")
        return cls(versions)

    def resolve(self, fingerprint: str, aliases: Mapping[str, str] | None = None) -> Optional[str]:
        """Look up a fingerprint directly, then through the alias table."""
        version = self._versions.get(fingerprint)
        if version:
            return version
        alias = (aliases or {}).get(fingerprint)
        if alias:
            return self._versions.get(alias)
        return None

    def __getitem__(self, fingerprint: str) -> str:
        return self._versions[fingerprint]

    def __iter__(self) -> Iterator[str]:
        return iter(self._versions)

    def __len__(self) -> int:
        return len(self._versions)
