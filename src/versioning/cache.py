"""Build-scoped memo of resolved package versions."""

import threading
from typing import Dict, List, Optional, Tuple

import semantic_version

ExportMap = Dict[str, str]
ResolvedEntry = Tuple[semantic_version.Version, ExportMap]


class ResolvedVersions:
    """Append-only mapping of package name to resolved (version, exports) pairs.

    One instance lives for one build. Several entries per name are expected
    when the build asks for non-overlapping ranges of the same package; entries
    are never merged or replaced. Appends are serialized with a lock and
    readers work on a snapshot, so concurrent misses for the same package can
    at worst append duplicates.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, List[ResolvedEntry]] = {}
        self._lock = threading.Lock()

    def get(self, name: str) -> List[ResolvedEntry]:
        """Snapshot of the entries recorded for ``name``."""
        with self._lock:
            return list(self._entries.get(name, ()))

    def append(self, name: str, version: semantic_version.Version, exports: ExportMap) -> None:
        """Record a fresh resolution for ``name``."""
        with self._lock:
            self._entries[name] = [*self._entries.get(name, ()), (version, dict(exports))]

    def max_satisfying(
        self, name: str, spec: semantic_version.NpmSpec
    ) -> Optional[ResolvedEntry]:
        """Highest cached entry for ``name`` whose version satisfies ``spec``."""
        entries = self.get(name)
        best = spec.select(version for version, _ in entries)
        if best is None:
            return None
        for version, exports in entries:
            if version == best:
                return version, exports
        return None

    def names(self) -> List[str]:
        """Package names with at least one entry."""
        with self._lock:
            return list(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return sum(len(v) for v in self._entries.values())
