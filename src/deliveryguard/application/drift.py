"""
Specification drift detection.

DriftDetector compares a document's current sections against cached section
hashes. SpecificationDriftService keeps that cache per module between
iterations so a module's spec can be re-checked without invoking the agent.
"""

import logging
from collections import Counter
from collections.abc import Iterable, Iterator, Sequence
from datetime import datetime
from typing import TypeVar

from deliveryguard.domain.interfaces import SpecificationStoreInterface
from deliveryguard.domain.markdown import compute_hash, extract_sections
from deliveryguard.domain.models import CachedSection, DocumentSection, DriftResult

logger = logging.getLogger(__name__)

_Section = TypeVar("_Section", CachedSection, DocumentSection)


def _keyed(sections: Iterable[_Section]) -> Iterator[tuple[tuple[str, int], _Section]]:
    """Key sections by (folded header, occurrence of that header)."""
    seen: Counter[str] = Counter()
    for section in sections:
        header = section.header.casefold()
        yield (header, seen[header]), section
        seen[header] += 1


class DriftDetector:
    """Hash-based comparison of specification sections. Stateless."""

    def detect_drift(
        self,
        document_id: str,
        content: str,
        cached_sections: Sequence[CachedSection],
        include_added_removed: bool = False,
    ) -> list[DriftResult]:
        """
        Report sections whose content changed since they were cached.

        Only cached entries for document_id are considered; headers match
        case-insensitively. Repeated headers are paired by occurrence, so the
        second "Notes" section is compared with the cached second "Notes".

        Args:
            document_id: Identity of the document being checked
            content: Current document text
            cached_sections: Previously captured sections (any document)
            include_added_removed: Also report sections with no cached entry
                (is_new) and cached sections no longer present (is_removed)

        Returns:
            Drift results in document order, removed sections last
        """
        if not document_id:
            raise ValueError("document_id must be non-empty")

        cached = dict(
            _keyed(c for c in cached_sections if c.document_id == document_id)
        )
        results: list[DriftResult] = []

        for key, section in _keyed(extract_sections(content)):
            current_hash = compute_hash(section.content)
            previous = cached.pop(key, None)

            if previous is None:
                if include_added_removed:
                    results.append(
                        DriftResult(section.header, None, current_hash, is_new=True)
                    )
            elif previous.content_hash != current_hash:
                results.append(
                    DriftResult(section.header, previous.content_hash, current_hash)
                )

        if include_added_removed:
            for removed in cached.values():
                results.append(
                    DriftResult(
                        removed.header, removed.content_hash, None, is_removed=True
                    )
                )

        return results

    def snapshot(self, document_id: str, content: str) -> list[CachedSection]:
        """Capture the document's current sections for a later comparison."""
        captured_at = datetime.now().isoformat()
        return [
            CachedSection(
                document_id=document_id,
                header=section.header,
                content=section.content,
                content_hash=compute_hash(section.content),
                captured_at=captured_at,
            )
            for section in extract_sections(content)
        ]


class SpecificationDriftService:
    """
    Checks a module's specification for drift since the previous check.

    The first check of a module captures a baseline and reports nothing.
    Every check refreshes the cache, so each edit is reported once.
    """

    def __init__(
        self,
        store: SpecificationStoreInterface,
        detector: DriftDetector | None = None,
    ):
        self._store = store
        self._detector = detector or DriftDetector()
        self._cache: dict[str, list[CachedSection]] = {}

    def has_baseline(self, module_name: str) -> bool:
        return module_name in self._cache

    def cached_sections(self, module_name: str) -> list[CachedSection]:
        return list(self._cache.get(module_name, []))

    def clear(self, module_name: str | None = None) -> None:
        """Drop the cache for one module, or for all modules."""
        if module_name is None:
            self._cache.clear()
        else:
            self._cache.pop(module_name, None)

    def check_drift(self, module_name: str) -> list[DriftResult]:
        """
        Compare the module's current specification with the cached one.

        Raises:
            OSError: If the specification exists but cannot be read
        """
        content = self._store.read_specification(module_name)
        if content is None:
            logger.debug("No specification for '%s', skipping drift check", module_name)
            return []

        document_id = module_name
        previous = self._cache.get(module_name)
        results: list[DriftResult] = []
        if previous is not None:
            results = self._detector.detect_drift(
                document_id, content, previous, include_added_removed=True
            )

        for result in results:
            logger.warning(
                "Specification drift in '%s': section '%s' %s",
                module_name,
                result.header,
                result.change,
            )
        if results:
            logger.info(
                "Specification drift detected in '%s': %d section(s)",
                module_name,
                len(results),
            )

        self._cache[module_name] = self._detector.snapshot(document_id, content)
        logger.debug("Refreshed section cache for '%s'", module_name)
        return results
