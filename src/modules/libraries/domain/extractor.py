"""Locate the array of figure entries inside a document of unknown shape."""

from collections import deque
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from src.modules.libraries.domain.entities import LibraryItem
from src.modules.libraries.domain.normalizer import normalize_entries

LIBRARY_CONTAINER_KEYS = (
    "libraryItems",
    "items",
    "library",
    "libraries",
    "payload",
    "content",
    "data",
)
DEFAULT_MAX_DEPTH = 5
DEFAULT_MAX_NODES = 20000


@dataclass(frozen=True)
class ExtractionResult:
    """Best candidate of a document and its normalized items."""

    entries: list[Any] = field(default_factory=list)
    items: list[LibraryItem] = field(default_factory=list)
    candidate_count: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.items


def _well_formed(sequence: Sequence[Any]) -> list[Any]:
    return [entry for entry in sequence if isinstance(entry, dict | list)]


def find_candidate_arrays(
    document: Any,
    max_depth: int = DEFAULT_MAX_DEPTH,
    max_nodes: int = DEFAULT_MAX_NODES,
) -> list[list[Any]]:
    """Collect candidate entry arrays in breadth-first order.

    Traversal uses an explicit queue bounded by depth (root is depth 0) and by
    a total node budget; each container is visited at most once.
    """
    candidates: list[list[Any]] = []
    seen_candidates: set[int] = set()
    visited: set[int] = set()
    queue: deque[tuple[Any, int]] = deque([(document, 0)])
    budget = max_nodes

    def add_candidate(sequence: list[Any]) -> None:
        if id(sequence) in seen_candidates:
            return
        seen_candidates.add(id(sequence))
        entries = _well_formed(sequence)
        if entries:
            candidates.append(entries)

    while queue and budget > 0:
        node, depth = queue.popleft()
        if not isinstance(node, dict | list) or id(node) in visited:
            continue
        visited.add(id(node))
        budget -= 1

        if isinstance(node, list):
            add_candidate(node)
            children: list[Any] = node
        else:
            for key in LIBRARY_CONTAINER_KEYS:
                value = node.get(key)
                if isinstance(value, list):
                    add_candidate(value)
            children = list(node.values())

        if depth < max_depth:
            queue.extend(
                (child, depth + 1)
                for child in children
                if isinstance(child, dict | list)
            )

    return candidates


def extract_library(
    document: Any,
    max_depth: int = DEFAULT_MAX_DEPTH,
    max_nodes: int = DEFAULT_MAX_NODES,
    now_ms: int | None = None,
) -> ExtractionResult:
    """Select the candidate that normalizes to the most items.

    Ties keep the first candidate discovered, i.e. the shallowest one. A
    document without candidates yields an empty result rather than an error.
    """
    candidates = find_candidate_arrays(document, max_depth, max_nodes)

    best = ExtractionResult(candidate_count=len(candidates))
    for entries in candidates:
        items = normalize_entries(entries, now_ms=now_ms)
        if len(items) > len(best.items):
            best = ExtractionResult(
                entries=entries, items=items, candidate_count=len(candidates)
            )
    return best
