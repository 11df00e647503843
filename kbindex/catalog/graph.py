"""Project dependency resolution and cycle analysis."""

from collections import defaultdict
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field

from ..models import ProjectMetadata

MetadataLookup = Callable[[str], ProjectMetadata | None]


def resolve_closure(
    project_id: str,
    lookup: MetadataLookup,
    visiting: set[str] | None = None,
) -> list[str]:
    """Resolve the transitive dependencies of a project.

    Each declared dependency's own closure is appended before the dependency
    itself, so the result is in ascending priority: later entries override
    earlier ones. A project reached through several paths keeps the position
    of its first discovery. Re-entering a project already being resolved
    contributes nothing from that branch, but the dependency that closed the
    cycle is still placed.

    Args:
        project_id: Project to resolve
        lookup: Synchronous metadata lookup (None = no metadata)
        visiting: Projects already entered during this top-level call. Pass
            None to start a fresh traversal.

    Returns:
        Ordered, duplicate-free list of project ids. The top-level call never
        includes `project_id` itself.
    """
    top_level = visiting is None
    if visiting is None:
        visiting = set()
    if project_id in visiting:
        return []
    visiting.add(project_id)

    metadata = lookup(project_id)
    if metadata is None or not metadata.dependencies:
        return []

    result: list[str] = []
    seen: set[str] = set()

    def append(dep_id: str) -> None:
        if dep_id not in seen:
            seen.add(dep_id)
            result.append(dep_id)

    for dep_id in metadata.dependencies:
        for nested in resolve_closure(dep_id, lookup, visiting):
            append(nested)
        append(dep_id)

    if top_level:
        return [dep_id for dep_id in result if dep_id != project_id]
    return result


@dataclass
class ProjectGraph:
    """Declared dependency edges between projects, for diagnostics."""

    edges: dict[str, list[str]] = field(default_factory=dict)  # project -> declared deps
    reverse_edges: dict[str, set[str]] = field(
        default_factory=lambda: defaultdict(set)
    )  # project -> dependents

    @classmethod
    def from_lookup(cls, project_ids: Iterable[str], lookup: MetadataLookup) -> "ProjectGraph":
        """Build the graph reachable from project_ids."""
        graph = cls()
        stack = list(project_ids)
        while stack:
            current = stack.pop()
            if current in graph.edges:
                continue
            metadata = lookup(current)
            deps = list(metadata.dependencies) if metadata else []
            graph.edges[current] = deps
            for dep in deps:
                graph.reverse_edges[dep].add(current)
                if dep not in graph.edges:
                    stack.append(dep)
        return graph

    def get_dependents(self, project_id: str) -> set[str]:
        """Projects that declare a dependency on this one."""
        return self.reverse_edges.get(project_id, set())

    def find_cycles(self) -> list[list[str]]:
        """Strongly connected groups of projects that depend on each other.

        Tarjan's algorithm with an explicit work stack, so deep dependency
        chains do not hit the recursion limit. A project that lists itself is
        reported as a one-member cycle. Members and cycles are sorted.
        """
        order: dict[str, int] = {}
        low: dict[str, int] = {}
        path: list[str] = []
        on_path: set[str] = set()
        cycles: list[list[str]] = []

        def enter(project: str) -> tuple[str, Iterator[str]]:
            order[project] = low[project] = len(order)
            path.append(project)
            on_path.add(project)
            return project, iter(self.edges.get(project, ()))

        for root in sorted(self.edges):
            if root in order:
                continue
            work = [enter(root)]
            while work:
                project, deps = work[-1]
                dep = next(deps, None)
                if dep is not None:
                    if dep not in order:
                        work.append(enter(dep))
                    elif dep in on_path:
                        low[project] = min(low[project], order[dep])
                    continue

                work.pop()
                if work:
                    parent = work[-1][0]
                    low[parent] = min(low[parent], low[project])
                if low[project] != order[project]:
                    continue

                members = []
                while True:
                    member = path.pop()
                    on_path.discard(member)
                    members.append(member)
                    if member == project:
                        break
                if len(members) > 1 or project in self.edges.get(project, ()):
                    cycles.append(sorted(members))

        return sorted(cycles)
