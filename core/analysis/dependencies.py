"""Dependency graph construction from import statements.

This module builds a module-level dependency graph from extracted imports,
classifies every dependency, detects cyclic imports and measures the depth
of the dependency chain.

Cycle detection only finds direct mutual edges (A -> B and B -> A). Longer
cycles such as A -> B -> C -> A are not reported.
"""

from collections.abc import Iterable, Mapping
from enum import Enum

import structlog
from pydantic import BaseModel, ConfigDict, Field

from core.parser.models import ImportInfo

logger = structlog.get_logger(__name__)

ROOT_MODULE = "main"

# Node.js core modules
BUILTIN_MODULES = frozenset(
    {
        "assert",
        "async_hooks",
        "buffer",
        "child_process",
        "cluster",
        "console",
        "crypto",
        "dgram",
        "dns",
        "events",
        "fs",
        "fs/promises",
        "http",
        "http2",
        "https",
        "net",
        "os",
        "path",
        "perf_hooks",
        "process",
        "querystring",
        "readline",
        "stream",
        "string_decoder",
        "timers",
        "tls",
        "tty",
        "url",
        "util",
        "v8",
        "vm",
        "worker_threads",
        "zlib",
    }
)


class DependencyType(str, Enum):
    """Classification of a dependency node."""

    INTERNAL = "internal"
    EXTERNAL = "external"
    BUILTIN = "builtin"


class EdgeType(str, Enum):
    """How a module references a dependency."""

    IMPORT = "import"
    REQUIRE = "require"
    DYNAMIC = "dynamic"


class DependencyNode(BaseModel):
    """A module in the dependency graph.

    Attributes:
        id: Node identifier (the literal import source).
        name: Display name.
        type: Dependency classification.
        path: Module specifier as written.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Node ID")
    name: str = Field(..., description="Module name")
    type: DependencyType = Field(..., description="Dependency classification")
    path: str | None = Field(None, description="Module specifier")


class DependencyEdge(BaseModel):
    """A reference from one module to another.

    Attributes:
        source: ID of the importing module (serialized as ``from``).
        target: ID of the imported module (serialized as ``to``).
        type: Kind of reference.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    source: str = Field(..., alias="from", description="From node")
    target: str = Field(..., alias="to", description="To node")
    type: EdgeType = Field(default=EdgeType.IMPORT, description="Edge type")


class DependencyGraph(BaseModel):
    """Inter-module reference graph.

    Attributes:
        nodes: Modules, including the root module(s).
        edges: References between modules.
        cycles: Direct mutual references as ``(from_id, to_id)`` pairs.
        depth: Longest chain reached from the root(s).
    """

    model_config = ConfigDict(frozen=True)

    nodes: list[DependencyNode] = Field(default_factory=list, description="Nodes")
    edges: list[DependencyEdge] = Field(default_factory=list, description="Edges")
    cycles: list[tuple[str, str]] = Field(default_factory=list, description="Mutual imports")
    depth: int = Field(default=0, ge=0, description="Maximum dependency depth")

    def get_node(self, node_id: str) -> DependencyNode | None:
        """Get a node by ID."""
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def get_outgoing_edges(self, node_id: str) -> list[DependencyEdge]:
        """Get all edges leaving a node."""
        return [e for e in self.edges if e.source == node_id]


class DependencyGraphBuilder:
    """Builder for dependency graphs from extracted imports."""

    def __init__(self, builtin_modules: Iterable[str] | None = None) -> None:
        """Initialize the builder.

        Args:
            builtin_modules: Platform module allowlist. Defaults to the
                Node.js core modules.
        """
        self.builtin_modules = frozenset(builtin_modules or BUILTIN_MODULES)
        self._logger = logger.bind(component="dependency_graph_builder")

    def classify(self, source: str) -> DependencyType:
        """Classify an import source.

        Args:
            source: Module specifier.

        Returns:
            INTERNAL for relative paths, BUILTIN for platform modules,
            EXTERNAL otherwise.
        """
        if source.startswith("."):
            return DependencyType.INTERNAL

        name = source.removeprefix("node:")
        if name in self.builtin_modules:
            return DependencyType.BUILTIN

        return DependencyType.EXTERNAL

    def build(self, imports: list[ImportInfo], root: str = ROOT_MODULE) -> DependencyGraph:
        """Build the dependency graph of a single source unit.

        Args:
            imports: Imports extracted from the unit.
            root: ID of the synthetic root node for the unit.

        Returns:
            DependencyGraph with one edge from the root per import.
        """
        return self.build_project({root: imports}, roots=[root])

    def build_project(
        self,
        modules: Mapping[str, list[ImportInfo]],
        roots: list[str] | None = None,
    ) -> DependencyGraph:
        """Build a dependency graph spanning several modules.

        Module IDs are matched against import sources literally, so two
        modules that import each other by the IDs they are registered under
        form a cycle.

        Args:
            modules: Mapping of module ID to the imports of that module.
            roots: Starting points for depth measurement. Defaults to every
                module ID.

        Returns:
            The combined DependencyGraph.
        """
        nodes: dict[str, DependencyNode] = {}
        edges: list[DependencyEdge] = []

        for module_id, imports in modules.items():
            if module_id not in nodes:
                nodes[module_id] = self._make_node(module_id)

            for imp in imports:
                if imp.source not in nodes:
                    nodes[imp.source] = self._make_node(imp.source)
                edges.append(
                    DependencyEdge(
                        source=module_id,
                        target=imp.source,
                        type=self._edge_type(imp),
                    )
                )

        cycles = self.detect_cycles(edges)
        depth = max(
            (self.calculate_depth(edges, root) for root in (roots or list(modules))),
            default=0,
        )

        if cycles:
            self._logger.info("dependency_cycles_found", count=len(cycles))

        return DependencyGraph(
            nodes=list(nodes.values()),
            edges=edges,
            cycles=cycles,
            depth=depth,
        )

    def detect_cycles(self, edges: list[DependencyEdge]) -> list[tuple[str, str]]:
        """Detect direct mutual references.

        Only two-node cycles are found. Each unordered pair is reported once,
        in the order its first edge was added.

        Args:
            edges: Graph edges.

        Returns:
            List of ``(from_id, to_id)`` pairs.
        """
        adjacency = self._adjacency(edges)
        cycles: list[tuple[str, str]] = []
        seen: set[frozenset[str]] = set()

        for source, targets in adjacency.items():
            for target in targets:
                if source not in adjacency.get(target, {}):
                    continue
                pair = frozenset((source, target))
                if pair in seen:
                    continue
                seen.add(pair)
                cycles.append((source, target))

        return cycles

    def calculate_depth(self, edges: list[DependencyEdge], root: str = ROOT_MODULE) -> int:
        """Calculate the dependency depth reached from a root.

        Walks depth-first, visiting each node once; the depth is the longest
        chain at which a node was first reached.

        Args:
            edges: Graph edges.
            root: Starting node ID.

        Returns:
            Maximum depth (0 when the root has no dependencies).
        """
        adjacency = self._adjacency(edges)
        visited: set[str] = set()
        max_depth = 0
        stack: list[tuple[str, int]] = [(root, 0)]

        while stack:
            node, depth = stack.pop()
            if node in visited:
                continue
            visited.add(node)
            max_depth = max(max_depth, depth)

            for target in reversed(adjacency.get(node, {})):
                if target not in visited:
                    stack.append((target, depth + 1))

        return max_depth

    def _make_node(self, module_id: str) -> DependencyNode:
        """Create a node for a module ID."""
        if module_id == ROOT_MODULE:
            return DependencyNode(id=module_id, name=module_id, type=DependencyType.INTERNAL)
        return DependencyNode(
            id=module_id,
            name=module_id,
            type=self.classify(module_id),
            path=module_id,
        )

    def _edge_type(self, imp: ImportInfo) -> EdgeType:
        """Map an import to its edge type."""
        if imp.is_dynamic:
            return EdgeType.DYNAMIC
        if imp.is_require:
            return EdgeType.REQUIRE
        return EdgeType.IMPORT

    def _adjacency(self, edges: list[DependencyEdge]) -> dict[str, dict[str, None]]:
        """Build an insertion-ordered adjacency map."""
        adjacency: dict[str, dict[str, None]] = {}
        for edge in edges:
            adjacency.setdefault(edge.source, {})[edge.target] = None
        return adjacency
