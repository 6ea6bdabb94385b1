"""Abstract base class for language-specific structure extractors.

This module defines the interface that all language extractors must implement.
Each language extractor is responsible for traversing a tree-sitter syntax
tree and producing the structural inventory of the source unit.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterator
from typing import TYPE_CHECKING

from ..models import CodeStructure, SourceSpan

if TYPE_CHECKING:
    from tree_sitter import Node, Tree


class BaseExtractor(ABC):
    """Abstract base class for language-specific structure extractors.

    Attributes:
        language: The grammar identifier this extractor handles.
    """

    language: str = ""

    @abstractmethod
    def extract_structure(self, tree: "Tree", source_code: str) -> CodeStructure:
        """Extract the structural inventory from a syntax tree.

        This is the main entry point for extraction. It should traverse the
        entire tree once and collect every recognized entity.

        Args:
            tree: The tree-sitter parse tree.
            source_code: The original source code.

        Returns:
            The extracted CodeStructure.
        """
        ...

    def get_node_text(self, node: "Node | None") -> str:
        """Get the source text of a node.

        Args:
            node: The tree-sitter node.

        Returns:
            The decoded text content of the node, or "" for a missing node.
        """
        if node is None or node.text is None:
            return ""
        return node.text.decode("utf-8", errors="replace")

    def get_node_span(self, node: "Node") -> SourceSpan:
        """Get the line range of a node (1-indexed).

        Args:
            node: The tree-sitter node.

        Returns:
            SourceSpan covering the node.
        """
        # tree-sitter uses 0-indexed lines, we want 1-indexed
        return SourceSpan(start=node.start_point[0] + 1, end=node.end_point[0] + 1)

    def iter_descendants(self, node: "Node") -> Iterator["Node"]:
        """Iterate over all descendants of a node in document order.

        The node itself is not yielded. Iteration uses an explicit stack so
        deeply nested trees do not hit the recursion limit.

        Args:
            node: The subtree root.

        Yields:
            Each descendant node, pre-order.
        """
        stack = list(reversed(node.children))
        while stack:
            current = stack.pop()
            yield current
            stack.extend(reversed(current.children))
