"""
Page Builder Kernel -- Host Document

The in-memory tree of preview nodes the engine renders into. The layout is
fixed when the document is built (see layout.py); the engine never creates
or destroys nodes, it only looks them up by id and patches them.

A lookup that finds nothing is a valid state: the node does not exist in
this variant of the page, and every patch aimed at it is skipped.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from pagebuilder.kernel.types import PATCH_OPS, NodePatch

logger = logging.getLogger(__name__)


@dataclass
class PreviewNode:
    """One element of the host document."""

    tag: str
    id: str | None = None
    classes: list[str] = field(default_factory=list)
    style: dict[str, str] = field(default_factory=dict)
    attrs: dict[str, str] = field(default_factory=dict)
    text: str | None = None
    children: list[PreviewNode] = field(default_factory=list)

    def walk(self) -> Iterator[PreviewNode]:
        yield self
        for child in self.children:
            yield from child.walk()


class Document:
    """
    Host document: a fixed node tree plus document-level CSS variables.
    Nodes are indexed by id once; the tree shape never changes after that.
    """

    def __init__(self, root: PreviewNode, variables: dict[str, str] | None = None):
        self.root = root
        self.variables: dict[str, str] = dict(variables or {})
        self._index: dict[str, PreviewNode] = {}
        for node in root.walk():
            if node.id is None:
                continue
            if node.id in self._index:
                raise ValueError(f"Duplicate node id: {node.id}")
            self._index[node.id] = node

    def get(self, node_id: str) -> PreviewNode | None:
        return self._index.get(node_id)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._index

    def ids(self) -> set[str]:
        return set(self._index)


# ---------------------------------------------------------------------------
# Patch application
# ---------------------------------------------------------------------------


def apply_patch(document: Document, patch: NodePatch) -> bool:
    """
    Apply one patch. Returns False when the target node is absent.
    """
    if patch.op not in PATCH_OPS:
        logger.warning("unknown patch op %r for node %s", patch.op, patch.node_id)
        return False
    if patch.op == "variable":
        document.variables[patch.name or ""] = patch.value
        return True

    node = document.get(patch.node_id)
    if node is None:
        logger.debug("patch skipped, node not in document: %s", patch.node_id)
        return False

    if patch.op == "text":
        node.text = patch.value
    elif patch.op == "style":
        # An empty value clears the inline property, like style.prop = ""
        if patch.value == "":
            node.style.pop(patch.name or "", None)
        else:
            node.style[patch.name or ""] = patch.value
    elif patch.op == "attr":
        node.attrs[patch.name or ""] = patch.value
    elif patch.op == "remove_attr":
        node.attrs.pop(patch.name or "", None)
    elif patch.op == "add_class":
        if patch.value not in node.classes:
            node.classes.append(patch.value)
    elif patch.op == "remove_class":
        node.classes = [c for c in node.classes if c != patch.value]
    elif patch.op == "set_class":
        node.classes = patch.value.split()
    return True


def apply_patches(document: Document, patches: Iterable[NodePatch]) -> int:
    """Apply patches in order. Returns how many found their node."""
    return sum(1 for p in patches if apply_patch(document, p))
