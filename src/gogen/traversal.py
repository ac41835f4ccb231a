"""Pre-order traversal over syntax trees.

Three entry points share one driver:

- :func:`walk` calls a visitor on every node; it cannot prune or stop.
- :func:`inspect` calls a predicate on every reached node; a falsy result
  prunes that node's children while siblings are still visited.
- :func:`traverse` takes a function returning a :class:`Visit` and is the
  only way to stop a traversal early. The stop state lives in the driver.

Roots are visited in the order given; within a tree, nodes are visited
depth-first, parents before children, children left to right.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from enum import Enum

from gogen.syntax.nodes import Node


class Visit(Enum):
    """What the driver does after visiting a node."""

    DESCEND = "descend"
    SKIP = "skip"  # do not visit the node's children
    STOP = "stop"  # end the whole traversal


def traverse(fn: Callable[[Node], Visit], roots: Iterable[Node]) -> bool:
    """Drive ``fn`` over every tree in ``roots``.

    Returns:
        True if the traversal ran to completion, False if ``fn`` stopped it.
    """
    for root in roots:
        stack = [root]
        while stack:
            node = stack.pop()
            action = fn(node)
            if action is Visit.STOP:
                return False
            if action is Visit.DESCEND and node.children:
                stack.extend(reversed(node.children))
    return True


def walk(visitor: Callable[[Node], object], roots: Iterable[Node]) -> None:
    """Call ``visitor`` on every node of every tree. Its result is ignored."""

    def visit(node: Node) -> Visit:
        visitor(node)
        return Visit.DESCEND

    traverse(visit, roots)


def inspect(predicate: Callable[[Node], bool], roots: Iterable[Node]) -> None:
    """Call ``predicate`` on every reached node; falsy prunes its children."""

    def visit(node: Node) -> Visit:
        return Visit.DESCEND if predicate(node) else Visit.SKIP

    traverse(visit, roots)


def iter_nodes(roots: Iterable[Node]) -> Iterator[Node]:
    """Yield every node of every tree in traversal order."""
    for root in roots:
        stack = [root]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))
