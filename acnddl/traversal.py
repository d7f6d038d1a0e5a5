# Copyright 2021-2024 Nokia

from enum import IntEnum
from typing import Callable, Optional, Union

from .errors import *
from .errors import make_exception
from .node import Node

__all__ = ("NodeFilterResult", "NodeFilter", "NodeIterator", "TreeWalker", )

__doc__ = """Filtered traversal of node trees.

The views follow the W3C DOM Level 2 traversal interfaces
(https://www.w3.org/TR/DOM-Level-2-Traversal-Range/traversal.html) with one
difference: a node rejected by the filter hides its whole subtree for the
:py:class:`NodeIterator` as well as for the :py:class:`TreeWalker`.  A skipped
node is hidden itself, but its children are still considered.

A filter is either a :py:class:`NodeFilter` or any callable taking a node and
returning a :py:class:`NodeFilterResult`; without a filter every node is
accepted.
"""


class NodeFilterResult(IntEnum):
    FILTER_ACCEPT = 1
    FILTER_REJECT = 2
    FILTER_SKIP = 3


class NodeFilter:
    """Base class of node filters; override :py:meth:`accept_node`."""

    def accept_node(self, node: Node) -> NodeFilterResult:
        return NodeFilterResult.FILTER_ACCEPT

    def __call__(self, node: Node) -> NodeFilterResult:
        return self.accept_node(node)


FilterType = Union[NodeFilter, Callable[[Node], NodeFilterResult], None]

ACCEPT = NodeFilterResult.FILTER_ACCEPT
REJECT = NodeFilterResult.FILTER_REJECT
SKIP = NodeFilterResult.FILTER_SKIP


class _FilteredView:
    """Document order walks over the subtree of ``root`` as seen through ``filter``."""

    def __init__(self, root: Node, filter: FilterType = None):
        self._root = root
        self._filter = filter

    @property
    def root(self) -> Node:
        return self._root

    @property
    def filter(self) -> FilterType:
        return self._filter

    def _accept(self, node: Optional[Node]) -> NodeFilterResult:
        if node is None:
            return REJECT
        if self._filter is None:
            return ACCEPT
        return NodeFilterResult(self._filter(node))

    @staticmethod
    def _siblings(node: Node):
        # (siblings, index of node among them)
        siblings = node.parent.child_nodes()
        for index, child in enumerate(siblings):
            if child is node:
                return siblings, index
        return siblings, len(siblings)

    def _first_in(self, parent: Node) -> Optional[Node]:
        for child in parent.child_nodes():
            result = self._accept(child)
            if result is ACCEPT:
                return child
            if result is SKIP:
                found = self._first_in(child)
                if found is not None:
                    return found
        return None

    def _last_in(self, parent: Node) -> Optional[Node]:
        for child in reversed(parent.child_nodes()):
            result = self._accept(child)
            if result is ACCEPT:
                return child
            if result is SKIP:
                found = self._last_in(child)
                if found is not None:
                    return found
        return None

    def _last_within(self, parent: Node) -> Optional[Node]:
        # the last visible node of the subtree in document order, parent excluded
        for child in reversed(parent.child_nodes()):
            result = self._accept(child)
            if result is REJECT:
                continue
            found = self._last_within(child)
            if found is not None:
                return found
            if result is ACCEPT:
                return child
        return None

    def _next_after(self, node: Node, descend: bool = True) -> Optional[Node]:
        if descend:
            found = self._first_in(node)
            if found is not None:
                return found
        while node is not self._root and node.parent is not None:
            siblings, index = self._siblings(node)
            for sibling in siblings[index + 1:]:
                result = self._accept(sibling)
                if result is ACCEPT:
                    return sibling
                if result is SKIP:
                    found = self._first_in(sibling)
                    if found is not None:
                        return found
            node = node.parent
        return None

    def _previous_before(self, node: Node) -> Optional[Node]:
        while node is not self._root and node.parent is not None:
            siblings, index = self._siblings(node)
            for sibling in reversed(siblings[:index]):
                result = self._accept(sibling)
                if result is REJECT:
                    continue
                found = self._last_within(sibling)
                if found is not None:
                    return found
                if result is ACCEPT:
                    return sibling
            node = node.parent
            if self._accept(node) is ACCEPT:
                return node
        return None


class NodeIterator(_FilteredView):
    """Cursor over the nodes of a subtree in document order.

    The position of the iterator is between two nodes, next to the reference
    node (the node returned last).  After creation the iterator is positioned
    before the root, so the first :py:meth:`next_node` returns the root if the
    filter accepts it.  A call reversing the direction returns the reference
    node again.

    The iterator is a Python iterator as well::

        for node in NodeIterator(device, my_filter):
            ...
    """

    def __init__(self, root: Node, filter: FilterType = None):
        super().__init__(root, filter)
        self.reset()

    @property
    def reference_node(self) -> Optional[Node]:
        return self._reference

    @property
    def current_node(self) -> Optional[Node]:
        """The node returned last, ``None`` when the iterator moved past either end."""
        return self._current

    @property
    def moving_forward(self) -> bool:
        return self._moving_forward

    def reset(self):
        """Position the iterator before the root node."""
        self._reference = self._root
        self._current = None
        self._moving_forward = False

    def detach(self):
        """Release the tree; further calls of :py:meth:`next_node` or
        :py:meth:`previous_node` raise :py:class:`InvalidStateError`."""
        self._root = None
        self._reference = None
        self._current = None

    def _check_attached(self):
        if self._root is None:
            raise make_exception(ddl_err_iterator_detached)

    def next_node(self) -> Optional[Node]:
        """Get the next visible node and advance the iterator.

        :returns: the node, or ``None`` after the last node
        :raises InvalidStateError: the iterator was detached
        """
        self._check_attached()
        reference = self._reference
        if not self._moving_forward:
            self._moving_forward = True
            result = self._accept(reference)
            if result is ACCEPT:
                found = reference
            else:
                found = self._next_after(reference, descend=result is SKIP)
        else:
            found = self._next_after(reference)
        return self._move_to(found)

    def previous_node(self) -> Optional[Node]:
        """Get the previous visible node and move the iterator backward.

        :returns: the node, or ``None`` before the first node
        :raises InvalidStateError: the iterator was detached
        """
        self._check_attached()
        reference = self._reference
        if self._moving_forward:
            self._moving_forward = False
            if self._accept(reference) is ACCEPT:
                return self._move_to(reference)
        return self._move_to(self._previous_before(reference))

    def _move_to(self, node: Optional[Node]) -> Optional[Node]:
        self._current = node
        if node is not None:
            self._reference = node
        return node

    def __iter__(self):
        return self

    def __next__(self) -> Node:
        node = self.next_node()
        if node is None:
            raise StopIteration
        return node


class TreeWalker(_FilteredView):
    """Navigator over the visible nodes of a subtree.

    Every navigation method returns the new current node, or ``None`` when
    there is no such node; the current node is left unchanged in that case.
    Navigation never leaves the subtree of the root.
    """

    def __init__(self, root: Node, filter: FilterType = None):
        super().__init__(root, filter)
        self._current = root

    @property
    def current_node(self) -> Node:
        return self._current

    @current_node.setter
    def current_node(self, node: Node):
        if node is None:
            raise make_exception(ddl_err_current_node_none)
        self._current = node

    def _move_to(self, node: Optional[Node]) -> Optional[Node]:
        if node is not None:
            self._current = node
        return node

    def parent_node(self) -> Optional[Node]:
        node = self._current
        while node is not self._root and node.parent is not None:
            node = node.parent
            if self._accept(node) is ACCEPT:
                return self._move_to(node)
        return None

    def first_child(self) -> Optional[Node]:
        return self._move_to(self._first_in(self._current))

    def last_child(self) -> Optional[Node]:
        return self._move_to(self._last_in(self._current))

    def next_sibling(self) -> Optional[Node]:
        node = self._current
        while node is not self._root and node.parent is not None:
            siblings, index = self._siblings(node)
            for sibling in siblings[index + 1:]:
                result = self._accept(sibling)
                if result is ACCEPT:
                    return self._move_to(sibling)
                if result is SKIP:
                    found = self._first_in(sibling)
                    if found is not None:
                        return self._move_to(found)
            # climb out of skipped parents only
            node = node.parent
            if node is self._root or self._accept(node) is ACCEPT:
                break
        return None

    def previous_sibling(self) -> Optional[Node]:
        node = self._current
        while node is not self._root and node.parent is not None:
            siblings, index = self._siblings(node)
            for sibling in reversed(siblings[:index]):
                result = self._accept(sibling)
                if result is ACCEPT:
                    return self._move_to(sibling)
                if result is SKIP:
                    found = self._last_in(sibling)
                    if found is not None:
                        return self._move_to(found)
            node = node.parent
            if node is self._root or self._accept(node) is ACCEPT:
                break
        return None

    def next_node(self) -> Optional[Node]:
        return self._move_to(self._next_after(self._current, descend=self._accept(self._current) is not REJECT))

    def previous_node(self) -> Optional[Node]:
        return self._move_to(self._previous_before(self._current))
