# Copyright 2021-2024 Nokia

import logging
from typing import Iterable, List, Optional

from .device import Device, IncludeDevice, Property, PropertyPointer, PropertyValueType
from .errors import *
from .errors import make_exception
from .node import IdentifiedNode, Node
from .traversal import FilterType, NodeFilter, NodeFilterResult, NodeIterator

__all__ = ("Appliance", "NetworkPropertyFilter", )

__doc__ = """Compilation of a device description into an appliance.

An :py:class:`Appliance` is the property tree of a device instance: included
devices are replaced by a ``NULL`` property holding the compiled properties
of the included device.  Compiled properties share the label, behaviors,
protocols and values of the declaration they were compiled from, which is
kept in their ``definition``.
"""

logger = logging.getLogger(__name__)


class Appliance(Property):
    """The compiled property tree of a root device.

    >>> appliance = device.get_appliance()
    >>> for prop in appliance.get_node_iterator(NetworkPropertyFilter()):
    ...     print(prop.full_id)
    """

    def __init__(self, root_device: Optional[Device] = None):
        super().__init__()
        self.root_device = root_device
        self.build_appliance()

    def child_nodes(self) -> List[Node]:
        return list(self.items)

    def build_appliance(self):
        """(Re)build the appliance from the description of the root device."""
        self.items = []
        self._include_path = [self.root_device]
        if self.root_device is not None:
            self.id = self.root_device.id
            self.label = self.root_device.label
            self.compile_nodes(self, self.root_device.items)
            logger.debug("compiled appliance %s: %d top-level properties", self.id, len(self.items))

    def compile_nodes(self, parent: Property, nodes: Iterable[IdentifiedNode]):
        for node in nodes:
            if isinstance(node, Property):
                self.compile_property(parent, node)
            elif isinstance(node, IncludeDevice):
                self.compile_include_device(parent, node)
            elif isinstance(node, PropertyPointer):
                self.compile_property_pointer(parent, node)
            else:
                raise make_exception(ddl_err_invalid_child_type, type=type(node).__name__)

    def compile_include_device(self, parent: Property, includedev: IncludeDevice):
        """Compile an included device into a ``NULL`` wrapper property.

        :raises ModuleResolutionError: the included device cannot be resolved
        :raises DdlIntegrityError: the device includes itself, directly or
            through the devices it includes
        """
        device = includedev.get_definition()
        if any(included is device for included in self._include_path):
            path = " -> ".join(included.id for included in self._include_path + [device])
            raise make_exception(ddl_err_include_cycle, id=includedev.id, device=device.id, path=path)
        prop = Property(valuetype=PropertyValueType.NULL)
        # link first: the shared lists keep the parent links of the declaration
        parent.add_property(prop)
        prop.definition = includedev
        prop.id = includedev.id
        prop.label = includedev.label
        prop.array = includedev.array
        prop.protocols = includedev.protocols
        self._include_path.append(device)
        try:
            self.compile_nodes(prop, device.items)
        finally:
            self._include_path.pop()

    def compile_property(self, parent: Property, declaration: Property):
        prop = Property(valuetype=declaration.valuetype)
        parent.add_property(prop)
        prop.definition = declaration
        prop.sharedefine = declaration.sharedefine
        prop.id = declaration.id
        prop.label = declaration.label
        prop.array = declaration.array
        prop.behaviors = declaration.behaviors
        prop.protocols = declaration.protocols
        prop.values = declaration.values
        prop.arrayparamname = declaration.arrayparamname
        prop.valuetypeparamname = declaration.valuetypeparamname
        prop.sharedefineparamname = declaration.sharedefineparamname
        self.compile_nodes(prop, declaration.items)

    def compile_property_pointer(self, parent: Property, pointer: PropertyPointer):
        raise make_exception(ddl_err_property_pointer, id=pointer.id, ref=pointer.reference)

    def get_node_iterator(self, filter: FilterType = None) -> NodeIterator:
        return NodeIterator(self, filter)

    def __iter__(self):
        return self.get_node_iterator()

    def __repr__(self):
        return f"Appliance({self.id!r})"


class NetworkPropertyFilter(NodeFilter):
    """Show the network properties of an appliance.

    Structural (``NULL``) and implied properties are skipped so that network
    properties below them are still shown; other properties are rejected with
    their subtrees.
    """

    def accept_node(self, node: Node) -> NodeFilterResult:
        if isinstance(node, Property):
            if node.has_network_value():
                return NodeFilterResult.FILTER_ACCEPT
            if node.has_null_value() or node.has_implied_value():
                return NodeFilterResult.FILTER_SKIP
        return NodeFilterResult.FILTER_REJECT
