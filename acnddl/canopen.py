# Copyright 2021-2024 Nokia

import logging
from typing import Optional

from .datatypes import ProtocolBinding, ProtocolDefinition, TypeCode, convert_from_string, get_type_info_by_code
from .device import Property
from .errors import *

__all__ = ("CANOPEN_DEFINITION", "CANopenProtocol", "get_protocol", "set_protocol", )

__doc__ = """CANopen protocol attributes of device properties.

A network property bound to CANopen carries a ``CANopen`` protocol block with
a ``cia:CANopen`` element, e.g.::

    <protocol name="CANopen">
      <cia:CANopen node="5" index="0x2000" sub="1" access="rw" pdo="tx"/>
    </protocol>

See https://www.can-cia.org for the CANopen specifications.
"""

logger = logging.getLogger(__name__)

CANOPEN_DEFINITION = ProtocolDefinition(
    "CANopen", "cia:CANopen", "https://www.can-cia.org/CANopen",
    {
        "node": "0",
        "index": "0",
        "sub": "0",
        "access": "rw",
        "pdo": "no",
    })


class CANopenProtocol(ProtocolBinding):
    """The CANopen object dictionary entry of a property.

    :ivar node_id: the node number of the device on the bus; 0 is taken as 1
    :ivar index: the object dictionary index
    :ivar sub_index: the object dictionary sub-index
    :ivar sdo_access: the SDO access specifier, e.g. ``rw``
    :ivar pdo_access: the PDO access specifier, e.g. ``no``
    :raises DdlIntegrityError: the property has no CANopen attributes
    :raises DataConversionError: an attribute is not a valid number
    """

    def __init__(self, property: Property):
        super().__init__(property, CANOPEN_DEFINITION)
        uint8 = get_type_info_by_code(TypeCode.uint8)
        uint16 = get_type_info_by_code(TypeCode.uint16)
        self.node_id: int = convert_from_string(self.get_attribute("node"), uint8)
        self.index: int = convert_from_string(self.get_attribute("index"), uint16)
        self.sub_index: int = convert_from_string(self.get_attribute("sub"), uint8)
        self.sdo_access: str = self.get_attribute("access")
        self.pdo_access: str = self.get_attribute("pdo")
        if self.node_id == 0:
            self.node_id = 1

    def __repr__(self):
        return f"CANopenProtocol({self.property.id!r}, {self.node_id}, 0x{self.index:04X}.{self.sub_index})"


def get_protocol(property: Property) -> Optional[CANopenProtocol]:
    """Get the CANopen attributes of a property, ``None`` if it has none or they are invalid."""
    try:
        return CANopenProtocol(property)
    except (DdlIntegrityError, DataConversionError) as err:
        logger.debug("no CANopen protocol for %s: %s", property.id, err)
        return None


def set_protocol(property: Property, index: int, sub_index: int = 0, node_id: Optional[int] = None,
                 access: str = "rw", pdo: str = "no", array_index: int = -1, verify: bool = False):
    """Add or update the CANopen attributes of a property.

    :param array_index: the array element of an array property, -1 otherwise
    :param verify: verify existing attributes rather than updating them
    :returns: the ``CANopen`` protocol block
    """
    protocol = property.get_or_add_protocol(CANOPEN_DEFINITION.name)
    attrs = {"index": f"0x{index:04X}", "sub": str(sub_index), "access": access, "pdo": pdo}
    if node_id is not None:
        attrs["node"] = str(node_id)
    protocol.add_or_update_attributes(CANOPEN_DEFINITION.qname, attrs, CANOPEN_DEFINITION.namespace,
                                      array_index, verify)
    return protocol
