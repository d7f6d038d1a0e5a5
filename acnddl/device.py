# Copyright 2021-2024 Nokia

import copy
import logging
import re
from enum import Enum
from typing import Dict, List, Optional, Union

from lxml import etree

from .behavior import ACNBASE_BSET, Behavior, BehaviorReference
from .errors import *
from .errors import make_exception
from .identifier import IDENTIFIER_SEPARATOR, QualifiedName, is_ncname, normalize_uuid, verify_nmtoken
from .node import (DDL_NAMESPACE, IdentifiedLeafNode, IdentifiedNode,
                   LabeledArrayElement, LabeledElement, Module, ModuleKind)

__all__ = (
    "PropertyValueType", "ValueDataType", "PropertyShareDefine", "Device",
    "UseProtocol", "Property", "IncludeDevice", "PropertyPointer", "Protocol",
    "Value",
)

__doc__ = """Device modules and their property tree.

A :py:class:`Device` holds properties, included devices and property
pointers.  Properties carry behaviors, protocol attribute blocks and, for
immediate properties, values.  Array-valued sub-properties and protocol
attributes are stored compacted: one entry while all array elements are
equal, and one entry per element up to the highest differing index after that.
"""

logger = logging.getLogger(__name__)


class PropertyValueType(Enum):
    """Where the value of a property lives."""
    NULL = "NULL"
    immediate = "immediate"
    implied = "implied"
    network = "network"


class ValueDataType(Enum):
    uint = "uint"
    sint = "sint"
    float_ = "float"
    string = "string"
    object_ = "object"


class PropertyShareDefine(Enum):
    false_ = "false"
    true_ = "true"
    arraycommon = "arraycommon"


_get_tag_name = lambda x: etree.QName(x).localname
_get_tag_ns = lambda x: etree.QName(x).namespace


def _element_name(element) -> str:
    """The qualified name, ``prefix:localname``, of an opaque element."""
    name = _get_tag_name(element)
    return f"{element.prefix}:{name}" if element.prefix else name


def _create_element(element_name: str, namespace: Optional[str]):
    prefix, name = QualifiedName.split(element_name)
    if not is_ncname(name) or (prefix is not None and not is_ncname(prefix)):
        raise make_exception(ddl_err_invalid_element_name, name=element_name)
    tag = etree.QName(namespace, name) if namespace else name
    nsmap = {prefix: namespace} if namespace else None
    try:
        return etree.Element(tag, nsmap=nsmap)
    except ValueError:
        raise make_exception(ddl_err_invalid_element_name, name=element_name) from None


class _PropertyContainer:
    """Property tree operations shared by devices and properties."""
    CONTAINER_KIND = "node"

    def add_property(self, prop: "Property"):
        if prop is not None:
            self._add_child_node("items", prop)

    def get_or_add_property(self, id: str, valuetype: PropertyValueType = PropertyValueType.NULL,
                            label: Optional[str] = None) -> "Property":
        """Get the property ``id``, or add it below its nearest existing group.

        :param id: full or relative identifier of the property
        :param valuetype: the value type of a new property; if not ``NULL``
            an existing property must have it as well
        :raises DdlIntegrityError: ``id`` is taken by a node that is not a
            property, or the existing property has another value type
        """
        result = self.get_property(id)
        if result is None:
            result = Property(id, valuetype, label)
            self._insert_property(result)
        elif valuetype is not PropertyValueType.NULL and result.valuetype is not valuetype:
            raise make_exception(ddl_err_valuetype_mismatch, id=result.id,
                                 actual=result.valuetype.value, expected=valuetype.value)
        return result

    def _insert_property(self, prop: "Property"):
        # below the nearest existing group of its identifier
        if self.get_identified_node(prop.id) is not None:
            raise make_exception(ddl_err_node_exists, kind=self.CONTAINER_KIND, owner=self.id, id=prop.id)
        group = self.get_group_of_property(prop.id)
        (group if group is not None else self).add_property(prop)

    def add_include_device(self, id: str, uuid: str, label: Optional[str] = None) -> "IncludeDevice":
        """Add an ``includedev`` of the device with ``uuid``.

        :raises DdlIntegrityError: ``id`` is taken by another node
        """
        if self.get_identified_node(id) is not None:
            raise make_exception(ddl_err_node_exists, kind=self.CONTAINER_KIND, owner=self.id, id=id)
        result = IncludeDevice(id, uuid, label)
        self._add_child_node("items", result)
        return result

    def add_property_pointer(self, id: str, reference: str) -> "PropertyPointer":
        if self.get_identified_node(id) is not None:
            raise make_exception(ddl_err_node_exists, kind=self.CONTAINER_KIND, owner=self.id, id=id)
        result = PropertyPointer(id, reference)
        self._add_child_node("items", result)
        return result

    def get_property(self, id: str) -> "Optional[Property]":
        result = self.get_identified_node(id)
        return result if isinstance(result, Property) else None

    def get_group_of_property(self, id: str) -> "Optional[Property]":
        result = self.get_group_of_identified_node(id)
        return result if isinstance(result, Property) else None

    def get_property_with_behavior(self, bset: str, name: Optional[str] = None) -> "Optional[Property]":
        """Get the first direct child property with a behavior.

        The behavior is given as ``set`` and ``name`` or as one qualified name.
        """
        if name is None:
            bset, name = QualifiedName.split(bset)
        for node in self.items:
            if isinstance(node, Property) and node.has_behavior(bset, name):
                return node
        return None


class _ProtocolContainer:
    """Protocol operations shared by properties and included devices."""

    def get_or_add_protocol(self, name: str) -> "Protocol":
        """Get or add the protocol ``name``; the device is made to use it as well."""
        result = self.get_protocol(name)
        if result is None:
            result = Protocol(name)
            self._add_child_node("protocols", result)
            device = self.get_device()
            if device is not None:
                device.add_use_protocol(name)
        return result

    def get_protocol(self, name: str) -> "Optional[Protocol]":
        for protocol in self.protocols:
            if protocol.name == name:
                return protocol
        return None


class Device(Module, _PropertyContainer):
    """A DDL ``device`` module."""
    TAG = "device"
    kind = ModuleKind.device
    CHILD_FIELDS = Module.CHILD_FIELDS + ("useprotocols", "items", )
    IDENTIFIED_CHILD_FIELD = "items"
    CONTAINER_KIND = "device"

    def __init__(self, id=None, label=None, provider=None, uuid=None):
        super().__init__(id, uuid, label, provider)
        self.useprotocols: List[UseProtocol] = []
        self.items: List[IdentifiedNode] = []
        self._appliance = None

    def add_use_protocol(self, name: str):
        if self.get_use_protocol(name) is None:
            self._add_child_node("useprotocols", UseProtocol(name))

    def get_use_protocol(self, name: str) -> "Optional[UseProtocol]":
        for useprotocol in self.useprotocols:
            if useprotocol.name == name:
                return useprotocol
        return None

    def get_appliance(self, rebuild: bool = False):
        """Get the appliance compiled from this device, building it on first use."""
        if self._appliance is None or rebuild:
            from .appliance import Appliance
            logger.debug("building appliance of device %s", self.id)
            self._appliance = Appliance(self)
        return self._appliance


class UseProtocol(IdentifiedNode):
    TAG = "useprotocol"

    def __init__(self, name: str, id: Optional[str] = None):
        super().__init__(id)
        self.name = name


class Property(LabeledArrayElement, _PropertyContainer, _ProtocolContainer):
    """A DDL ``property``.

    A property of an appliance has ``definition`` set to the declaration it
    was compiled from; it shares the label, behavior, protocol and value
    lists of that declaration and has only its compiled properties as child
    nodes.
    """
    TAG = "property"
    CHILD_FIELDS = LabeledElement.CHILD_FIELDS + ("behaviors", "values", "protocols", "items", )
    IDENTIFIED_CHILD_FIELD = "items"
    CONTAINER_KIND = "property"
    INVALID_ARRAY_INDEX = -1

    def __init__(self, id: Optional[str] = None, valuetype: PropertyValueType = PropertyValueType.NULL,
                 label: Optional[str] = None):
        super().__init__(id, label)
        self.valuetype = valuetype
        self.sharedefine = PropertyShareDefine.false_
        self.valuetypeparamname: Optional[str] = None
        self.arrayparamname: Optional[str] = None
        self.sharedefineparamname: Optional[str] = None
        self.behaviors: List[Behavior] = []
        self.protocols: List[Protocol] = []
        self.values: List[Value] = []
        self.items: List[IdentifiedNode] = []
        self.definition: Optional[LabeledArrayElement] = None
        self.array_index = self.INVALID_ARRAY_INDEX

    def child_nodes(self):
        if self.definition is not None:
            return list(self.items)
        return super().child_nodes()

    def add_behavior(self, bset: str, name: Optional[str] = None, present: bool = True, *,
                     group: Optional[str] = None):
        """Make sure the property has (or has not) a behavior.

        The behavior is given as ``set`` and ``name``, or as a single qualified
        name ``set:name``.  With ``group``, at most one behavior whose name
        starts with ``group`` may be present and it must be ``name``; ``name``
        is added when none is present.

        :raises DdlIntegrityError: the behavior is present while ``present``
            is ``False``, or another behavior of ``group`` is present
        :raises DdlValidationError: the behavior set is not a UUID nor a
            registered UUIDName
        """
        if group is not None:
            found = self.find_behavior(bset, group)
            if found is None:
                if name:
                    self.add_behavior(bset, name)
            elif found.name != name:
                raise make_exception(ddl_err_behavior_conflict, id=self.id, set=found.set,
                                     name=found.name, req_set=bset, req_name=name)
            return
        if name is None:
            bset, name = QualifiedName.split(bset)
        if self.has_behavior(bset, name) != present:
            if not present:
                raise make_exception(ddl_err_behavior_present, id=self.id, set=bset, name=name)
            result = Behavior(bset, name)
            self.verify_module_identifier(bset)
            self._add_child_node("behaviors", result)

    def find_behavior(self, bset: Optional[str], name: str) -> Optional[BehaviorReference]:
        """Find a behavior in group ``name`` (a name prefix).

        Behaviors stated on the property are searched before the behaviors
        they refine.
        """
        for behavior in self.behaviors:
            if behavior.matches_behavior_group(bset, name):
                return behavior
        for behavior in self.behaviors:
            result = behavior.find_behavior(bset, name)
            if result is not None:
                return result
        return None

    def get_behavior(self, bset: Optional[str], name: str) -> Optional[Behavior]:
        for behavior in self.behaviors:
            if behavior.matches_behavior(bset, name):
                return behavior
        return None

    def has_behavior(self, bset: Optional[str], name: Optional[str] = None) -> bool:
        """Test for a behavior, stated on the property or refined by one that is."""
        if name is None:
            bset, name = QualifiedName.split(bset)
        if any(behavior.matches_behavior(bset, name) for behavior in self.behaviors):
            return True
        return any(behavior.refines_behavior(bset, name) for behavior in self.behaviors)

    def add_or_update_sub_property(self, bset: str, behavior: str, name: str, data_type: ValueDataType,
                                   value: Optional[str], index: int = -1, verify: bool = False
                                   ) -> "Optional[Property]":
        """Add or update the immediate sub-property ``<id>.<name>`` with behavior ``bset:behavior``.

        For array properties ``index`` selects the element.  Values are stored
        compacted: a single value stands for all elements until an element
        differs, after which one value per element up to that index is kept.

        :param value: the value; nothing is done when it is empty
        :param verify: verify existing values rather than updating them
        :returns: the sub-property, or ``None`` if ``value`` is empty
        :raises DdlIntegrityError: the existing sub-property is not
            immediate, lacks the behavior or holds values of another type,
            or verification fails
        """
        if not value:
            return None
        prop_id = f"{self.id}{IDENTIFIER_SEPARATOR}{name}"
        sub = self.get_property(prop_id)
        if sub is None:
            self.verify_module_identifier(bset)
            sub = Property(prop_id, PropertyValueType.immediate)
            sub._add_child_node("behaviors", Behavior(bset, behavior))
            sub.set_value(data_type, value)
            self._insert_property(sub)
            return sub
        if sub.valuetype is not PropertyValueType.immediate:
            raise make_exception(ddl_err_subproperty_not_immediate, id=sub.id, set=bset, name=behavior)
        if not sub.has_behavior(bset, behavior):
            raise make_exception(ddl_err_subproperty_missing_behavior, id=sub.id, set=bset, name=behavior)
        count = sub.get_value_count()
        if count == 0:
            sub.set_value(data_type, value)
            return sub
        current = sub.get_value_by_index(index if 0 <= index < count else count - 1)
        if current is None or current.type is not data_type:
            raise make_exception(ddl_err_subproperty_value, id=sub.id, type=data_type.value)
        if index < count:
            current.set_value(value, verify)
        elif count > 1 or current.value != value:
            while count < index:
                sub.add_value(current.type, current.value)
                count += 1
            sub.add_value(data_type, value)
        return sub

    def _new_value(self, data_type: ValueDataType, value: Optional[str]) -> "Value":
        if self.valuetype is not PropertyValueType.immediate:
            raise make_exception(ddl_err_value_not_immediate, id=self.id, valuetype=self.valuetype.value)
        result = Value(data_type)
        result.set_value(value)
        return result

    def add_value(self, data_type: ValueDataType, value: Optional[str]) -> "Value":
        result = self._new_value(data_type, value)
        self._add_child_node("values", result)
        return result

    def set_value(self, data_type: ValueDataType, value: Optional[str]) -> "Value":
        """Make ``value`` the single value of the property."""
        if len(self.values) == 1:
            result = self.values[0]
            result.set_value(value, data_type=data_type)
            return result
        result = self._new_value(data_type, value)
        self.values = []
        self._add_child_node("values", result)
        return result

    def get_value(self, key: Union[int, str, None] = None) -> "Optional[Value]":
        """Get a value by array index or by ``xml:id``.

        A single value stands for every array index.  Without ``key`` the first
        value is returned.
        """
        if isinstance(key, int):
            if len(self.values) == 1:
                return self.values[0]
            if 0 <= key < len(self.values):
                return self.values[key]
            return None
        for value in self.values:
            if not key or value.id == key:
                return value
        return None

    def get_value_by_index(self, index: int) -> "Optional[Value]":
        """Get the value stored at ``index``.

        :raises IndexError: the property has values but ``index`` is out of range
        """
        if not self.values:
            return None
        if 0 <= index < len(self.values):
            return self.values[index]
        raise make_exception(ddl_err_value_index, index=index, id=self.id)

    def get_value_count(self) -> int:
        return len(self.values)

    def get_value_string(self, key: Union[int, str, None] = None) -> Optional[str]:
        result = self.get_value(key)
        return result.value if result is not None else None

    def has_constant_value(self) -> bool:
        return self.has_behavior(ACNBASE_BSET, "constant")

    def has_persistent_value(self) -> bool:
        return self.has_behavior(ACNBASE_BSET, "persistent")

    def has_volatile_value(self) -> bool:
        return self.has_behavior(ACNBASE_BSET, "volatile")

    def has_immediate_value(self) -> bool:
        return self.valuetype is PropertyValueType.immediate

    def has_implied_value(self) -> bool:
        return self.valuetype is PropertyValueType.implied

    def has_network_value(self) -> bool:
        return self.valuetype is PropertyValueType.network

    def has_null_value(self) -> bool:
        return self.valuetype is PropertyValueType.NULL

    def is_compound(self) -> bool:
        return self.valuetype is PropertyValueType.NULL or self.has_array

    def __repr__(self):
        return f"Property({self.id!r}, {self.valuetype.value})"


class IncludeDevice(LabeledArrayElement, _ProtocolContainer):
    """Inclusion of another device module, by UUID."""
    TAG = "includedev"
    CHILD_FIELDS = LabeledElement.CHILD_FIELDS + ("protocols", )

    def __init__(self, id: Optional[str] = None, uuid: Optional[str] = None, label: Optional[str] = None):
        super().__init__(id, label)
        self.uuid = normalize_uuid(verify_nmtoken(uuid, "device reference"))
        self.protocols: List[Protocol] = []
        self.setparams = []

    def get_definition(self) -> Device:
        """Get the included device.

        :raises ModuleResolutionError: the reference is not an existing device module
        """
        module = self.get_referenced_module(self.uuid)
        if not isinstance(module, Device):
            raise make_exception(ddl_err_not_a_device, uuid=self.uuid)
        return module


class PropertyPointer(IdentifiedNode):
    TAG = "propertypointer"

    def __init__(self, id: Optional[str] = None, reference: Optional[str] = None):
        super().__init__(id)
        if not reference:
            raise make_exception(ddl_err_empty_pointer_reference)
        self.reference = reference


class Protocol(IdentifiedNode):
    """Protocol block of a property: a named list of opaque attribute elements.

    The elements are ``lxml`` elements that are not part of any tree; element
    names are compared in their qualified ``prefix:localname`` form.
    """
    TAG = "protocol"

    def __init__(self, name: str, id: Optional[str] = None):
        super().__init__(id)
        if not name:
            raise make_exception(ddl_err_empty_protocol_name)
        self.name = name
        self.elements = []

    def add_or_update_attributes(self, element_name: str, attrs: Optional[Dict[str, str]],
                                 namespace: str = DDL_NAMESPACE, index: int = -1, verify: bool = False):
        """Add or update the attributes of element ``element_name``.

        Elements of array properties are compacted like sub-property values.

        :param element_name: qualified element name, e.g. ``cia:CANopen``
        :param attrs: attribute names and values
        :param namespace: namespace of a new element
        :param index: array index, -1 for a non-array property
        :param verify: verify existing attributes rather than updating them
        :raises DdlIntegrityError: verification fails
        """
        if attrs is None:
            return
        count = self.get_element_count(element_name)
        if count == 0:
            element = _create_element(element_name, namespace)
            self.set_or_verify_attributes(element, attrs)
            self.register_xml_namespace(element_name, namespace)
            self.add_element(element)
            return
        element = self.get_element(element_name, index if 0 <= index < count else count - 1)
        if element is None:
            raise make_exception(ddl_err_missing_protocol_element, name=element_name)
        if index < count:
            self.set_or_verify_attributes(element, attrs, verify)
        elif count > 1 or self.compare_attributes(element, attrs) != 0:
            while count < index:
                self.add_element(copy.deepcopy(element))
                count += 1
            element = etree.Element(element.tag, attrib=dict(element.attrib), nsmap=element.nsmap)
            self.set_or_verify_attributes(element, attrs)
            self.add_element(element)

    def add_element(self, element):
        if element is None:
            raise make_exception(ddl_err_empty_element)
        self.elements.append(element)

    @staticmethod
    def compare_attributes(element, attrs: Dict[str, str]) -> int:
        """Compare the attributes of ``element`` with ``attrs``; 0 when all are equal."""
        for key, expected in attrs.items():
            value = element.get(str(key), "")
            expected = str(expected)
            if value != expected:
                return -1 if value < expected else 1
        return 0

    def get_element(self, element_name: str, index: int = 0):
        """Get the ``index``-th element named ``element_name``; a negative index gets the first."""
        counter = 0
        for element in self.elements:
            if _element_name(element) == element_name:
                if index < 0 or counter == index:
                    return element
                counter += 1
        return None

    def get_element_count(self, element_name: Optional[str] = None) -> int:
        if not element_name:
            return len(self.elements)
        return sum(1 for element in self.elements if _element_name(element) == element_name)

    def set_attributes(self, element_name: str, attrs: Dict[str, str], namespace: str = DDL_NAMESPACE):
        """Replace all attributes of the first element ``element_name``."""
        element = self.get_element(element_name)
        if element is None:
            element = _create_element(element_name, namespace)
            self.add_element(element)
        self.register_xml_namespace(element_name, namespace)
        element.attrib.clear()
        self.set_or_verify_attributes(element, attrs)

    def set_or_verify_attributes(self, element, attrs: Dict[str, str], verify: bool = False):
        for key, expected in attrs.items():
            key, expected = str(key), str(expected)
            value = element.get(key, "")
            if value != expected:
                if verify:
                    raise make_exception(ddl_err_protocol_attribute_mismatch, name=self.name,
                                         key=key, value=value, expected=expected)
                element.set(key, expected)
                self.notify_node_changed()

    def register_element_namespaces(self):
        for element in self.elements:
            self.register_xml_namespace(_element_name(element), _get_tag_ns(element))

    def __repr__(self):
        return f"Protocol({self.name!r})"


class Value(IdentifiedLeafNode):
    """Immediate property value."""
    TAG = "value"
    # hex encoded octets, optionally separated by spaces, periods, commas or hyphens
    OBJECT_STRING_RE = re.compile(r'([0-9a-fA-F]{2}[\s\.,\-]*)*')

    def __init__(self, data_type: ValueDataType, value: Optional[str] = None, id: Optional[str] = None):
        super().__init__(id, value)
        self.type = data_type

    def set_value(self, value: Optional[str], verify: bool = False, data_type: Optional[ValueDataType] = None):
        """Set (or verify) the value after checking it against the data type.

        With ``data_type`` the value gets that type; type and value stay
        unchanged when the check fails.

        :raises DdlValidationError: the value does not match the data type
        :raises DdlIntegrityError: ``verify`` is set and the value differs
        """
        if data_type is None:
            data_type = self.type
        self._check_format(value, data_type)
        if self.value == value and self.type is data_type:
            return
        if verify and self.value != value:
            raise make_exception(ddl_err_value_mismatch, type=self.type.value, old=self.value, new=value)
        self.type = data_type
        self.value = value
        self.notify_node_changed()

    def _check_format(self, value, data_type: ValueDataType):
        try:
            if data_type is ValueDataType.sint:
                int(value)
            elif data_type is ValueDataType.float_:
                float(value)
        except (TypeError, ValueError):
            raise make_exception(ddl_err_value_format, type=data_type.value, value=value) from None
        if data_type is ValueDataType.object_ and value and not self.OBJECT_STRING_RE.fullmatch(value):
            raise make_exception(ddl_err_value_format, type=data_type.value, value=value)

    def __repr__(self):
        return f"Value({self.type.value}, {self.value!r})"
