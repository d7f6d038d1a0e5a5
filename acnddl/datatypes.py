# Copyright 2021-2024 Nokia

import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, Optional

from .behavior import ACNBASE_BSET, DMS_BSET, TYPE_BEHAVIOR_GROUP
from .device import Property
from .errors import *
from .errors import make_exception
from .identifier import QNAME_SEPARATOR

__all__ = (
    "TypeCode", "TypeInfo", "TYPE_INFOS", "get_type_info_by_behavior",
    "get_type_info_by_code", "convert_from_string", "DataType",
    "ProtocolDefinition", "ProtocolBinding",
)

__doc__ = """Data types and protocol bindings of device properties.

The data type of a property is given by one ``acn.dms.bset:type.*`` behavior
(or a behavior refining one).  :py:class:`TypeInfo` maps it to a size and a
value range and :py:func:`convert_from_string` parses value strings:

* integers are decimal, or hexadecimal with a ``0x`` prefix; hexadecimal
  values of signed types are two's complement, e.g. ``0xFF`` is -1 for int8
* values outside the range of the type are rejected, nothing is truncated
* float32 values are rounded to the nearest single precision value; values
  beyond its range are rejected
* booleans are ``true``/``false`` or ``1``/``0``, in any case
"""


class TypeCode(IntEnum):
    empty = 0
    struct = 1
    object = 2
    char = 3
    string = 4
    bitmap8 = 5
    bitmap32 = 6
    boolean = 7
    enum8 = 8
    enum32 = 9
    float32 = 10
    float64 = 11
    int8 = 12
    int16 = 13
    int32 = 14
    int64 = 15
    uint8 = 16
    uint16 = 17
    uint32 = 18
    uint64 = 19


@dataclass(frozen=True)
class TypeInfo:
    """Description of a data type.

    :param behavior: the qualified name of the type behavior
    :param size: the size in octets, 0 for types of variable size
    """
    behavior: str
    code: TypeCode
    name: str
    size: int
    min_value: Any = None
    max_value: Any = None

    @property
    def has_variable_size(self) -> bool:
        return self.size == 0

    @property
    def is_number(self) -> bool:
        return TypeCode.float32 <= self.code <= TypeCode.uint64

    @property
    def is_string(self) -> bool:
        return self.code is TypeCode.string

    @property
    def is_signed(self) -> bool:
        return TypeCode.int8 <= self.code <= TypeCode.int64

    def get_fixed_size(self) -> int:
        """The size in octets.

        :raises UnsupportedFeatureError: the type has a variable size
        """
        if self.has_variable_size:
            raise make_exception(ddl_err_variable_size, type=self.name)
        return self.size


def _dms_type(code: TypeCode, size: int, min_value=None, max_value=None) -> TypeInfo:
    behavior = f"{DMS_BSET}{QNAME_SEPARATOR}{TYPE_BEHAVIOR_GROUP}{code.name}"
    return TypeInfo(behavior, code, code.name, size, min_value, max_value)


def _unsigned(code: TypeCode, size: int) -> TypeInfo:
    return _dms_type(code, size, 0, (1 << (8 * size)) - 1)


def _signed(code: TypeCode, size: int) -> TypeInfo:
    return _dms_type(code, size, -(1 << (8 * size - 1)), (1 << (8 * size - 1)) - 1)


_FLOAT32_MAX = struct.unpack("<f", b"\xff\xff\x7f\x7f")[0]

TYPE_INFOS = (
    _dms_type(TypeCode.boolean, 1, False, True),
    _dms_type(TypeCode.string, 0),
    TypeInfo(f"{ACNBASE_BSET}{QNAME_SEPARATOR}binObject", TypeCode.object, "object", 0),
    _unsigned(TypeCode.uint8, 1),
    _unsigned(TypeCode.uint16, 2),
    _unsigned(TypeCode.uint32, 4),
    _unsigned(TypeCode.uint64, 8),
    _signed(TypeCode.int8, 1),
    _signed(TypeCode.int16, 2),
    _signed(TypeCode.int32, 4),
    _signed(TypeCode.int64, 8),
    _dms_type(TypeCode.float32, 4, -_FLOAT32_MAX, _FLOAT32_MAX),
    _dms_type(TypeCode.float64, 8),
    _unsigned(TypeCode.bitmap8, 1),
    _unsigned(TypeCode.bitmap32, 4),
    _unsigned(TypeCode.enum8, 1),
    _unsigned(TypeCode.enum32, 4),
)

_TYPE_INFO_BY_BEHAVIOR: Dict[str, TypeInfo] = {info.behavior: info for info in TYPE_INFOS}
_TYPE_INFO_BY_CODE: Dict[TypeCode, TypeInfo] = {info.code: info for info in TYPE_INFOS}
_INTEGER_CODES = frozenset(info.code for info in TYPE_INFOS if isinstance(info.max_value, int) and info.code is not TypeCode.boolean)


def get_type_info_by_behavior(behavior: str) -> Optional[TypeInfo]:
    """Get the type of a qualified behavior name such as ``acn.dms.bset:type.uint8``."""
    return _TYPE_INFO_BY_BEHAVIOR.get(behavior)


def get_type_info_by_code(code: TypeCode) -> Optional[TypeInfo]:
    return _TYPE_INFO_BY_CODE.get(code)


def _convert_integer(value: str, info: TypeInfo) -> int:
    text = value.strip()
    if text[:2].lower() == "0x":
        result = int(text[2:], 16)
        if info.is_signed and result > info.max_value and result < (1 << (8 * info.size)):
            result -= 1 << (8 * info.size)
    else:
        result = int(text, 10)
    if not info.min_value <= result <= info.max_value:
        raise ValueError(f"{value} out of range")
    return result


def _convert_boolean(value: str) -> bool:
    text = value.strip().lower()
    if text in ("true", "1"):
        return True
    if text in ("false", "0"):
        return False
    raise ValueError(value)


def convert_from_string(value: Optional[str], info: TypeInfo) -> Any:
    """Convert a value string to a value of the given type.

    :returns: the value, ``None`` if ``value`` is ``None``
    :raises DataConversionError: the string is not a value of the type
    :raises UnsupportedFeatureError: values of the type cannot be converted
    """
    if value is None:
        return None
    try:
        if info.code is TypeCode.string:
            return value
        if info.code is TypeCode.boolean:
            return _convert_boolean(value)
        if info.code is TypeCode.float32:
            return struct.unpack("<f", struct.pack("<f", float(value)))[0]
        if info.code is TypeCode.float64:
            return float(value)
        if info.code in _INTEGER_CODES:
            return _convert_integer(value, info)
    except (ValueError, OverflowError, struct.error) as err:
        raise make_exception(ddl_err_conversion_failed, value=value, type=info.name) from err
    raise make_exception(ddl_err_conversion_not_implemented, type=info.name)


class DataType:
    """The data type of a property.

    :raises DdlIntegrityError: the property has no data type behavior, or
        the behavior is not a supported data type
    """

    def __init__(self, property: Property):
        self.property = property
        self.behavior = property.find_behavior(DMS_BSET, TYPE_BEHAVIOR_GROUP)
        if self.behavior is None:
            raise make_exception(ddl_err_no_datatype, id=property.id)
        # the set may be given by UUID, the table is keyed by UUIDName
        behavior = f"{DMS_BSET}{QNAME_SEPARATOR}{self.behavior.name}"
        self.type_info = get_type_info_by_behavior(behavior)
        if self.type_info is None:
            raise make_exception(ddl_err_unsupported_datatype, behavior=behavior, id=property.id)

    def convert_from_string(self, value: Optional[str]) -> Any:
        return convert_from_string(value, self.type_info)

    def __repr__(self):
        return f"DataType({self.property.id!r}, {self.type_info.name})"


class ProtocolDefinition:
    """Definition of the protocol attributes of properties.

    :param name: the name of the protocol in ``protocol`` elements
    :param qname: the qualified name of the element holding the attributes
    :param namespace: the XML namespace of that element
    :param default_attributes: the attribute names with their default values
    """

    def __init__(self, name: str, qname: str, namespace: str, default_attributes: Dict[str, str]):
        self.name = name
        self.qname = qname
        self.namespace = namespace
        self._default_attributes = dict(default_attributes)

    @property
    def default_attributes(self) -> Dict[str, str]:
        return dict(self._default_attributes)

    def __repr__(self):
        return f"ProtocolDefinition({self.name!r}, {self.qname!r})"


class ProtocolBinding:
    """The attributes of one protocol of a property.

    :raises DdlIntegrityError: the property has no such protocol, or the
        protocol has no attributes element
    """

    def __init__(self, property: Property, definition: ProtocolDefinition):
        self.property = property
        self.definition = definition
        self.protocol = property.get_protocol(definition.name)
        if self.protocol is None:
            raise make_exception(ddl_err_property_no_protocol, id=property.id, name=definition.name)
        self.element = self.protocol.get_element(definition.qname)
        if self.element is None:
            raise make_exception(ddl_err_protocol_no_element, id=property.id, name=definition.name,
                                 qname=definition.qname)

    def get_attribute(self, name: str) -> Optional[str]:
        """Get an attribute, or its default value when it is missing or empty."""
        result = self.element.get(name)
        if not result:
            result = self.definition.default_attributes.get(name)
        return result
