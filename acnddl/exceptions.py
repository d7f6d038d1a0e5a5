# Copyright 2021-2024 Nokia

__all__ = (
    "DdlValidationError", "DdlIntegrityError", "ModuleResolutionError",
    "UnsupportedFeatureError", "InvalidStateError", "DataConversionError",
    "XmlDecodeError",
)

__doc__ = """This module contains exceptions for error handling within acnddl.

Lookups that miss (an unknown module name, a behavior or property that is not
present) never raise; they return ``None``.  The exceptions below are reserved
for input that cannot be accepted and for data that contradicts itself.
"""


class DdlValidationError(ValueError):
    """Exception raised immediately when input is malformed, for example:

    * an identifier that is not a valid ``xml:id`` (NCName)
    * a module UUID that is not well-formed
    * a qualified behavior name or module reference that is empty or unregistered
    * a value string that does not match its declared value type
    """
    pass


class DdlIntegrityError(Exception):
    """Exception raised when the description data contradicts itself, for example:

    * a behavior is present on a property that must not carry it
    * two conflicting behaviors of the same behavior group are requested
    * verification of a protocol attribute or sub-property value fails
    * a property identifier collides with an existing node of another kind
    """
    pass


class ModuleResolutionError(DdlIntegrityError):
    """Exception raised when a cross-module reference cannot be honoured:

    * the referenced module cannot be found or loaded
    * the loaded file contains a module with a different UUID
    * the referenced module is of the wrong kind (e.g. not a behavior set)
    """
    pass


class UnsupportedFeatureError(NotImplementedError):
    """Exception raised for documented parts of DDL that are not implemented,
    such as compiling a ``propertypointer`` into an appliance or sizing a
    variable-sized data type.
    """
    pass


class InvalidStateError(Exception):
    """Exception raised when an object is used in a state that does not allow
    the operation, e.g. a detached :py:class:`acnddl.traversal.NodeIterator`
    or a root node that is attached to a second document.
    """
    pass


class DataConversionError(DdlValidationError):
    """Exception raised when converting a value string to a typed value fails
    or the value does not fit the range of the data type."""
    pass


class XmlDecodeError(Exception):
    """Exception raised when parsing xml input fail."""
    pass


def make_exception(arg, **kwarg):
    """Create an exception from an error description tuple."""
    return arg[0](arg[1].format(**kwarg))
