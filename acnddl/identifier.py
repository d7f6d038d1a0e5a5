# Copyright 2021-2024 Nokia

import re
from typing import Optional, Tuple

from .errors import *
from .errors import make_exception

__all__ = (
    "IDENTIFIER_SEPARATOR", "QNAME_SEPARATOR", "QualifiedName",
    "is_ncname", "verify_ncname", "verify_nmtoken", "verify_node_identifier",
    "is_uuid", "normalize_uuid", "merge_overlapping_identifiers",
    "join_identifiers", "convert_to_basic_latin_xml_ncname",
    "is_basic_latin_xml_ncname", "convert_name_to_identifier",
    "convert_xml_name_to_identifier", "convert_xml_name_to_identifier_string",
    "convert_xml_name_to_filename_string", "convert_to_c_identifier",
)

IDENTIFIER_SEPARATOR = "."
QNAME_SEPARATOR = ":"

# NCName: a letter or LOW LINE, followed by name characters, no COLON
_NCNAME_RE = re.compile(r'[^\W\d][\w.\-·]*')
_NMTOKEN_RE = re.compile(r'[\w.\-·:]+')
_UUID_RE = re.compile(r'[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}')


def is_ncname(value) -> bool:
    return isinstance(value, str) and bool(_NCNAME_RE.fullmatch(value))


def verify_ncname(value, what="name"):
    if not value:
        raise make_exception(ddl_err_empty_identifier, what=what)
    if not is_ncname(value):
        raise make_exception(ddl_err_invalid_identifier, id=value)
    return value


def verify_nmtoken(value, what="token"):
    if not value:
        raise make_exception(ddl_err_empty_identifier, what=what)
    if not _NMTOKEN_RE.fullmatch(value):
        raise make_exception(ddl_err_invalid_nmtoken, what=what, value=value)
    return value


def verify_node_identifier(id: str) -> str:
    """Verify an identifier against the rules for an ``xml:id`` attribute.

    The identifier is whitespace-normalized first (see
    https://www.w3.org/TR/xml-id/#id-avn).

    :param id: the identifier to verify
    :returns: the normalized identifier
    :raises DdlValidationError: the identifier is empty or not an NCName
    """
    if not id:
        raise make_exception(ddl_err_empty_identifier, what="identifier")
    return verify_ncname(id.strip(), "identifier")


def is_uuid(value) -> bool:
    """Test whether a string is a UUID in its canonical 36 character form.

    DDL limits the length of UUIDName names so they can be told apart from a
    UUID in ``set`` attributes; the regex is used here instead of that length
    restriction.
    """
    return isinstance(value, str) and len(value) == 36 and bool(_UUID_RE.fullmatch(value))


def normalize_uuid(value):
    """Lower-case ``value`` if it is a UUID, return it unchanged otherwise."""
    return value.lower() if is_uuid(value) else value


def merge_overlapping_identifiers(base: str, id: str) -> Optional[str]:
    """Merge a dotted identifier into a base identifier it partially repeats.

    The longest ``.``-delimited head of ``id`` that equals a ``.``-delimited
    tail of ``base`` is merged once, e.g. ``("dev.motor", "motor.speed")``
    gives ``"dev.motor.speed"``.

    :returns: the merged identifier, or ``None`` if the two do not overlap
    """
    point = id.rfind(IDENTIFIER_SEPARATOR)
    while point > 0:
        if point <= len(base):
            start = len(base) - point
            if (base[start:] == id[:point]
                    and (start == 0 or base[start - 1] == IDENTIFIER_SEPARATOR)):
                return base + id[point:]
        point = id.rfind(IDENTIFIER_SEPARATOR, 0, point)
    return None


def join_identifiers(base: Optional[str], id: Optional[str]) -> Optional[str]:
    """Combine a base identifier and a (possibly relative) child identifier.

    ``None`` on either side contributes nothing.
    """
    if id is None:
        return base
    if base is None:
        return id
    merged = merge_overlapping_identifiers(base, id)
    if merged is None:
        merged = f"{base}{IDENTIFIER_SEPARATOR}{id}"
    return merged


class QualifiedName:
    """Class to hold a prefix-name pair such as ``acnbase.bset:constant``"""
    __slots__ = "_prefix", "_name"

    def __init__(self, prefix: Optional[str], name: str):
        self._prefix = prefix
        self._name = name

    @staticmethod
    def split(qname: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
        """Split ``prefix:name`` at the first colon; the prefix is ``None`` without one."""
        if qname is None:
            return None, None
        prefix, sep, name = qname.partition(QNAME_SEPARATOR)
        if not sep:
            return None, qname
        return prefix, name

    @staticmethod
    def from_string(qname: str):
        return QualifiedName(*QualifiedName.split(qname))

    @property
    def prefix(self):
        return self._prefix

    @property
    def name(self):
        return self._name

    def is_valid(self) -> bool:
        return is_ncname(self._name) and (
            self._prefix is None or bool(_NMTOKEN_RE.fullmatch(self._prefix)))

    def __hash__(self):
        return hash((self._prefix, self._name))

    def __eq__(self, other):
        if type(other) is QualifiedName:
            return self._name == other._name and self._prefix == other._prefix
        elif type(other) == str:
            return self == QualifiedName.from_string(other)
        return False

    def __ne__(self, other):
        return not(self == other)

    def __str__(self):
        return f"{self._prefix + QNAME_SEPARATOR if self._prefix else ''}{self._name}"

    def __repr__(self):
        return f"QualifiedName({self._prefix!r}, {self._name!r})"


# characters not allowed in a BasicLatin NCName
_NON_BASIC_LATIN_NCNAME_RE = re.compile(r'[^A-Z_a-z0-9_\.\-·]')
# characters not allowed as first character of a BasicLatin NCName
_NON_BASIC_LATIN_NCNAME_START_RE = re.compile(r'^[^A-Z_a-z0-9_]')
_NAME_SPECIAL_CHARS_RE = re.compile(r'[^a-zA-Z0-9_]')
_CAMEL_CASE_OPPORTUNITY_RE = re.compile(r'([a-zA-Z0-9_])[\s\-]+([A-Z])')
_XML_NAME_SPECIAL_CHARS_RE = re.compile(r'[:\-\.·]')
_XML_NAME_SPECIAL_CHARS_KEEP_DOT_RE = re.compile(r'[:\-·]')
_XML_NAME_SPECIAL_CHARS_FILENAME_RE = re.compile(r'[:·]')
_DIGIT_NAMES = (
    "nul_", "one_", "two_", "three_", "four_",
    "five_", "six_", "seven_", "eight_", "nine_",
)


def convert_name_to_identifier(name: str) -> str:
    """Convert free text to a strict identifier of letters, digits and LOW LINE."""
    name = _CAMEL_CASE_OPPORTUNITY_RE.sub(r'\1\2', name.strip())
    name = _NAME_SPECIAL_CHARS_RE.sub("_", name)
    if name and name[0].isdigit():
        name = "_" + name
    return name


def convert_to_basic_latin_xml_ncname(name: str) -> str:
    """Convert free text to an NCName made of BasicLatin characters only.

    Whitespace or HYPHEN-MINUS runs before a capital are collapsed into
    CamelCase, other characters that are not allowed are replaced with LOW LINE,
    and a LOW LINE is prepended if the first character may not start a name.
    """
    name = _CAMEL_CASE_OPPORTUNITY_RE.sub(r'\1\2', name.strip())
    name = _NON_BASIC_LATIN_NCNAME_RE.sub("_", name)
    if _NON_BASIC_LATIN_NCNAME_START_RE.match(name):
        name = "_" + name
    return name


def is_basic_latin_xml_ncname(name: str) -> bool:
    return (not _NON_BASIC_LATIN_NCNAME_RE.search(name)
            and not _NON_BASIC_LATIN_NCNAME_START_RE.match(name))


def convert_xml_name_to_identifier(xmlname: str) -> str:
    return _XML_NAME_SPECIAL_CHARS_RE.sub("_", xmlname)


def convert_xml_name_to_identifier_string(xmlname: str) -> str:
    return _XML_NAME_SPECIAL_CHARS_KEEP_DOT_RE.sub("_", xmlname)


def convert_xml_name_to_filename_string(xmlname: str) -> str:
    return _XML_NAME_SPECIAL_CHARS_FILENAME_RE.sub("_", xmlname)


def convert_to_c_identifier(name: str) -> str:
    """Convert an arbitrary name to a strict C identifier.

    Invalid characters become LOW LINE, leading LOW LINEs are dropped and a
    leading digit is spelled out (``3d`` becomes ``three_d``).

    :raises DdlValidationError: nothing is left after conversion
    """
    result = _NAME_SPECIAL_CHARS_RE.sub("_", name).lstrip("_")
    if result and result[0] in "0123456789":
        result = _DIGIT_NAMES[int(result[0])] + result[1:]
    if not result:
        raise make_exception(ddl_err_c_identifier_empty, name=name)
    return result
