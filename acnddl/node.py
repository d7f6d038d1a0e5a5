# Copyright 2021-2024 Nokia

import datetime
import logging
from enum import Enum
from typing import Dict, List, Optional

from .errors import *
from .errors import make_exception
from .identifier import (IDENTIFIER_SEPARATOR, QNAME_SEPARATOR, is_uuid,
                         join_identifiers, normalize_uuid,
                         verify_node_identifier)

__all__ = (
    "DDL_NAMESPACE", "Node", "IdentifiedNode", "IdentifiedLeafNode", "Label",
    "LabeledElement", "LabeledArrayElement", "ModuleKind", "UUIDName",
    "ModuleReference", "AlternateFor", "Extends", "Parameter", "Module",
    "DDLDocument",
)

__doc__ = """Generic node tree of an ACN DDL document.

Every entity of a DDL module is a :py:class:`Node`.  A node owns its children
(held in the attributes named by ``CHILD_FIELDS``) and keeps a non-owning
``parent`` link.  Mutating operations link new children immediately and raise
the change notification on the owning module.
"""

logger = logging.getLogger(__name__)

DDL_NAMESPACE = "http://www.esta.org/acn/namespace/ddl/2008/"


class Node:
    """Base class for document nodes."""
    TAG = None
    CHILD_FIELDS = ()

    def __init__(self):
        self.parent: Optional["Node"] = None
        self.dom_node = None

    def child_nodes(self) -> "List[Node]":
        """The ordered child nodes: the concatenation of ``CHILD_FIELDS``."""
        result = []
        for field in self.CHILD_FIELDS:
            value = getattr(self, field)
            if value is None:
                continue
            if isinstance(value, list):
                result.extend(value)
            else:
                result.append(value)
        return result

    def get_child_node(self, index: int) -> "Optional[Node]":
        children = self.child_nodes()
        if 0 <= index < len(children):
            return children[index]
        return None

    def get_child_node_count(self) -> int:
        return len(self.child_nodes())

    def get_child_node_index(self) -> int:
        """Index of this node among the children of its parent, -1 if it is not a child."""
        if self.parent is not None:
            for index, child in enumerate(self.parent.child_nodes()):
                if child is self:
                    return index
        return -1

    def _add_child_node(self, field: str, *nodes: "Node"):
        items = getattr(self, field)
        for node in nodes:
            items.append(node)
            node.parent = self
            node.update_child_nodes()
        self.notify_node_changed()

    def _set_child_node(self, field: str, node: "Optional[Node]"):
        setattr(self, field, node)
        if node is not None:
            node.parent = self
            node.update_child_nodes()

    def update_child_nodes(self):
        """Recursively (re)link the parent of every descendant."""
        for child in self.child_nodes():
            child.parent = self
            child.update_child_nodes()

    def update_node(self, dom_node=None):
        self.dom_node = dom_node
        self.update_child_nodes()

    def notify_node_changed(self):
        """Mark the module of the document this node belongs to as changed."""
        root = self.get_ddl_document()
        if root is not None and root.module is not None:
            root.module.is_changed = True

    def get_ddl_document(self) -> "Optional[DDLDocument]":
        node = self
        while node.parent is not None:
            node = node.parent
        return node if isinstance(node, DDLDocument) else None

    def get_document(self):
        root = self.get_ddl_document()
        return root.document if root is not None else None

    def get_module(self) -> "Optional[Module]":
        node = self
        while node is not None:
            if isinstance(node, Module):
                return node
            node = node.parent
        return None

    def get_device(self):
        module = self.get_module()
        if module is not None and module.kind is ModuleKind.device:
            return module
        return None

    def get_referenced_module(self, uuid: str) -> "Optional[Module]":
        """Get the module referenced with ``uuid`` (a UUID or UUIDName) from this node's module."""
        module = self.get_module()
        if module is not None:
            return module.get_or_load_module_by_uuidname(uuid)
        return None

    def match_module_identifier(self, name1: Optional[str], name2: Optional[str]) -> bool:
        """Check whether two module references (UUID or UUIDName) refer to the same module."""
        if name1 == name2:
            return True
        module = self.get_module()
        if module is not None:
            uuidname = module.get_uuidname(name1)
            if uuidname is not None:
                return uuidname.matches(name2)
        return False

    def register_xml_namespace(self, element_qname: str, namespace: str):
        """Register the prefix of a foreign element name in the document root."""
        if element_qname and namespace != DDL_NAMESPACE:
            prefix, sep, _ = element_qname.partition(QNAME_SEPARATOR)
            if sep and prefix:
                root = self.get_ddl_document()
                if root is not None:
                    root.xml_namespaces.setdefault(prefix, namespace)

    def verify_module_identifier(self, id: str):
        """Verify a module reference (UUID or UUIDName) for use in this node.

        :raises DdlValidationError: the reference is empty, or it is a name
            that is not registered in the UUIDNames of the module
        """
        if not id:
            raise make_exception(ddl_err_empty_identifier, what="module identifier")
        module = self.get_module()
        if module is not None and not is_uuid(id) and module.get_uuidname(id) is None:
            raise make_exception(ddl_err_module_not_registered, id=id, module=module.id)

    def __repr__(self):
        return f"{self.__class__.__name__}()"


class IdentifiedNode(Node):
    """Node with an optional, dot-delimited ``xml:id``.

    The full identifier of a node is its id joined to the full identifier of
    its identified parent, merging any part of the id that repeats the tail of
    the parent's id.
    """
    IDENTIFIED_CHILD_FIELD = None

    def __init__(self, id: Optional[str] = None):
        super().__init__()
        self.id = verify_node_identifier(id) if id else None

    def get_full_identifier(self, root: "Optional[IdentifiedNode]" = None) -> Optional[str]:
        if self.id is not None:
            parent = self.parent
            if isinstance(parent, IdentifiedNode) and parent is not root:
                return join_identifiers(parent.get_full_identifier(root), self.id)
        return self.id

    @property
    def full_id(self):
        return self.get_full_identifier()

    def get_identified_child_nodes(self) -> "List[IdentifiedNode]":
        if self.IDENTIFIED_CHILD_FIELD is None:
            return []
        return getattr(self, self.IDENTIFIED_CHILD_FIELD)

    def get_identified_child_node(self, index: int) -> "Optional[IdentifiedNode]":
        nodes = self.get_identified_child_nodes()
        if 0 <= index < len(nodes):
            return nodes[index]
        return None

    def get_identified_child_node_count(self) -> int:
        return len(self.get_identified_child_nodes())

    def get_identified_node(self, id: Optional[str]) -> "Optional[IdentifiedNode]":
        """Find a descendant by a full or relative dotted identifier.

        :returns: the node, or ``None`` if no descendant has that identifier
        """
        if id is None:
            return None
        target = join_identifiers(self.get_full_identifier(), id)
        return self._find_identified_node(target)

    def _find_identified_node(self, target: str) -> "Optional[IdentifiedNode]":
        for node in self.get_identified_child_nodes():
            node_id = node.get_full_identifier()
            if node_id is None or not target.startswith(node_id):
                continue
            if len(target) == len(node_id):
                return node
            if target[len(node_id)] == IDENTIFIER_SEPARATOR:
                found = node._find_identified_node(target)
                if found is not None:
                    return found
        return None

    def get_group_of_identified_node(self, id: Optional[str]) -> "Optional[IdentifiedNode]":
        """Find the nearest existing node whose identifier is a dotted head of ``id``."""
        if id is not None:
            point = id.rfind(IDENTIFIER_SEPARATOR)
            while point > 0:
                result = self.get_identified_node(id[:point])
                if result is not None:
                    return result
                point = id.rfind(IDENTIFIER_SEPARATOR, 0, point)
        return None

    def __repr__(self):
        return f"{self.__class__.__name__}({self.id!r})"


class IdentifiedLeafNode(Node):
    """Leaf node with an optional ``xml:id`` and a text value."""

    def __init__(self, id: Optional[str] = None, value: Optional[str] = None):
        super().__init__()
        self.id = verify_node_identifier(id) if id else None
        self.value = value

    def is_empty(self) -> bool:
        return not self.value

    def __str__(self):
        return self.value or ""


class Label(IdentifiedLeafNode):
    """Label text, either immediate or a reference to a string in a language set."""
    TAG = "label"

    def __init__(self, id: Optional[str] = None, value: Optional[str] = None):
        super().__init__(id, value)
        self.set: Optional[str] = None
        self.key: Optional[str] = None

    def is_immediate_label(self) -> bool:
        return bool(self.value)

    def is_referenced_label(self) -> bool:
        return bool(self.key) and bool(self.set)

    def find_definition(self, languageset: Optional[str] = None):
        """The referenced language set, ``None`` when its name is not a UUIDName of the module."""
        languageset = languageset or self.set
        module = self.get_referenced_module(languageset)
        if module is not None and module.kind is not ModuleKind.languageset:
            raise make_exception(ddl_err_not_a_languageset, set=languageset)
        return module

    def get_definition(self):
        module = self.find_definition()
        if module is None:
            raise make_exception(ddl_err_not_a_languageset, set=self.set)
        return module

    def get_text(self, lang: Optional[str] = None) -> Optional[str]:
        """Get the label text, resolving a referenced label in language ``lang``.

        A reference to a language set that the module does not know gives ``None``.
        """
        if self.is_referenced_label():
            languageset = self.find_definition()
            return languageset.get_string_text(self.key, lang) if languageset is not None else None
        return self.value

    def is_empty(self) -> bool:
        return super().is_empty() and not self.key

    def set_text(self, value: Optional[str], languageset: Optional[str] = None,
                 key: Optional[str] = None, lang: Optional[str] = None) -> bool:
        """Set the label text.

        * ``value`` only: make the label immediate
        * ``languageset`` and ``key``: make the label a reference
        * ``value``, ``languageset`` and ``key``: make the label a reference
          and verify that it resolves to ``value``

        :returns: whether the label changed
        :raises DdlValidationError: a key is given without a language set
        :raises DdlIntegrityError: the reference does not resolve to ``value``
        """
        changed = False
        if key:
            if not languageset:
                raise make_exception(ddl_err_label_no_languageset, id=self.id)
            if value:
                definition = self.find_definition(languageset)
                old = definition.get_string_text(key, lang) if definition is not None else None
                if old is None:
                    raise make_exception(ddl_err_label_reference_not_found,
                                         id=self.id, set=languageset, key=key, lang=lang)
                if old != value:
                    raise make_exception(ddl_err_label_reference_mismatch,
                                         id=self.id, set=languageset, key=key,
                                         lang=lang, old=old, new=value)
            if languageset != self.set or key != self.key:
                self.set = languageset
                self.key = key
                changed = True
            if self.value is not None:
                self.value = None
                changed = True
        else:
            if self.set is not None or self.key is not None:
                self.set = None
                self.key = None
                changed = True
            if self.value != value:
                self.value = value
                changed = True
        return changed

    @staticmethod
    def set_label_text(owner: Node, value, languageset=None, key=None, lang=None):
        """Set the text of the ``label`` of ``owner``, creating or dropping the label as needed."""
        label = owner.label
        if label is None and (value or key):
            label = Label()
            label.parent = owner
        if label is not None:
            changed = label.set_text(value, languageset, key, lang)
            owner.label = None if label.is_empty() else label
            if changed:
                owner.notify_node_changed()


class LabeledElement(IdentifiedNode):
    CHILD_FIELDS = ("label", )

    def __init__(self, id: Optional[str] = None, label: Optional[str] = None):
        super().__init__(id)
        self.label: Optional[Label] = None
        if label:
            self.set_label_text(label)

    def get_label_text(self, lang: Optional[str] = None) -> Optional[str]:
        return self.label.get_text(lang) if self.label is not None else None

    def set_label_text(self, value, languageset=None, key=None, lang=None):
        Label.set_label_text(self, value, languageset, key, lang)


class LabeledArrayElement(LabeledElement):
    """Labeled element with an ``array`` attribute (property and includedev)."""

    def __init__(self, id: Optional[str] = None, label: Optional[str] = None):
        super().__init__(id, label)
        self.array: Optional[str] = None

    @property
    def array_size(self) -> int:
        return int(self.array) if self.array else 1

    @array_size.setter
    def array_size(self, value: int):
        self.array = None if value <= 1 else str(value)

    @property
    def has_array(self) -> bool:
        """Whether the ``array`` attribute is present, ``array="1"`` included."""
        return bool(self.array)

    @has_array.setter
    def has_array(self, value: bool):
        if value:
            if not self.array:
                self.array = "1"
        else:
            self.array = None


class ModuleKind(Enum):
    device = "device"
    behaviorset = "behaviorset"
    languageset = "languageset"


class UUIDName(IdentifiedNode):
    """Alias mapping a module name to its UUID.

    The referenced module is resolved lazily through the document collection
    and cached until the collection's module set changes.
    """
    TAG = "UUIDname"

    def __init__(self, uuid: str, name: str, id: Optional[str] = None):
        super().__init__(id)
        self.name = name
        self.uuid = normalize_uuid(uuid)
        self._module = None
        self._cache_version = None

    def get_referenced_module(self) -> "Optional[Module]":
        """Get or load the module that this UUIDName represents.

        :returns: the module, or ``None`` if this node is not part of a
            document in a collection
        :raises ModuleResolutionError: the module cannot be found, or the
            module found has another UUID
        """
        document = self.get_document()
        collection = document.collection if document is not None else None
        if collection is None:
            return self._module
        if self._module is not None and self._cache_version == collection.version:
            return self._module
        self._module = None
        other = collection.get_or_load_document_by_module_name(self.name)
        if other is None:
            other = collection.get_or_load_document_by_module_name(self.uuid)
        module = other.module if other is not None else None
        if module is None:
            raise make_exception(ddl_err_cannot_find_module, name=self.name, uuid=self.uuid)
        if (module.uuid or "").lower() != (self.uuid or "").lower():
            raise make_exception(ddl_err_module_uuid_mismatch,
                                 file=other.file_path or other.name,
                                 actual=module.uuid, expected=self.uuid)
        logger.debug("resolved module %s (%s)", self.name, self.uuid)
        self._module = module
        self._cache_version = collection.version
        return module

    def invalidate(self):
        self._module = None
        self._cache_version = None

    is_uuid = staticmethod(is_uuid)
    normalize_uuid = staticmethod(normalize_uuid)

    def matches(self, id: Optional[str]) -> bool:
        return self.name == id or self.uuid == id

    def __repr__(self):
        return f"UUIDName({self.uuid!r}, {self.name!r})"


class ModuleReference(IdentifiedNode):
    """Reference to another module by UUID."""

    def __init__(self, uuid: str, id: Optional[str] = None):
        super().__init__(id)
        self.uuid = normalize_uuid(uuid)


class AlternateFor(ModuleReference):
    TAG = "alternatefor"


class Extends(ModuleReference):
    TAG = "extends"


class Parameter(LabeledElement):
    """Module parameter.

    Parameter resolution is not modelled; the child elements other than the
    label are kept as opaque elements in ``content``.
    """
    TAG = "parameter"

    def __init__(self, id: Optional[str] = None, label: Optional[str] = None):
        super().__init__(id, label)
        self.content = []


class Module(IdentifiedNode):
    """Base class of :py:class:`acnddl.device.Device`,
    :py:class:`acnddl.behavior.BehaviorSet` and
    :py:class:`acnddl.language.LanguageSet`.

    Setting ``is_changed`` stamps the module date and drops the cached
    language set.
    """
    kind: Optional[ModuleKind] = None
    CHILD_FIELDS = ("uuidnames", "parameters", "label", "alternatefor", "extends", )
    LANGUAGE_SET_SUFFIX = "lset"

    def __init__(self, id: Optional[str] = None, uuid: Optional[str] = None,
                 label: Optional[str] = None, provider: Optional[str] = None):
        super().__init__(id)
        self.uuid = normalize_uuid(uuid)
        self.provider = provider
        self.date: Optional[str] = None
        self.uuidnames: List[UUIDName] = []
        self.parameters: List[Parameter] = []
        self.label: Optional[Label] = None
        self.alternatefor: List[AlternateFor] = []
        self.extends: List[Extends] = []
        self._is_changed = False
        self._language_set = None
        if label:
            self.set_label_text(label)

    @property
    def is_changed(self) -> bool:
        return self._is_changed

    @is_changed.setter
    def is_changed(self, value: bool):
        if self._is_changed != value:
            self._language_set = None
            self._is_changed = value
            if value:
                self.set_date_to_now()

    def add_uuidname(self, uuid: str, name: str):
        """Register a UUIDName, unless the UUID or the name is registered already."""
        if self.get_uuidname(uuid) is None and self.get_uuidname(name) is None:
            self._add_child_node("uuidnames", UUIDName(uuid, name))

    def get_uuidname(self, id: Optional[str]) -> Optional[UUIDName]:
        for uuidname in self.uuidnames:
            if uuidname.matches(id):
                return uuidname
        return None

    def get_or_load_module_by_uuidname(self, id: Optional[str]) -> "Optional[Module]":
        uuidname = self.get_uuidname(id)
        if uuidname is not None:
            return uuidname.get_referenced_module()
        return None

    def get_or_load_language_set(self):
        """Get the language set of this module by naming convention.

        For module ``a.b.c`` the UUIDNames ``a.b.c.lset``, ``a.b.lset`` and
        ``a.lset`` are tried in that order.
        """
        if self._language_set is None and self.id:
            parts = self.id.split(IDENTIFIER_SEPARATOR)
            parts.append(self.LANGUAGE_SET_SUFFIX)
            while len(parts) > 1:
                module = self.get_or_load_module_by_uuidname(IDENTIFIER_SEPARATOR.join(parts))
                if module is not None and module.kind is ModuleKind.languageset:
                    self._language_set = module
                    break
                del parts[-2]
        return self._language_set

    def get_label_text(self, lang: Optional[str] = None) -> Optional[str]:
        return self.label.get_text(lang) if self.label is not None else None

    def set_label_text(self, value, languageset=None, key=None, lang=None):
        Label.set_label_text(self, value, languageset, key, lang)

    def set_date_to_now(self):
        self.date = datetime.date.today().isoformat()

    def __repr__(self):
        return f"{self.__class__.__name__}({self.id!r}, uuid={self.uuid!r})"


class DDLDocument(Node):
    """The root node of a DDL document, holding exactly one module."""
    TAG = "DDL"
    CHILD_FIELDS = ("module", )
    VERSION = "1.1"

    def __init__(self, module: Optional[Module] = None):
        super().__init__()
        self.version = self.VERSION
        self.module: Optional[Module] = None
        self.xml_namespaces: Dict[str, str] = {}
        self._document = None
        if module is not None:
            module.is_changed = False
            self._set_child_node("module", module)

    @property
    def document(self):
        return self._document

    @document.setter
    def document(self, value):
        if value is not None and self._document is not None:
            raise make_exception(ddl_err_root_already_attached)
        self._document = value

    @property
    def device(self):
        return self.module if self.module is not None and self.module.kind is ModuleKind.device else None

    @property
    def behavior_set(self):
        return self.module if self.module is not None and self.module.kind is ModuleKind.behaviorset else None

    @property
    def language_set(self):
        return self.module if self.module is not None and self.module.kind is ModuleKind.languageset else None
