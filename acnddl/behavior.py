# Copyright 2021-2024 Nokia

from typing import List, Optional

from .errors import *
from .errors import make_exception
from .identifier import QNAME_SEPARATOR, QualifiedName, normalize_uuid, verify_ncname, verify_nmtoken
from .node import IdentifiedNode, LabeledElement, Module, ModuleKind

__all__ = (
    "ACNBASE_BSET", "DMS_BSET", "TYPE_BEHAVIOR_GROUP", "BehaviorSet",
    "BehaviorDefinition", "BehaviorReference", "Behavior", "Refines", "Section",
)

__doc__ = """Behavior sets, behavior definitions and references to them.

A behavior reference names a definition by behavior set (UUID or UUIDName)
and name.  Definitions may refine other definitions, possibly in other
behavior sets; "has behavior" and "find behavior" follow these refinements
transitively and stop at definitions that were already visited.
"""

ACNBASE_BSET = "acnbase.bset"
DMS_BSET = "acn.dms.bset"
# behavior group of the data type behaviors, e.g. type.uint16
TYPE_BEHAVIOR_GROUP = "type."


class BehaviorSet(Module):
    """A DDL ``behaviorset`` module."""
    TAG = "behaviorset"
    kind = ModuleKind.behaviorset
    CHILD_FIELDS = Module.CHILD_FIELDS + ("behaviordefs", )

    def __init__(self, id=None, label=None, provider=None, uuid=None):
        super().__init__(id, uuid, label, provider)
        self.behaviordefs: List[BehaviorDefinition] = []

    def add_behavior_def(self, name: str, label: Optional[str] = None) -> "BehaviorDefinition":
        """Get or add the behavior definition ``name``."""
        result = self.get_behavior_def(name)
        if result is None:
            result = BehaviorDefinition(name, label=label)
            self._add_child_node("behaviordefs", result)
        return result

    def get_behavior_def(self, name: str) -> "Optional[BehaviorDefinition]":
        for behaviordef in self.behaviordefs:
            if behaviordef.name == name:
                return behaviordef
        return None


class BehaviorDefinition(LabeledElement):
    TAG = "behaviordef"
    CHILD_FIELDS = LabeledElement.CHILD_FIELDS + ("refines", "sections", )

    def __init__(self, name: str, id: Optional[str] = None, label: Optional[str] = None):
        super().__init__(id, label)
        self.name = verify_ncname(name, "behavior name")
        self.refines: List[Refines] = []
        self.sections: List[Section] = []

    def add_refines(self, bset: str, name: str):
        if self.get_refines(bset, name) is None:
            self._add_child_node("refines", Refines(bset, name))

    def get_refines(self, bset: str, name: str) -> "Optional[Refines]":
        for refines in self.refines:
            if refines.name == name and self.match_module_identifier(refines.set, bset):
                return refines
        return None

    def find_behavior(self, bset, name, visited=None) -> "Optional[BehaviorReference]":
        """Find a refined behavior whose name starts with ``name``."""
        visited = _visit(self, visited)
        if visited is None:
            return None
        for refines in self.refines:
            result = refines.find_behavior(bset, name, visited)
            if result is not None:
                return result
        return None

    def refines_behavior(self, bset, name, visited=None) -> bool:
        visited = _visit(self, visited)
        if visited is None:
            return False
        return any(refines.has_behavior(bset, name, visited) for refines in self.refines)

    def __repr__(self):
        return f"BehaviorDefinition({self.name!r})"


def _visit(definition, visited):
    # None when the definition was seen before on this search path
    if visited is None:
        visited = set()
    elif definition in visited:
        return None
    visited.add(definition)
    return visited


class BehaviorReference(IdentifiedNode):
    """Reference to a behavior definition, ``set:name``."""

    def __init__(self, bset: str, name: str, id: Optional[str] = None):
        super().__init__(id)
        self.set = normalize_uuid(verify_nmtoken(bset, "behavior set"))
        self.name = verify_ncname(name, "behavior name")

    @staticmethod
    def get_name_of_qname(qname):
        return QualifiedName.split(qname)[1]

    @staticmethod
    def get_prefix_of_qname(qname):
        return QualifiedName.split(qname)[0]

    def get_definition(self) -> Optional[BehaviorDefinition]:
        """Resolve the referenced behavior definition.

        :returns: the definition, or ``None`` if this node is not part of a module
        :raises ModuleResolutionError: the behavior set or the behavior cannot
            be found, or the set is not a behavior set
        """
        module = self.get_module()
        if module is None:
            return None
        module = module.get_or_load_module_by_uuidname(self.set)
        if module is None:
            raise make_exception(ddl_err_behaviorset_not_found, set=self.set)
        if not isinstance(module, BehaviorSet):
            raise make_exception(ddl_err_not_a_behaviorset, set=self.set, name=self.name)
        result = module.get_behavior_def(self.name)
        if result is None:
            raise make_exception(ddl_err_behavior_not_found, set=self.set, name=self.name)
        return result

    def find_behavior(self, bset, name, visited=None) -> "Optional[BehaviorReference]":
        """Find this or a refined behavior in group ``name`` (a name prefix)."""
        if self.matches_behavior_group(bset, name):
            return self
        definition = self.get_definition()
        if definition is not None:
            return definition.find_behavior(bset, name, visited)
        return None

    def has_behavior(self, bset, name, visited=None) -> bool:
        return self.matches_behavior(bset, name) or self.refines_behavior(bset, name, visited)

    def matches_behavior(self, bset, name) -> bool:
        return self.name == name and self.match_module_identifier(self.set, bset)

    def matches_behavior_group(self, bset, name) -> bool:
        return self.name.startswith(name) and (not bset or self.match_module_identifier(self.set, bset))

    def refines_behavior(self, bset, name, visited=None) -> bool:
        definition = self.get_definition()
        if definition is not None:
            return definition.refines_behavior(bset, name, visited)
        return False

    def __str__(self):
        return f"{self.set}{QNAME_SEPARATOR}{self.name}"

    def __repr__(self):
        return f"{self.__class__.__name__}({self.set!r}, {self.name!r})"


class Behavior(BehaviorReference):
    TAG = "behavior"


class Refines(BehaviorReference):
    TAG = "refines"


class Section(IdentifiedNode):
    """Descriptive section of a behavior definition.

    The heading is kept as text; paragraphs, nested sections and xhtml
    content are kept as opaque elements in ``content``.
    """
    TAG = "section"

    def __init__(self, id: Optional[str] = None, hd: Optional[str] = None):
        super().__init__(id)
        self.hd = hd
        self.content = []
