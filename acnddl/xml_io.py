# Copyright 2021-2024 Nokia

import copy
import logging
from pathlib import Path
from typing import Union

from lxml import etree

from .behavior import Behavior, BehaviorDefinition, BehaviorSet, Refines, Section
from .device import (Device, IncludeDevice, Property, PropertyPointer, PropertyShareDefine,
                     PropertyValueType, Protocol, UseProtocol, Value, ValueDataType)
from .errors import *
from .errors import make_exception
from .language import Language, LanguageSet, String
from .node import (DDL_NAMESPACE, AlternateFor, DDLDocument, Extends, Label, Module,
                   Node, Parameter, UUIDName)

__all__ = ("Reader", "Writer", "XHTML_NAMESPACE", "XML_ID", )

__doc__ = """Reading and writing DDL documents with ``lxml``.

Elements that are not modelled as nodes (protocol attribute elements,
behavior section content, parameter and setparam content) are kept as opaque
``lxml`` elements and written back unchanged.
"""

logger = logging.getLogger(__name__)

XHTML_NAMESPACE = "http://www.w3.org/1999/xhtml"
XML_ID = "{http://www.w3.org/XML/1998/namespace}id"

_get_tag_name = lambda x: etree.QName(x).localname
_ddl_tag = lambda name: etree.QName(DDL_NAMESPACE, name)
_child_elements = lambda x: (child for child in x if isinstance(child.tag, str))

MODULE_CLASSES = {cls.TAG: cls for cls in (Device, BehaviorSet, LanguageSet)}


class Reader:
    """Build a DDL node tree from XML.

    Each DDL element is handled by the ``handle_<element name>`` method; it
    creates the node and adds it to the node of the parent element.  Unknown
    elements are logged and ignored.
    """

    def read_file(self, path: Union[str, Path]) -> DDLDocument:
        """Read a DDL document from a file.

        :raises XmlDecodeError: the file is not a well-formed DDL document
        """
        parser = etree.XMLParser(remove_blank_text=True)
        try:
            tree = etree.parse(str(path), parser)
        except (OSError, etree.XMLSyntaxError) as err:
            raise make_exception(ddl_err_xml_parse, source=path, reason=err) from None
        return self.read_element(tree.getroot(), source=path)

    def read_string(self, text: Union[str, bytes], source: str = "<string>") -> DDLDocument:
        if isinstance(text, str):
            text = text.encode("utf-8")
        parser = etree.XMLParser(remove_blank_text=True)
        try:
            root = etree.fromstring(text, parser)
        except etree.XMLSyntaxError as err:
            raise make_exception(ddl_err_xml_parse, source=source, reason=err) from None
        return self.read_element(root, source=source)

    def read_element(self, root, source=None) -> DDLDocument:
        """Build the DDL root node, and the module it holds, from a ``DDL`` element."""
        if _get_tag_name(root) != DDLDocument.TAG:
            raise make_exception(ddl_err_no_ddl_root, tag=root.tag)
        module = None
        for element in _child_elements(root):
            name = _get_tag_name(element)
            if name not in MODULE_CLASSES or module is not None:
                raise make_exception(ddl_err_unknown_module_element, tag=name)
            module = self.read_module(element)
        if module is None:
            raise make_exception(ddl_err_empty_document, source=source)
        result = DDLDocument(module)
        result.version = root.get("version", DDLDocument.VERSION)
        for prefix, namespace in root.nsmap.items():
            if prefix and namespace not in (DDL_NAMESPACE, XHTML_NAMESPACE):
                result.xml_namespaces[prefix] = namespace
        result.update_node(root)
        return result

    def read_module(self, element) -> Module:
        module = MODULE_CLASSES[_get_tag_name(element)](
            element.get(XML_ID), provider=element.get("provider"), uuid=element.get("UUID"))
        module.date = element.get("date")
        self.read_children(module, element)
        module.dom_node = element
        return module

    def read_children(self, node: Node, element):
        for child in _child_elements(element):
            name = _get_tag_name(child)
            handler = getattr(self, f"handle_{name}", None)
            if handler is None:
                logger.warning("ignoring element %s in %s %s", name, node.TAG, getattr(node, "id", None))
                continue
            handler(node, child)

    @staticmethod
    def _enum(cls, element, name, default=None):
        value = element.get(name)
        if value is None:
            return default
        try:
            return cls(value)
        except ValueError:
            raise make_exception(ddl_err_invalid_attribute, value=value, name=name,
                                 tag=_get_tag_name(element)) from None

    def handle_UUIDname(self, module, element):
        module._add_child_node("uuidnames", UUIDName(element.get("UUID"), element.get("name"),
                                                     element.get(XML_ID)))

    def handle_parameter(self, module, element):
        parameter = Parameter(element.get(XML_ID))
        for child in _child_elements(element):
            if _get_tag_name(child) == Label.TAG:
                self.handle_label(parameter, child)
            else:
                parameter.content.append(copy.deepcopy(child))
        module._add_child_node("parameters", parameter)

    def handle_label(self, owner, element):
        label = Label(element.get(XML_ID), element.text)
        label.set = element.get("set")
        label.key = element.get("key")
        owner._set_child_node("label", label)

    def handle_alternatefor(self, module, element):
        module._add_child_node("alternatefor", AlternateFor(element.get("UUID"), element.get(XML_ID)))

    def handle_extends(self, module, element):
        module._add_child_node("extends", Extends(element.get("UUID"), element.get(XML_ID)))

    def handle_useprotocol(self, device, element):
        device._add_child_node("useprotocols", UseProtocol(element.get("name"), element.get(XML_ID)))

    def handle_property(self, parent, element):
        prop = Property(element.get(XML_ID),
                        self._enum(PropertyValueType, element, "valuetype", PropertyValueType.NULL))
        prop.array = element.get("array")
        prop.sharedefine = self._enum(PropertyShareDefine, element, "sharedefine", PropertyShareDefine.false_)
        prop.valuetypeparamname = element.get("valuetypeparamname")
        prop.arrayparamname = element.get("arrayparamname")
        prop.sharedefineparamname = element.get("sharedefineparamname")
        self.read_children(prop, element)
        prop.dom_node = element
        parent._add_child_node("items", prop)

    def handle_behavior(self, prop, element):
        prop._add_child_node("behaviors", Behavior(element.get("set"), element.get("name"), element.get(XML_ID)))

    def handle_value(self, prop, element):
        value = Value(self._enum(ValueDataType, element, "type"), element.text, element.get(XML_ID))
        prop._add_child_node("values", value)

    def handle_protocol(self, owner, element):
        protocol = Protocol(element.get("name"), element.get(XML_ID))
        for child in _child_elements(element):
            protocol.add_element(copy.deepcopy(child))
        owner._add_child_node("protocols", protocol)

    def handle_includedev(self, parent, element):
        includedev = IncludeDevice(element.get(XML_ID), element.get("UUID"))
        includedev.array = element.get("array")
        self.read_children(includedev, element)
        parent._add_child_node("items", includedev)

    def handle_setparam(self, includedev, element):
        includedev.setparams.append(copy.deepcopy(element))

    def handle_propertypointer(self, parent, element):
        parent._add_child_node("items", PropertyPointer(element.get(XML_ID), element.get("ref")))

    def handle_behaviordef(self, bset, element):
        behaviordef = BehaviorDefinition(element.get("name"), element.get(XML_ID))
        self.read_children(behaviordef, element)
        bset._add_child_node("behaviordefs", behaviordef)

    def handle_refines(self, behaviordef, element):
        behaviordef._add_child_node("refines", Refines(element.get("set"), element.get("name"),
                                                       element.get(XML_ID)))

    def handle_section(self, behaviordef, element):
        section = Section(element.get(XML_ID))
        for child in _child_elements(element):
            if _get_tag_name(child) == "hd" and section.hd is None and not section.content:
                section.hd = child.text
            else:
                section.content.append(copy.deepcopy(child))
        behaviordef._add_child_node("sections", section)

    def handle_language(self, lset, element):
        language = Language(element.get("lang"), element.get("altlang"), id=element.get(XML_ID))
        self.read_children(language, element)
        lset._add_child_node("languages", language)

    def handle_string(self, language, element):
        language._add_child_node("strings", String(element.get("key"), element.text, element.get(XML_ID)))


class Writer:
    """Serialize a DDL node tree to XML.

    Each node is written by the ``_write_<TAG>`` method, which sets the
    attributes of the element of the node and writes its children.
    """

    def write_file(self, ddl: DDLDocument, path: Union[str, Path]):
        Path(path).write_bytes(self.write_string(ddl))

    def write_string(self, ddl: DDLDocument) -> bytes:
        return etree.tostring(self.build_element(ddl), xml_declaration=True, encoding="UTF-8",
                              pretty_print=True)

    def build_element(self, ddl: DDLDocument):
        nsmap = {None: DDL_NAMESPACE, "html": XHTML_NAMESPACE}
        nsmap.update(ddl.xml_namespaces)
        root = etree.Element(_ddl_tag(DDLDocument.TAG), nsmap=nsmap)
        root.set("version", ddl.version or DDLDocument.VERSION)
        if ddl.module is not None:
            self.write_node(root, ddl.module)
        return root

    def write_node(self, parent, node: Node):
        element = etree.SubElement(parent, _ddl_tag(node.TAG))
        if getattr(node, "id", None):
            element.set(XML_ID, node.id)
        getattr(self, f"_write_{node.TAG}")(element, node)
        return element

    def write_children(self, element, node: Node):
        for child in node.child_nodes():
            self.write_node(element, child)

    @staticmethod
    def _set(element, **attrs):
        for name, value in attrs.items():
            if value is not None:
                element.set(name, value)

    def _write_module(self, element, module: Module):
        self._set(element, UUID=module.uuid, provider=module.provider, date=module.date)
        self.write_children(element, module)

    _write_device = _write_module
    _write_behaviorset = _write_module
    _write_languageset = _write_module

    def _write_UUIDname(self, element, uuidname: UUIDName):
        self._set(element, name=uuidname.name, UUID=uuidname.uuid)

    def _write_parameter(self, element, parameter: Parameter):
        self.write_children(element, parameter)
        element.extend(copy.deepcopy(child) for child in parameter.content)

    def _write_label(self, element, label: Label):
        self._set(element, set=label.set, key=label.key)
        element.text = label.value

    def _write_alternatefor(self, element, reference):
        self._set(element, UUID=reference.uuid)

    _write_extends = _write_alternatefor

    def _write_useprotocol(self, element, useprotocol: UseProtocol):
        self._set(element, name=useprotocol.name)

    def _write_property(self, element, prop: Property):
        self._set(element, valuetype=prop.valuetype.value, array=prop.array,
                  valuetypeparamname=prop.valuetypeparamname, arrayparamname=prop.arrayparamname,
                  sharedefineparamname=prop.sharedefineparamname)
        if prop.sharedefine is not PropertyShareDefine.false_:
            element.set("sharedefine", prop.sharedefine.value)
        self.write_children(element, prop)

    def _write_behavior(self, element, behavior):
        self._set(element, set=behavior.set, name=behavior.name)

    _write_refines = _write_behavior

    def _write_value(self, element, value: Value):
        self._set(element, type=value.type.value)
        element.text = value.value

    def _write_protocol(self, element, protocol: Protocol):
        self._set(element, name=protocol.name)
        element.extend(copy.deepcopy(child) for child in protocol.elements)

    def _write_includedev(self, element, includedev: IncludeDevice):
        self._set(element, UUID=includedev.uuid, array=includedev.array)
        if includedev.label is not None:
            self.write_node(element, includedev.label)
        element.extend(copy.deepcopy(child) for child in includedev.setparams)
        for protocol in includedev.protocols:
            self.write_node(element, protocol)

    def _write_propertypointer(self, element, pointer: PropertyPointer):
        self._set(element, ref=pointer.reference)

    def _write_behaviordef(self, element, behaviordef: BehaviorDefinition):
        self._set(element, name=behaviordef.name)
        self.write_children(element, behaviordef)

    def _write_section(self, element, section: Section):
        if section.hd is not None:
            etree.SubElement(element, _ddl_tag("hd")).text = section.hd
        element.extend(copy.deepcopy(child) for child in section.content)

    def _write_language(self, element, language: Language):
        self._set(element, lang=language.lang, altlang=language.altlang)
        self.write_children(element, language)

    def _write_string(self, element, string: String):
        self._set(element, key=string.key)
        element.text = string.value
