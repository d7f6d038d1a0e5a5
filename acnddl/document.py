# Copyright 2021-2024 Nokia

import logging
import uuid as uuidlib
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Union

from .behavior import BehaviorSet
from .config import DEFAULT_EXTENSION, CollectionConfig
from .device import Device
from .errors import *
from .errors import make_exception
from .identifier import is_uuid, normalize_uuid, verify_node_identifier
from .language import LanguageSet
from .node import DDLDocument, Label, Module
from .xml_io import Reader, Writer

__all__ = ("Document", "DocumentCollection", )

__doc__ = """Documents and the collection that resolves modules across documents.

A :py:class:`Document` holds one DDL module.  A :py:class:`DocumentCollection`
indexes its documents by a URN made from the module UUID, and loads missing
modules by name from module files (``<name>.ddl.xml``) found in the current
directory or in the configured module folders.
"""

logger = logging.getLogger(__name__)

PathType = Union[str, Path]


def _uuid_urn(uuid: str) -> str:
    return uuidlib.UUID(uuid).urn


class Document:
    """A DDL document: the DDL root node, its module and where it is stored."""

    def __init__(self, root_node: Optional[DDLDocument] = None):
        self.identifier: Optional[str] = None
        self.name: Optional[str] = None
        self.collection: "Optional[DocumentCollection]" = None
        self.file_path: Optional[Path] = None
        self.dom_document = None
        self._root_node = None
        self.root_node = root_node

    @property
    def root_node(self) -> Optional[DDLDocument]:
        return self._root_node

    @root_node.setter
    def root_node(self, value: Optional[DDLDocument]):
        """Attach a DDL root node; the identifier and name follow its module.

        :raises InvalidStateError: the root node is attached to another document
        """
        if value is self._root_node:
            return
        if value is not None:
            value.document = self
        if self._root_node is not None:
            self._root_node.document = None
        self._root_node = value
        module = value.module if value is not None else None
        if module is not None:
            if module.uuid:
                self.identifier = _uuid_urn(module.uuid)
            self.name = module.id

    @property
    def module(self) -> Optional[Module]:
        return self._root_node.module if self._root_node is not None else None

    @property
    def device(self) -> Optional[Device]:
        return self._root_node.device if self._root_node is not None else None

    @property
    def behavior_set(self) -> Optional[BehaviorSet]:
        return self._root_node.behavior_set if self._root_node is not None else None

    @property
    def language_set(self) -> Optional[LanguageSet]:
        return self._root_node.language_set if self._root_node is not None else None

    @property
    def is_changed(self) -> bool:
        module = self.module
        return module is not None and module.is_changed

    def __repr__(self):
        return f"Document({self.name!r}, {self.identifier!r})"


class DocumentCollection:
    """The set of DDL documents that make up one or more device descriptions.

    Modules refer to each other by UUID (or by a UUIDName alias); the
    collection resolves these references and loads module files on demand.

    :param module_folders: folders searched for module files
    :param default_extension: file name extension of module files
    :param config: settings; ``module_folders`` and ``default_extension``
        given as arguments take precedence

    >>> docs = DocumentCollection(["ddl"])
    >>> device = docs.new_device("acme.dimmer", "ACME Dimmer").device
    """

    def __init__(self, module_folders: Optional[List[PathType]] = None,
                 default_extension: Optional[str] = None,
                 config: Optional[CollectionConfig] = None):
        config = config if config is not None else CollectionConfig()
        folders = module_folders if module_folders is not None else config.module_folders
        self.module_folders: List[Path] = [Path(folder) for folder in folders]
        self.default_extension = default_extension or config.default_extension or DEFAULT_EXTENSION
        self.language = config.language
        self._documents: Dict[str, Document] = {}
        self._version = 0

    @property
    def version(self) -> int:
        """Counter incremented whenever a document is added or removed."""
        return self._version

    def add(self, document: Document) -> Document:
        """Add a document.

        :raises DdlIntegrityError: a document with the same identifier is present
        """
        if document.identifier is None:
            raise make_exception(ddl_err_empty_identifier, what="document identifier")
        if document.identifier in self._documents:
            raise make_exception(ddl_err_document_present, urn=document.identifier, name=document.name)
        self._documents[document.identifier] = document
        document.collection = self
        self._version += 1
        logger.debug("added document %s (%s)", document.name, document.identifier)
        return document

    def remove(self, document: Document):
        if self._documents.get(document.identifier) is document:
            del self._documents[document.identifier]
            document.collection = None
            self._version += 1
            logger.debug("removed document %s (%s)", document.name, document.identifier)

    def __len__(self):
        return len(self._documents)

    def __iter__(self) -> Iterator[Document]:
        return iter(list(self._documents.values()))

    def __contains__(self, item):
        if isinstance(item, Document):
            return self._documents.get(item.identifier) is item
        return item in self._documents

    def add_module(self, module: Module) -> Document:
        """Add a new module to the collection, wrapped in a new document.

        A missing UUID is generated, the module gets a UUIDName for itself,
        a missing date is set to today and a missing label defaults to the
        module identifier.

        :returns: the new document
        :raises DdlValidationError: the module UUID or identifier is invalid
        """
        if not module.uuid:
            module.uuid = str(uuidlib.uuid4())
        elif not is_uuid(module.uuid):
            raise make_exception(ddl_err_invalid_uuid, id=module.id, uuid=module.uuid)
        module.uuid = normalize_uuid(module.uuid)
        if module.id:
            verify_node_identifier(module.id)
            module.add_uuidname(module.uuid, module.id)
        if not module.date:
            module.set_date_to_now()
        if module.label is None and module.id:
            module._set_child_node("label", Label(value=module.id))
        document = Document(DDLDocument(module))
        document.root_node.notify_node_changed()
        return self.add(document)

    def new_device(self, id: Optional[str] = None, label: Optional[str] = None,
                   provider: Optional[str] = None, uuid: Optional[str] = None) -> Document:
        """Create a new device module and add it to the collection."""
        return self.add_module(Device(id, label, provider, uuid))

    def new_behavior_set(self, id: Optional[str] = None, label: Optional[str] = None,
                         provider: Optional[str] = None, uuid: Optional[str] = None) -> Document:
        return self.add_module(BehaviorSet(id, label, provider, uuid))

    def new_language_set(self, id: Optional[str] = None, label: Optional[str] = None,
                         provider: Optional[str] = None, uuid: Optional[str] = None) -> Document:
        return self.add_module(LanguageSet(id, label, provider, uuid))

    def find_module_file(self, filename: PathType) -> Optional[Path]:
        """Find a module file.

        A rooted path is taken as is.  A relative path is tried in the current
        directory first, then in each of the module folders.

        :returns: the path of the first file found, or ``None``
        """
        path = Path(filename)
        if path.is_file():
            return path
        if path.is_absolute():
            return None
        for folder in self.module_folders:
            candidate = folder / path
            if candidate.is_file():
                return candidate
        return None

    def get_document_by_module_name(self, name: Optional[str]) -> Optional[Document]:
        """Get the document of the module with identifier (or UUID) ``name``."""
        if not name:
            return None
        if is_uuid(name):
            return self._documents.get(_uuid_urn(name))
        for document in self._documents.values():
            if document.name == name:
                return document
        return None

    def get_or_load_document_by_module_name(self, name: Optional[str]) -> Optional[Document]:
        """Get the document of a module, loading the module file if needed.

        :returns: the document, or ``None`` if the module file is not found
        :raises XmlDecodeError: the module file is not a valid DDL document
        """
        result = self.get_document_by_module_name(name)
        if result is None and name:
            path = self.find_module_file(f"{name}{self.default_extension}")
            if path is not None:
                result = self.load_document(path)
            else:
                logger.debug("no module file found for %s", name)
        return result

    def load_document(self, path: PathType) -> Document:
        """Read a DDL document from a file and add it to the collection.

        A document holding the same module is returned instead when it is
        present already.
        """
        path = Path(path)
        logger.debug("loading %s", path)
        ddl = Reader().read_file(path)
        module = ddl.module
        if module is None or not module.uuid:
            raise make_exception(ddl_err_empty_document, source=path)
        if not is_uuid(module.uuid):
            raise make_exception(ddl_err_invalid_uuid, id=module.id, uuid=module.uuid)
        present = self._documents.get(_uuid_urn(module.uuid))
        if present is not None:
            logger.warning("module %s of %s already loaded from %s", module.id, path, present.file_path)
            return present
        document = Document(ddl)
        document.file_path = path
        return self.add(document)

    def save_document(self, document: Document, path: Optional[PathType] = None):
        """Write a document to ``path``, or to the file it was loaded from."""
        path = Path(path) if path is not None else document.file_path
        if path is None:
            raise make_exception(ddl_err_empty_identifier, what="file path")
        Writer().write_file(document.root_node, path)
        document.file_path = path
        if document.module is not None:
            document.module.is_changed = False
        logger.debug("saved %s to %s", document.name, path)
