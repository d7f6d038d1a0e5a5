# Copyright 2021-2024 Nokia

import uuid

import pytest

from acnddl.behavior import ACNBASE_BSET
from acnddl.config import CollectionConfig
from acnddl.device import Device
from acnddl.document import Document, DocumentCollection
from acnddl.exceptions import DdlIntegrityError, DdlValidationError, ModuleResolutionError
from acnddl.node import DDLDocument

from conftest import ACNBASE_UUID, DEVICE_UUID


class TestAddModule:
    def test_uuid_is_generated(self, collection):
        document = collection.new_device("dev")
        assert uuid.UUID(document.module.uuid).version == 4
        assert document.identifier == uuid.UUID(document.module.uuid).urn

    def test_uuid_is_normalized(self, collection):
        document = collection.new_device("dev", uuid=DEVICE_UUID.upper())
        assert document.module.uuid == DEVICE_UUID

    def test_invalid_uuid(self, collection):
        with pytest.raises(DdlValidationError):
            collection.new_device("dev", uuid="not-a-uuid")

    def test_module_defaults(self, collection):
        device = collection.new_device("dev", uuid=DEVICE_UUID).device
        assert device.get_uuidname("dev").uuid == DEVICE_UUID
        assert device.get_label_text() == "dev"
        assert device.date is not None
        assert device.is_changed

    def test_given_label_is_kept(self, collection):
        device = collection.new_device("dev", "Test device").device
        assert device.get_label_text() == "Test device"

    def test_duplicate_module(self, collection):
        collection.new_device("dev", uuid=DEVICE_UUID)
        with pytest.raises(DdlIntegrityError):
            collection.new_device("dev2", uuid=DEVICE_UUID)

    def test_document_without_identifier(self, collection):
        with pytest.raises(DdlValidationError):
            collection.add(Document())


class TestDocument:
    def test_identity_follows_module(self):
        document = Document(DDLDocument(Device("dev", uuid=DEVICE_UUID)))
        assert document.name == "dev"
        assert document.identifier == f"urn:uuid:{DEVICE_UUID}"
        assert document.device is document.module
        assert document.behavior_set is None
        assert document.root_node.document is document

    def test_replacing_root_detaches_old_one(self):
        old = DDLDocument(Device("dev", uuid=DEVICE_UUID))
        document = Document(old)
        document.root_node = DDLDocument(Device("other", uuid=ACNBASE_UUID))
        assert old.document is None
        assert document.name == "other"


class TestLookup:
    def test_by_name_and_uuid(self, collection, acnbase):
        document = acnbase.get_document()
        assert collection.get_document_by_module_name(ACNBASE_BSET) is document
        assert collection.get_document_by_module_name(ACNBASE_UUID) is document
        assert collection.get_document_by_module_name(ACNBASE_UUID.upper()) is document
        assert collection.get_document_by_module_name("unknown") is None
        assert collection.get_document_by_module_name(None) is None

    def test_container_protocol(self, collection, acnbase):
        document = acnbase.get_document()
        assert len(collection) == 1
        assert document in collection
        assert document.identifier in collection
        assert list(collection) == [document]

    def test_remove(self, collection, acnbase):
        document = acnbase.get_document()
        version = collection.version
        collection.remove(document)
        assert len(collection) == 0
        assert document.collection is None
        assert collection.version == version + 1


class TestUUIDNameResolution:
    def test_resolve_by_name(self, device, acnbase):
        assert device.get_or_load_module_by_uuidname(ACNBASE_BSET) is acnbase
        assert device.get_or_load_module_by_uuidname(ACNBASE_UUID) is acnbase
        assert device.get_or_load_module_by_uuidname("unregistered") is None

    def test_match_module_identifier(self, device):
        assert device.match_module_identifier(ACNBASE_BSET, ACNBASE_UUID)
        assert device.match_module_identifier(ACNBASE_UUID, ACNBASE_BSET)
        assert not device.match_module_identifier(ACNBASE_BSET, DEVICE_UUID)

    def test_uuid_mismatch(self, collection, acnbase):
        device = collection.new_device("dev").device
        device.add_uuidname(str(uuid.uuid4()), ACNBASE_BSET)
        with pytest.raises(ModuleResolutionError):
            device.get_or_load_module_by_uuidname(ACNBASE_BSET)

    def test_missing_module(self, collection):
        device = collection.new_device("dev").device
        device.add_uuidname(str(uuid.uuid4()), "missing.bset")
        with pytest.raises(ModuleResolutionError):
            device.get_or_load_module_by_uuidname("missing.bset")

    def test_cache_is_invalidated_on_remove(self, collection, device, acnbase):
        assert device.get_or_load_module_by_uuidname(ACNBASE_BSET) is acnbase
        collection.remove(acnbase.get_document())
        with pytest.raises(ModuleResolutionError):
            device.get_or_load_module_by_uuidname(ACNBASE_BSET)

    def test_uuidname_is_registered_once(self, device):
        count = len(device.uuidnames)
        device.add_uuidname(ACNBASE_UUID, "other.name")
        device.add_uuidname(str(uuid.uuid4()), ACNBASE_BSET)
        assert len(device.uuidnames) == count


class TestModuleFiles:
    def test_load_on_demand(self, collection, acnbase, tmp_path):
        collection.save_document(acnbase.get_document(), tmp_path / "acnbase.bset.ddl.xml")
        other = DocumentCollection(module_folders=[tmp_path])
        device = other.new_device("dev").device
        device.add_uuidname(ACNBASE_UUID, ACNBASE_BSET)
        loaded = device.get_or_load_module_by_uuidname(ACNBASE_BSET)
        assert loaded is not acnbase
        assert loaded.uuid == ACNBASE_UUID
        assert loaded.get_behavior_def("limitMaxInc") is not None
        assert other.get_document_by_module_name(ACNBASE_BSET).file_path == tmp_path / "acnbase.bset.ddl.xml"

    def test_load_by_uuid_file_name(self, collection, acnbase, tmp_path):
        collection.save_document(acnbase.get_document(), tmp_path / f"{ACNBASE_UUID}.ddl.xml")
        other = DocumentCollection(module_folders=[tmp_path])
        document = other.get_or_load_document_by_module_name(ACNBASE_UUID)
        assert document.name == ACNBASE_BSET

    def test_loading_twice_returns_present_document(self, collection, acnbase, tmp_path):
        path = tmp_path / "acnbase.bset.ddl.xml"
        collection.save_document(acnbase.get_document(), path)
        other = DocumentCollection(module_folders=[])
        first = other.load_document(path)
        assert other.load_document(path) is first
        assert len(other) == 1

    def test_save_resets_changed(self, collection, acnbase, tmp_path):
        document = acnbase.get_document()
        assert document.is_changed
        collection.save_document(document, tmp_path / "acnbase.bset.ddl.xml")
        assert not document.is_changed
        assert document.file_path == tmp_path / "acnbase.bset.ddl.xml"

    def test_find_module_file(self, collection, tmp_path):
        (tmp_path / "x.ddl.xml").write_text("<DDL/>")
        collection.module_folders = [tmp_path / "missing", tmp_path]
        assert collection.find_module_file("x.ddl.xml") == tmp_path / "x.ddl.xml"
        assert collection.find_module_file("y.ddl.xml") is None
        assert collection.find_module_file(tmp_path / "y.ddl.xml") is None

    def test_default_extension_from_config(self, tmp_path):
        config = CollectionConfig(module_folders=[tmp_path], default_extension=".xml")
        collection = DocumentCollection(config=config)
        assert collection.module_folders == [tmp_path]
        assert collection.default_extension == ".xml"


class TestLanguageSet:
    @pytest.fixture
    def lset(self, collection):
        result = collection.new_language_set("dev.lset").language_set
        english = result.add_language("en")
        english.add_string("name", "Name")
        english.add_string("speed", "Speed")
        german = result.add_language("de", altlang="en")
        german.add_string("name", "Bezeichnung")
        return result

    def test_strings_and_altlang(self, lset):
        assert lset.get_string_text("name") == "Name"
        assert lset.get_string_text("name", "de") == "Bezeichnung"
        assert lset.get_string_text("speed", "de") == "Speed"
        assert lset.get_string_text("missing", "de") is None

    def test_add_language_errors(self, lset):
        with pytest.raises(DdlIntegrityError):
            lset.add_language("en")
        with pytest.raises(DdlIntegrityError):
            lset.add_language("fr", altlang="nl")

    def test_duplicate_string(self, lset):
        with pytest.raises(DdlIntegrityError):
            lset.get_language("en").add_string("name", "Other")

    def test_referenced_label(self, collection, lset):
        device = collection.new_device("dev").device
        device.add_uuidname(lset.uuid, "dev.lset")
        device.set_label_text(None, "dev.lset", "name")
        assert device.label.is_referenced_label()
        assert device.get_label_text() == "Name"
        assert device.get_label_text("de") == "Bezeichnung"

    def test_referenced_label_is_verified(self, collection, lset):
        device = collection.new_device("dev").device
        device.add_uuidname(lset.uuid, "dev.lset")
        device.set_label_text("Name", "dev.lset", "name")
        with pytest.raises(DdlIntegrityError):
            device.set_label_text("Other", "dev.lset", "speed")

    def test_label_of_unknown_language_set(self, collection):
        device = collection.new_device("dev").device
        device.set_label_text(None, "unknown.lset", "name")
        assert device.label.is_referenced_label()
        assert device.get_label_text() is None
        with pytest.raises(ModuleResolutionError):
            device.label.get_definition()

    def test_failed_verification_keeps_label(self, collection, lset):
        device = collection.new_device("dev", "Device").device
        device.add_uuidname(lset.uuid, "dev.lset")
        with pytest.raises(DdlIntegrityError):
            device.set_label_text("Other", "dev.lset", "speed")
        with pytest.raises(DdlIntegrityError):
            device.set_label_text("Name", "unknown.lset", "name")
        assert device.label.is_immediate_label()
        assert device.get_label_text() == "Device"

    def test_get_or_load_language_set(self, collection, lset):
        device = collection.new_device("dev.motor").device
        assert device.get_or_load_language_set() is None
        device.add_uuidname(lset.uuid, "dev.lset")
        assert device.get_or_load_language_set() is lset
