# Copyright 2021-2024 Nokia

import logging

import pytest
from lxml import etree

from acnddl import canopen
from acnddl.behavior import ACNBASE_BSET, DMS_BSET
from acnddl.device import IncludeDevice, PropertyPointer, PropertyValueType, ValueDataType
from acnddl.exceptions import XmlDecodeError
from acnddl.xml_io import Reader, Writer

from conftest import ACNBASE_UUID, DEVICE_UUID

DDL_HEADER = ('<DDL xmlns="http://www.esta.org/acn/namespace/ddl/2008/" '
              'xmlns:html="http://www.w3.org/1999/xhtml" version="1.1">')

BEHAVIORSET_XML = DDL_HEADER + f"""
  <behaviorset xml:id="test.bset" UUID="9a7c5e2f-0d8b-4d6c-a1e3-5b7f9d1c3e5a" provider="http://example.com" date="2024-01-02">
    <UUIDname name="acnbase.bset" UUID="{ACNBASE_UUID}"/>
    <label>Test behaviors</label>
    <!-- speed of a motor -->
    <behaviordef name="speed">
      <label>Speed</label>
      <refines set="acnbase.bset" name="level"/>
      <section>
        <hd>Speed</hd>
        <p>Motor speed in <html:em>rpm</html:em>.</p>
      </section>
    </behaviordef>
  </behaviorset>
</DDL>
"""

LANGUAGESET_XML = DDL_HEADER + """
  <languageset xml:id="dev.lset" UUID="1d3f5b7a-9c2e-4f60-8b1d-3e5a7c9f1b2d">
    <label>Strings</label>
    <language lang="en">
      <label>English</label>
      <string key="name">Name</string>
    </language>
    <language lang="de" altlang="en">
      <string key="speed">Tempo</string>
    </language>
  </languageset>
</DDL>
"""

DEVICE_XML = DDL_HEADER + """
  <device xml:id="dev" UUID="{uuid}">
    <label>Device</label>
    <property xml:id="dev.speed" valuetype="{valuetype}">
      <label>Speed</label>
      <foo/>
    </property>
  </device>
</DDL>
"""


@pytest.fixture
def described(device):
    speed = device.get_or_add_property("dev.speed", PropertyValueType.network, "Speed")
    speed.add_behavior(DMS_BSET, "motorSpeed")
    speed.array_size = 2
    speed.add_or_update_sub_property(ACNBASE_BSET, "limit", "max", ValueDataType.uint, "1000")
    canopen.set_protocol(speed, 0x2000, 1, node_id=5)
    device.add_include_device("dev.fan", ACNBASE_UUID, "Fan")
    device.add_property_pointer("dev.ptr", "dev.speed")
    return device


class TestRoundTrip:
    def test_device(self, described):
        text = Writer().write_string(described.get_ddl_document())
        ddl = Reader().read_string(text)
        device = ddl.device
        assert device.id == "dev"
        assert device.uuid == DEVICE_UUID
        assert device.date == described.date
        assert device.get_label_text() == "Test device"
        assert [uuidname.name for uuidname in device.uuidnames] == ["dev", ACNBASE_BSET, DMS_BSET]
        assert [useprotocol.name for useprotocol in device.useprotocols] == ["CANopen"]
        assert ddl.xml_namespaces == {"cia": canopen.CANOPEN_DEFINITION.namespace}

    def test_properties(self, described):
        device = Reader().read_string(Writer().write_string(described.get_ddl_document())).device
        speed = device.get_property("dev.speed")
        assert speed.valuetype is PropertyValueType.network
        assert speed.array_size == 2
        assert speed.get_label_text() == "Speed"
        assert str(speed.behaviors[0]) == "acn.dms.bset:motorSpeed"
        limit = device.get_property("dev.speed.max")
        assert limit.parent is speed
        assert limit.values[0].type is ValueDataType.uint
        assert limit.get_value_string() == "1000"
        element = speed.get_protocol("CANopen").get_element("cia:CANopen")
        assert element.get("index") == "0x2000"
        assert element.get("node") == "5"

    def test_items(self, described):
        device = Reader().read_string(Writer().write_string(described.get_ddl_document())).device
        fan = device.get_identified_node("dev.fan")
        assert isinstance(fan, IncludeDevice)
        assert fan.uuid == ACNBASE_UUID
        assert fan.get_label_text() == "Fan"
        pointer = device.get_identified_node("dev.ptr")
        assert isinstance(pointer, PropertyPointer)
        assert pointer.reference == "dev.speed"

    def test_written_document(self, described):
        root = etree.fromstring(Writer().write_string(described.get_ddl_document()))
        assert root.tag == "{http://www.esta.org/acn/namespace/ddl/2008/}DDL"
        assert root.get("version") == "1.1"
        device = root[0]
        assert device.get("{http://www.w3.org/XML/1998/namespace}id") == "dev"
        assert device.get("UUID") == DEVICE_UUID
        assert [etree.QName(child).localname for child in device] == [
            "UUIDname", "UUIDname", "UUIDname", "label", "useprotocol", "property", "includedev",
            "propertypointer",
        ]


class TestReader:
    def test_behaviorset(self):
        ddl = Reader().read_string(BEHAVIORSET_XML)
        bset = ddl.behavior_set
        assert bset.id == "test.bset"
        assert bset.provider == "http://example.com"
        assert bset.date == "2024-01-02"
        assert bset.get_label_text() == "Test behaviors"
        assert bset.get_uuidname(ACNBASE_BSET).uuid == ACNBASE_UUID
        assert ddl.xml_namespaces == {}
        definition = bset.get_behavior_def("speed")
        assert definition.parent is bset
        assert definition.get_label_text() == "Speed"
        assert str(definition.refines[0]) == "acnbase.bset:level"

    def test_section_content_is_kept(self):
        bset = Reader().read_string(BEHAVIORSET_XML).behavior_set
        section = bset.get_behavior_def("speed").sections[0]
        assert section.hd == "Speed"
        assert [etree.QName(element).localname for element in section.content] == ["p"]
        text = Writer().write_string(bset.get_ddl_document())
        assert b"<html:em>rpm</html:em>" in text
        again = Reader().read_string(text).behavior_set
        assert again.get_behavior_def("speed").sections[0].hd == "Speed"

    def test_languageset(self):
        lset = Reader().read_string(LANGUAGESET_XML).language_set
        assert [language.lang for language in lset.languages] == ["en", "de"]
        assert lset.get_language("en").get_label_text() == "English"
        assert lset.get_language("de").altlang == "en"
        assert lset.get_string_text("speed", "de") == "Tempo"
        assert lset.get_string_text("name", "de") == "Name"

    def test_dom_nodes(self):
        ddl = Reader().read_string(DEVICE_XML.format(uuid=DEVICE_UUID, valuetype="network"))
        assert etree.QName(ddl.dom_node).localname == "DDL"
        assert ddl.device.dom_node is ddl.dom_node[0]
        assert ddl.device.get_property("dev.speed").dom_node is ddl.dom_node[0][1]

    def test_unknown_element_is_ignored(self, caplog):
        with caplog.at_level(logging.WARNING, logger="acnddl.xml_io"):
            ddl = Reader().read_string(DEVICE_XML.format(uuid=DEVICE_UUID, valuetype="network"))
        assert ddl.device.get_property("dev.speed") is not None
        assert "ignoring element foo" in caplog.text

    def test_invalid_attribute(self):
        with pytest.raises(XmlDecodeError):
            Reader().read_string(DEVICE_XML.format(uuid=DEVICE_UUID, valuetype="bogus"))

    @pytest.mark.parametrize("text", [
        "<DDL",
        '<device xmlns="http://www.esta.org/acn/namespace/ddl/2008/"/>',
        DDL_HEADER + "</DDL>",
        DDL_HEADER + "<device/><device/></DDL>",
        DDL_HEADER + "<module/></DDL>",
    ])
    def test_invalid_document(self, text):
        with pytest.raises(XmlDecodeError):
            Reader().read_string(text)

    def test_missing_file(self, tmp_path):
        with pytest.raises(XmlDecodeError):
            Reader().read_file(tmp_path / "missing.ddl.xml")

    def test_file_round_trip(self, described, tmp_path):
        path = tmp_path / "dev.ddl.xml"
        Writer().write_file(described.get_ddl_document(), path)
        assert path.read_bytes().startswith(b"<?xml version='1.0' encoding='UTF-8'?>")
        assert Reader().read_file(path).device.get_property("dev.speed.max") is not None
