# Copyright 2021-2024 Nokia

import pytest

from acnddl import canopen
from acnddl.device import PropertyValueType
from acnddl.exceptions import DdlIntegrityError


@pytest.fixture
def speed(device):
    return device.get_or_add_property("dev.speed", PropertyValueType.network)


class TestSetProtocol:
    def test_attributes(self, device, speed):
        protocol = canopen.set_protocol(speed, 0x2000, 1, node_id=5, pdo="tx")
        assert protocol is speed.get_protocol("CANopen")
        element = protocol.get_element("cia:CANopen")
        assert dict(element.attrib) == {"index": "0x2000", "sub": "1", "access": "rw", "pdo": "tx", "node": "5"}
        assert device.get_use_protocol("CANopen") is not None
        assert device.get_ddl_document().xml_namespaces["cia"] == canopen.CANOPEN_DEFINITION.namespace

    def test_array_elements(self, speed):
        speed.array_size = 2
        canopen.set_protocol(speed, 0x2000, 1, array_index=0)
        protocol = canopen.set_protocol(speed, 0x2000, 2, array_index=1)
        assert [element.get("sub") for element in protocol.elements] == ["1", "2"]

    def test_verify(self, speed):
        canopen.set_protocol(speed, 0x2000, 1)
        canopen.set_protocol(speed, 0x2000, 1, verify=True)
        with pytest.raises(DdlIntegrityError):
            canopen.set_protocol(speed, 0x2001, 1, verify=True)


class TestGetProtocol:
    def test_binding(self, speed):
        canopen.set_protocol(speed, 0x2000, 1, node_id=5, pdo="tx")
        binding = canopen.get_protocol(speed)
        assert binding.node_id == 5
        assert binding.index == 0x2000
        assert binding.sub_index == 1
        assert binding.sdo_access == "rw"
        assert binding.pdo_access == "tx"
        assert repr(binding) == "CANopenProtocol('dev.speed', 5, 0x2000.1)"

    def test_defaults(self, speed):
        protocol = speed.get_or_add_protocol("CANopen")
        protocol.add_or_update_attributes("cia:CANopen", {"index": "0x1018", "access": ""},
                                          canopen.CANOPEN_DEFINITION.namespace)
        binding = canopen.get_protocol(speed)
        assert binding.node_id == 1
        assert binding.sub_index == 0
        assert binding.sdo_access == "rw"
        assert binding.pdo_access == "no"

    def test_no_protocol(self, speed):
        assert canopen.get_protocol(speed) is None

    def test_no_attributes_element(self, speed):
        speed.get_or_add_protocol("CANopen")
        assert canopen.get_protocol(speed) is None
        with pytest.raises(DdlIntegrityError):
            canopen.CANopenProtocol(speed)

    def test_invalid_attribute(self, speed):
        canopen.set_protocol(speed, 0x2000)
        speed.get_protocol("CANopen").get_element("cia:CANopen").set("sub", "0x100")
        assert canopen.get_protocol(speed) is None
