# Copyright 2021-2024 Nokia

import pytest

from acnddl.exceptions import DdlValidationError
from acnddl.identifier import (QualifiedName, convert_name_to_identifier, convert_to_basic_latin_xml_ncname,
                               convert_to_c_identifier, convert_xml_name_to_filename_string,
                               convert_xml_name_to_identifier, convert_xml_name_to_identifier_string,
                               is_basic_latin_xml_ncname, is_ncname, is_uuid, join_identifiers,
                               merge_overlapping_identifiers, normalize_uuid, verify_node_identifier)


class TestMergeOverlappingIdentifiers:
    def test_overlap_is_merged_once(self):
        assert merge_overlapping_identifiers("dev.motor", "motor.speed") == "dev.motor.speed"

    def test_full_identifier_overlaps_completely(self):
        assert merge_overlapping_identifiers("dev.motor", "dev.motor.speed") == "dev.motor.speed"

    def test_longest_overlap_wins(self):
        assert merge_overlapping_identifiers("a.b.a.b", "a.b.c") == "a.b.a.b.c"

    def test_no_overlap(self):
        assert merge_overlapping_identifiers("dev.motor", "speed") is None
        assert merge_overlapping_identifiers("dev.motor", "fan.speed") is None

    def test_overlap_requires_separator_in_base(self):
        assert merge_overlapping_identifiers("dev.xmotor", "motor.speed") is None


class TestJoinIdentifiers:
    def test_plain_concatenation(self):
        assert join_identifiers("dev", "speed") == "dev.speed"

    def test_overlap(self):
        assert join_identifiers("dev.motor", "motor.speed") == "dev.motor.speed"

    def test_none_contributes_nothing(self):
        assert join_identifiers(None, "speed") == "speed"
        assert join_identifiers("dev", None) == "dev"
        assert join_identifiers(None, None) is None


class TestVerifyIdentifier:
    def test_valid_identifier_is_normalized(self):
        assert verify_node_identifier(" dev.motor ") == "dev.motor"

    def test_identifier_may_start_with_low_line(self):
        assert verify_node_identifier("_1") == "_1"

    @pytest.mark.parametrize("id", ["1dev", "-dev", ".dev", "dev:motor", "dev motor"])
    def test_invalid_identifier(self, id):
        with pytest.raises(DdlValidationError):
            verify_node_identifier(id)

    def test_empty_identifier(self):
        with pytest.raises(DdlValidationError):
            verify_node_identifier("")

    def test_is_ncname(self):
        assert is_ncname("type.uint8")
        assert not is_ncname("acnbase.bset:level")
        assert not is_ncname(None)


class TestUUID:
    def test_canonical_uuid(self):
        assert is_uuid("71576eac-e94a-11dc-b664-0017316c497d")
        assert is_uuid("71576EAC-E94A-11DC-B664-0017316C497D")

    def test_not_a_uuid(self):
        assert not is_uuid("acnbase.bset")
        assert not is_uuid("71576eac-e94a-11dc-b664-0017316c497")
        assert not is_uuid("{71576eac-e94a-11dc-b664-0017316c497d}")

    def test_normalize(self):
        assert normalize_uuid("71576EAC-E94A-11DC-B664-0017316C497D") == "71576eac-e94a-11dc-b664-0017316c497d"
        assert normalize_uuid("Acnbase.bset") == "Acnbase.bset"


class TestQualifiedName:
    def test_split(self):
        assert QualifiedName.split("acnbase.bset:level") == ("acnbase.bset", "level")
        assert QualifiedName.split("level") == (None, "level")
        assert QualifiedName.split(None) == (None, None)

    def test_equality_with_string(self):
        qname = QualifiedName.from_string("cia:CANopen")
        assert qname == "cia:CANopen"
        assert qname != "CANopen"
        assert str(qname) == "cia:CANopen"
        assert qname.prefix == "cia"
        assert qname.name == "CANopen"

    def test_hash(self):
        assert len({QualifiedName("a", "b"), QualifiedName.from_string("a:b")}) == 1

    def test_is_valid(self):
        assert QualifiedName.from_string("acnbase.bset:type.uint8").is_valid()
        assert not QualifiedName.from_string("acnbase.bset:1x").is_valid()


class TestConversions:
    def test_name_to_identifier(self):
        assert convert_name_to_identifier("Motor Speed") == "MotorSpeed"
        assert convert_name_to_identifier("3 phase") == "_3_phase"

    def test_basic_latin_ncname(self):
        assert convert_to_basic_latin_xml_ncname("Motor Speed") == "MotorSpeed"
        assert convert_to_basic_latin_xml_ncname("a b") == "a_b"
        assert convert_to_basic_latin_xml_ncname(".abc") == "_.abc"
        assert convert_to_basic_latin_xml_ncname("café") == "caf_"
        assert is_basic_latin_xml_ncname("dev.motor-1")
        assert not is_basic_latin_xml_ncname("café")

    def test_xml_name_conversions(self):
        assert convert_xml_name_to_identifier("cia:CANopen-x.y") == "cia_CANopen_x_y"
        assert convert_xml_name_to_identifier_string("cia:CANopen-x.y") == "cia_CANopen_x.y"
        assert convert_xml_name_to_filename_string("cia:CANopen-x.y") == "cia_CANopen-x.y"

    def test_c_identifier(self):
        assert convert_to_c_identifier("3d-view") == "three_d_view"
        assert convert_to_c_identifier("__motor.speed") == "motor_speed"

    def test_c_identifier_empty(self):
        with pytest.raises(DdlValidationError):
            convert_to_c_identifier("__")
