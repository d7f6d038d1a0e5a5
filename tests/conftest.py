# Copyright 2021-2024 Nokia

import pytest

from acnddl.behavior import ACNBASE_BSET, DMS_BSET
from acnddl.document import DocumentCollection

ACNBASE_UUID = "71576eac-e94a-11dc-b664-0017316c497d"
DMS_UUID = "3e2b2fd8-95a5-4a5b-b8c7-2a2b35d1b0a1"
DEVICE_UUID = "5f1b2a2c-6e3d-4c4b-9d6e-7a8b9c0d1e2f"

ACNBASE_BEHAVIORS = (
    "constant", "persistent", "volatile", "level", "binObject", "limit",
    "limitMaxInc", "initializer", "type.unsigned.integer",
    "type.signed.integer", "type.float", "type.string", "type.boolean",
)

DMS_TYPES = (
    ("type.uint8", "type.unsigned.integer"),
    ("type.uint16", "type.unsigned.integer"),
    ("type.int16", "type.signed.integer"),
    ("type.float32", "type.float"),
    ("type.string", "type.string"),
    ("type.boolean", "type.boolean"),
)


@pytest.fixture
def collection():
    return DocumentCollection(module_folders=[])


@pytest.fixture
def acnbase(collection):
    bset = collection.new_behavior_set(ACNBASE_BSET, "ACN base behaviors", uuid=ACNBASE_UUID).behavior_set
    for name in ACNBASE_BEHAVIORS:
        bset.add_behavior_def(name)
    bset.get_behavior_def("limitMaxInc").add_refines(ACNBASE_BSET, "limit")
    return bset


@pytest.fixture
def dms(collection, acnbase):
    bset = collection.new_behavior_set(DMS_BSET, "DMS behaviors", uuid=DMS_UUID).behavior_set
    bset.add_uuidname(ACNBASE_UUID, ACNBASE_BSET)
    for name, base in DMS_TYPES:
        bset.add_behavior_def(name).add_refines(ACNBASE_BSET, base)
    bset.add_behavior_def("motorSpeed").add_refines(DMS_BSET, "type.uint16")
    bset.add_behavior_def("type.unknown")
    return bset


@pytest.fixture
def device(collection, acnbase, dms):
    result = collection.new_device("dev", "Test device", uuid=DEVICE_UUID).device
    result.add_uuidname(ACNBASE_UUID, ACNBASE_BSET)
    result.add_uuidname(DMS_UUID, DMS_BSET)
    return result
