#!/usr/bin/env python3

### show_network_properties.py
#   Copyright 2021-2024 Nokia
###

"""
Show the network properties of a device.

    usage: python show_network_properties.py <device module> [<config file>]

The device module is given by name (e.g. acme.dimmer) or UUID; it is loaded,
with every module it refers to, from the module folders of the config file
and of the ACNDDL_MODULE_PATH environment variable.  The device is compiled
into an appliance and every network property is printed with its data type
and, where present, its CANopen object dictionary entry.
"""

# Import sys for parsing arguments and returning specific exit codes
import sys

# Import logging to show what is loaded
import logging

from acnddl.appliance import NetworkPropertyFilter
from acnddl.canopen import get_protocol
from acnddl.config import load_config
from acnddl.datatypes import DataType
from acnddl.document import DocumentCollection
from acnddl.exceptions import DdlIntegrityError, XmlDecodeError


def usage():
    print("usage: python show_network_properties.py <device module> [<config file>]")
    sys.exit(2)


def data_type_name(prop):
    try:
        return DataType(prop).type_info.name
    except DdlIntegrityError:
        return "-"


def main():
    if len(sys.argv) not in (2, 3):
        usage()
    logging.basicConfig(level=logging.INFO)
    config = load_config(sys.argv[2] if len(sys.argv) == 3 else None)
    docs = DocumentCollection(config=config)
    try:
        document = docs.get_or_load_document_by_module_name(sys.argv[1])
    except XmlDecodeError as error:
        print(f"Failed to load {sys.argv[1]}: {error}")
        sys.exit(1)
    if document is None or document.device is None:
        print(f"Device module {sys.argv[1]} not found")
        sys.exit(1)

    device = document.device
    print(f"{device.get_label_text(config.language)} ({device.uuid})")
    print("=" * 80)
    print(f"{'Property':<48} {'Type':<10} {'CANopen':<20}")
    print("-" * 80)
    for prop in device.get_appliance().get_node_iterator(NetworkPropertyFilter()):
        protocol = get_protocol(prop)
        address = f"{protocol.node_id}:0x{protocol.index:04X}.{protocol.sub_index}" if protocol else ""
        print(f"{prop.full_id:<48} {data_type_name(prop):<10} {address:<20}")
    print("=" * 80)


if __name__ == "__main__":
    main()
