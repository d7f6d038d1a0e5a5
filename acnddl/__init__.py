# Copyright 2021-2024 Nokia

__all__ = (
    "identifier", "node", "behavior", "language", "device", "appliance",
    "traversal", "document", "xml_io", "config", "datatypes", "canopen",
    "exceptions",
)

__doc__ = """Library for modelling ANSI E1.17 (ACN) Device Description Language modules."""

__version__ = "1.0.0"
