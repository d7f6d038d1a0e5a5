# Copyright 2021-2024 Nokia

from .exceptions import *
from .exceptions import make_exception

# identifiers and names
ddl_err_empty_identifier = (DdlValidationError, "empty {what}")
ddl_err_invalid_identifier = (DdlValidationError, "invalid identifier '{id}': not an XML NCName")
ddl_err_invalid_nmtoken = (DdlValidationError, "invalid {what} '{value}': not an XML NMTOKEN")
ddl_err_invalid_element_name = (DdlValidationError, "invalid element name '{name}'")
ddl_err_module_not_registered = (DdlValidationError, "module '{id}' not registered in UUIDNames of module {module}")
ddl_err_invalid_uuid = (DdlValidationError, "Module {id} has invalid UUID {uuid}")
ddl_err_c_identifier_empty = (DdlValidationError, "empty identifier after conversion of '{name}'")

# labels and languages
ddl_err_label_no_languageset = (DdlValidationError, "label {id}: a referenced label requires a languageset")
ddl_err_label_reference_not_found = (DdlIntegrityError, "label {id} reference '{set}:{key}({lang})' not found")
ddl_err_label_reference_mismatch = (DdlIntegrityError, "label {id} reference '{set}:{key}({lang})' = '{old}' is not equal to '{new}'")
ddl_err_language_present = (DdlIntegrityError, "Language {lang} already present in languageset {id}")
ddl_err_altlang_missing = (DdlIntegrityError, "Alternative language {altlang} not present in languageset {id}")
ddl_err_string_present = (DdlIntegrityError, "string {key} already specified for language {lang}")
ddl_err_not_a_languageset = (ModuleResolutionError, "invalid language set reference '{set}': not an existing module")

# module references
ddl_err_cannot_find_module = (ModuleResolutionError, "cannot find module '{name}' ({uuid})")
ddl_err_module_uuid_mismatch = (ModuleResolutionError, "file '{file}' contains module '{actual}' rather than '{expected}'")
ddl_err_not_a_behaviorset = (ModuleResolutionError, "invalid behavior reference '{set}:{name}': not a behaviorset")
ddl_err_behaviorset_not_found = (ModuleResolutionError, "behaviorset '{set}' not found")
ddl_err_behavior_not_found = (ModuleResolutionError, "behavior '{name}' not found in set '{set}'")
ddl_err_not_a_device = (ModuleResolutionError, "invalid device reference '{uuid}': not an existing device module")
ddl_err_include_cycle = (DdlIntegrityError, "includedev {id} includes device {device} again: {path}")
ddl_err_root_already_attached = (InvalidStateError, "DDL root node already attached to a Document")
ddl_err_unknown_module_element = (XmlDecodeError, "unexpected module element '{tag}' in DDL document")
ddl_err_no_ddl_root = (XmlDecodeError, "document root element '{tag}' is not a DDL element")
ddl_err_xml_parse = (XmlDecodeError, "cannot parse '{source}': {reason}")
ddl_err_document_present = (DdlIntegrityError, "collection already holds a document {urn} ({name})")
ddl_err_empty_document = (XmlDecodeError, "DDL document {source} holds no module")
ddl_err_invalid_attribute = (XmlDecodeError, "invalid value '{value}' of attribute {name} in element {tag}")

# properties
ddl_err_node_exists = (DdlIntegrityError, "{kind} '{owner}' already has a child node '{id}'")
ddl_err_valuetype_mismatch = (DdlIntegrityError, "property '{id}' has valuetype '{actual}' in stead of '{expected}'")
ddl_err_behavior_present = (DdlIntegrityError, "property {id} has behavior '{set}:{name}' while it should not")
ddl_err_behavior_conflict = (DdlIntegrityError, "property {id} has behavior '{set}:{name}', while it should have '{req_set}:{req_name}'")
ddl_err_subproperty_not_immediate = (DdlIntegrityError, "existing subproperty '{id}' for behavior: '{set}:{name}' has not immediate value type")
ddl_err_subproperty_missing_behavior = (DdlIntegrityError, "existing subproperty '{id}' does not have the required behavior: '{set}:{name}'")
ddl_err_subproperty_value = (DdlIntegrityError, "missing value of immediate subproperty '{id}', or invalid ValueDataType '{type}'")
ddl_err_value_not_immediate = (DdlIntegrityError, "cannot add value to property {id} of type {valuetype}")
ddl_err_value_index = (IndexError, "value index {index} invalid for property {id}")
ddl_err_value_format = (DdlValidationError, "invalid {type} value format: {value}")
ddl_err_value_mismatch = (DdlIntegrityError, "immediate '{type}' value is '{old}', expected '{new}'")
ddl_err_empty_pointer_reference = (DdlValidationError, "empty property pointer reference")

# protocols
ddl_err_empty_protocol_name = (DdlValidationError, "empty protocol name")
ddl_err_empty_element = (DdlValidationError, "empty element node")
ddl_err_missing_protocol_element = (DdlIntegrityError, "missing protocol specification '{name}'")
ddl_err_protocol_attribute_mismatch = (DdlIntegrityError, "protocol {name} specification '{key}' value mismatch: '{value}', expected '{expected}'")

# appliance
ddl_err_invalid_child_type = (DdlIntegrityError, "property child node of invalid type {type}")
ddl_err_property_pointer = (UnsupportedFeatureError, "cannot compile propertypointer '{id}' -> '{ref}': property pointers are not supported")

# traversal
ddl_err_iterator_detached = (InvalidStateError, "NodeIterator has no root node")
ddl_err_current_node_none = (InvalidStateError, "currentNode cannot be None")

# data types
ddl_err_no_datatype = (DdlIntegrityError, "no datatype found for property '{id}'")
ddl_err_unsupported_datatype = (DdlIntegrityError, "invalid or unsupported datatype behavior '{behavior}' of property '{id}'")
ddl_err_conversion_failed = (DataConversionError, "conversion of '{value}' to type {type} failed")
ddl_err_conversion_not_implemented = (UnsupportedFeatureError, "conversion to type {type} not implemented")
ddl_err_variable_size = (UnsupportedFeatureError, "type {type} has a variable size")
ddl_err_property_no_protocol = (DdlIntegrityError, "property '{id}' has no protocol '{name}'")
ddl_err_protocol_no_element = (DdlIntegrityError, "property '{id}' has protocol '{name}' without attributes element '{qname}'")
