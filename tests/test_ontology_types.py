"""
Tests for resource type chains and the schema registry.
"""

from dataclasses import dataclass
from typing import Optional, Set

import pytest

from ontology import (
    ROOT_TYPE, SchemaError, FieldKind, message, resource_type, schema_of,
    registered_resource_types, find_resource_type, resource_types, has_type,
    VirtualMachine, ObjectStorage, ObjectStorageService, Account, GeoLocation,
    SecurityAdvisoryDocument
)


class TestResourceTypes:
    """Type chains are read from the schema, never from field values"""

    def test_zero_value_virtual_machine(self):
        assert resource_types(VirtualMachine()) == ["VirtualMachine", "Compute", "CloudResource", "Resource"]

    def test_same_variant_same_chain(self):
        a = ObjectStorage(id="a", name="first", public_access=True)
        b = ObjectStorage(id="b", labels={"env": "prod"})
        assert resource_types(a) == resource_types(b)

    def test_chain_available_without_instance(self):
        assert resource_types(Account) == ["Account", "Infrastructure", "Resource"]

    def test_every_variant_ends_with_root(self):
        variants = registered_resource_types()
        assert variants
        for cls in variants:
            chain = resource_types(cls)
            assert chain[0] == cls.__name__
            assert chain[-1] == ROOT_TYPE

    def test_deep_chain(self):
        assert resource_types(ObjectStorageService()) == [
            "ObjectStorageService", "StorageService", "NetworkService", "Networking", "CloudResource", "Resource"
        ]

    def test_message_without_chain_is_empty(self):
        assert resource_types(GeoLocation(region="eu-west-1")) == []

    def test_unregistered_value_is_empty(self):
        assert resource_types(object()) == []

    def test_returns_fresh_list(self):
        vm = VirtualMachine()
        resource_types(vm).append("Mutated")
        assert "Mutated" not in resource_types(vm)


class TestHasType:

    @pytest.mark.parametrize("type_name", ["VirtualMachine", "Compute", "CloudResource", "Resource"])
    def test_members_of_chain(self, type_name):
        assert has_type(VirtualMachine(), type_name)

    @pytest.mark.parametrize("type_name", ["Storage", "virtualMachine", "resource", ""])
    def test_exact_match_only(self, type_name):
        assert not has_type(VirtualMachine(), type_name)

    def test_consistent_with_chain(self):
        doc = SecurityAdvisoryDocument(id="doc")
        for type_name in ("SecurityAdvisoryDocument", "Document", "Resource", "CloudResource"):
            assert has_type(doc, type_name) == (type_name in resource_types(doc))


class TestRegistry:

    def test_scoped_registration(self, register_resource):
        @dataclass
        class Scratch:
            id: str = ""

        register_resource(Scratch, "Scratch", "Resource")
        assert find_resource_type("Scratch") is Scratch

    def test_registered_variants(self):
        assert sorted(cls.__name__ for cls in registered_resource_types()) == [
            "Account", "BlockStorage", "FileStorage", "LoadBalancer", "NetworkInterface",
            "ObjectStorage", "ObjectStorageService", "ResourceGroup", "SecurityAdvisoryDocument",
            "VirtualMachine", "VirtualNetwork",
        ]

    def test_find_resource_type(self):
        assert find_resource_type("VirtualMachine") is VirtualMachine
        assert find_resource_type("GeoLocation") is None
        assert find_resource_type("Unknown") is None

    def test_fields_in_declaration_order(self):
        names = [f.name for f in schema_of(VirtualMachine).fields]
        assert names[:7] == ["id", "name", "description", "creation_time", "labels", "parent_id", "raw"]
        assert names.index("network_interface_ids") < names.index("block_storage_ids")

    def test_field_metadata(self):
        schema = schema_of(VirtualMachine)
        assert schema.get_field("block_storage_ids").json_name == "blockStorageIds"
        assert schema.get_field("block_storage_ids").repeated
        assert schema.get_field("creation_time").kind is FieldKind.TIMESTAMP
        assert schema.get_field("labels").kind is FieldKind.MAP
        assert schema.get_field("boot_logging").kind is FieldKind.MESSAGE
        assert schema.get_field("unknown") is None

    def test_chain_must_end_with_root(self):
        with pytest.raises(SchemaError):
            resource_type("Orphan", "CloudResource")

    def test_chain_must_start_with_class_name(self):
        with pytest.raises(SchemaError):
            @resource_type("Something", "Resource")
            @dataclass
            class Misnamed:
                id: str = ""

    def test_unsupported_field_type(self):
        with pytest.raises(SchemaError):
            @message
            @dataclass
            class WithSet:
                values: Optional[Set[str]] = None

    def test_nested_message_must_be_registered(self):
        @dataclass
        class Unregistered:
            value: str = ""

        with pytest.raises(SchemaError):
            @message
            @dataclass
            class Holder:
                inner: Optional[Unregistered] = None

    def test_must_be_dataclass(self):
        with pytest.raises(SchemaError):
            @message
            class Plain:
                pass
