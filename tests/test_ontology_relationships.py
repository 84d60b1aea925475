"""
Tests for relationship extraction.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

import pytest

from ontology import (
    Relationship, RelationshipNaming, message, related, resource_ids,
    VirtualMachine, ObjectStorage, ObjectStorageService, NetworkInterface, Account, Backup, BlockStorage
)
from ontology.resources import ResourceMixin


@dataclass
class CuratedStorage(ResourceMixin):
    id: str = ""
    name: str = ""
    creation_time: Optional[datetime] = None
    parent_id: Optional[str] = None
    raw: str = ""
    replica_ids: List[str] = field(default_factory=list)

    def related(self) -> List[str]:
        return list(self.replica_ids)


@message
@dataclass
class BareReference:
    _id: str = ""


@message
@dataclass
class MixedReferences:
    count_id: int = 0
    labels_id: Dict[str, str] = field(default_factory=dict)
    backup_id: Optional[Backup] = None
    owner_id: str = ""


class TestRelated:

    def test_object_storage_parent(self):
        storage = ObjectStorage(id="some-id", name="some-name", parent_id="some-storage-account-id", raw="{}")
        assert related(storage) == [Relationship(property="parent", value="some-storage-account-id")]

    def test_empty_scalar_is_skipped(self):
        assert related(ObjectStorage(id="some-id", parent_id="")) == []
        assert related(ObjectStorage(id="some-id")) == []

    def test_collection_fans_out_in_order(self):
        vm = VirtualMachine(id="vm", block_storage_ids=["a", "b"])
        assert related(vm) == [
            Relationship("block_storage", "a"),
            Relationship("block_storage", "b"),
        ]

    def test_collection_elements_are_not_filtered(self):
        vm = VirtualMachine(id="vm", block_storage_ids=["a", ""])
        assert related(vm) == [
            Relationship("block_storage", "a"),
            Relationship("block_storage", ""),
        ]

    def test_declaration_order(self):
        vm = VirtualMachine(
            id="vm",
            parent_id="vpc",
            network_interface_ids=["eni"],
            block_storage_ids=["vol"],
        )
        assert [r.property for r in related(vm)] == ["parent", "network_interface", "block_storage"]

    def test_optional_scalar_reference(self):
        interface = NetworkInterface(id="eni", network_service_id="lb")
        assert related(interface) == [Relationship("network_service", "lb")]

    def test_service_references(self):
        service = ObjectStorageService(id="https://b.s3.eu-west-1.amazonaws.com", parent_id="acc", storage_ids=["bucket"])
        assert related(service) == [Relationship("parent", "acc"), Relationship("storage", "bucket")]

    def test_non_string_fields_are_skipped(self):
        refs = MixedReferences(count_id=3, labels_id={"a": "b"}, backup_id=Backup(storage_id="s"), owner_id="me")
        assert related(refs) == [Relationship("owner", "me")]

    def test_nested_messages_are_not_searched(self):
        volume = BlockStorage(id="vol", backups=[Backup(enabled=True, storage_id="vault")])
        assert related(volume) == []

    def test_bare_suffix_yields_empty_property(self):
        assert related(BareReference(_id="x")) == [Relationship("", "x")]

    def test_idempotent(self):
        vm = VirtualMachine(id="vm", parent_id="vpc", block_storage_ids=["a"])
        assert related(vm) == related(vm)

    def test_unregistered_value(self):
        assert related(object()) == []


class TestCuratedRelationships:

    @pytest.fixture(autouse=True)
    def curated_storage(self, register_resource):
        register_resource(CuratedStorage, "CuratedStorage", "Storage", "CloudResource", "Resource")

    def test_curated_list_takes_precedence(self):
        storage = CuratedStorage(id="s", parent_id="account", replica_ids=["r1", "r2"])
        assert related(storage) == [Relationship("related", "r1"), Relationship("related", "r2")]

    def test_curated_empty_values_are_skipped(self):
        assert related(CuratedStorage(id="s", replica_ids=["", "r1"])) == [Relationship("related", "r1")]


class TestRelationshipNaming:

    def test_default_suffixes(self):
        naming = RelationshipNaming()
        assert naming.property_for("parent_id") == "parent"
        assert naming.property_for("block_storage_ids") == "block_storage"
        assert naming.property_for("identity") is None
        assert naming.property_for("name") is None

    def test_custom_suffix(self):
        naming = RelationshipNaming(suffix="_ref", collection_suffix="_refs")
        storage = ObjectStorage(id="s", parent_id="account")
        assert related(storage, naming) == []
        assert naming.property_for("owner_ref") == "owner"


class TestResourceIds:

    def test_empty_input(self):
        ids = resource_ids([])
        assert ids == []
        assert ids is not None

    def test_keeps_order(self):
        assert resource_ids([Account(id="test"), Account(id="test2")]) == ["test", "test2"]

    def test_no_deduplication(self):
        assert resource_ids([Account(id="a"), Account(id="a")]) == ["a", "a"]
