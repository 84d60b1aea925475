"""
Tests for discovery configuration and resource type filters.
"""

import json
from pathlib import Path

import pytest

from core.config import DiscoveryConfig
from core.resource_config import ResourceTypeConfig, initialize_resource_config
from ontology import VirtualMachine, BlockStorage, ObjectStorage, ObjectStorageService, Account


class TestDiscoveryConfig:

    def test_defaults(self):
        config = DiscoveryConfig()

        assert config.output_formats == ["json"]
        assert config.max_workers == 4
        assert config.region is None
        assert config.should_export_format("json")

    def test_region_from_env(self, monkeypatch):
        monkeypatch.setenv("AWS_DEFAULT_REGION", "ap-south-1")
        assert DiscoveryConfig().region == "ap-south-1"

    def test_explicit_region_wins(self, monkeypatch):
        monkeypatch.setenv("AWS_REGION", "ap-south-1")
        assert DiscoveryConfig(region="eu-west-1").region == "eu-west-1"

    def test_log_level_from_env(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "debug")
        config = DiscoveryConfig()

        assert config.log_level == "DEBUG"

    def test_workers_from_env(self, monkeypatch):
        monkeypatch.setenv("CLOUD_DISCOVERY_MAX_WORKERS", "8")
        assert DiscoveryConfig().max_workers == 8
        assert DiscoveryConfig(max_workers=2).max_workers == 2

    def test_workers_from_env_must_be_number(self, monkeypatch):
        monkeypatch.setenv("CLOUD_DISCOVERY_MAX_WORKERS", "many")
        with pytest.raises(ValueError):
            DiscoveryConfig()

    @pytest.mark.parametrize("kwargs", [
        {"output_formats": ["csv"]},
        {"log_level": "LOUD"},
        {"console_log_level": "trace"},
        {"max_workers": 0},
        {"include_types": ["VirtualMachine", "Mainframe"]},
        {"exclude_types": ["storage"]},
    ])
    def test_invalid_settings(self, kwargs):
        with pytest.raises(ValueError):
            DiscoveryConfig(**kwargs)

    def test_type_names_and_categories_accepted(self):
        config = DiscoveryConfig(include_types=["Storage", "Compute"], exclude_types=["BlockStorage"])
        assert config.include_types == ["Storage", "Compute"]

    def test_output_path(self, tmp_path, monkeypatch):
        assert DiscoveryConfig(output_dir=str(tmp_path)).get_output_path() == tmp_path

        config = DiscoveryConfig()
        assert config.get_output_path().name.startswith("cloud-discovery-")
        assert config.get_output_path() == config.get_output_path()

        monkeypatch.setenv("CLOUD_DISCOVERY_OUTPUT_DIR", str(tmp_path))
        assert DiscoveryConfig().get_output_path() == tmp_path


class TestResourceTypeConfig:

    RESOURCES = [
        VirtualMachine(id="vm"),
        BlockStorage(id="vol"),
        ObjectStorage(id="bucket"),
        ObjectStorageService(id="svc"),
        Account(id="acc"),
    ]

    def test_no_filters(self):
        assert ResourceTypeConfig().filter_resources(self.RESOURCES) == self.RESOURCES

    def test_include_category(self):
        config = ResourceTypeConfig()
        config.set_included_types(["Storage"])

        assert [r.id for r in config.filter_resources(self.RESOURCES)] == ["vol", "bucket"]

    def test_exclude_variant(self):
        config = ResourceTypeConfig()
        config.set_excluded_types(["BlockStorage", "Infrastructure"])

        assert [r.id for r in config.filter_resources(self.RESOURCES)] == ["vm", "bucket", "svc"]

    def test_exclude_wins_over_include(self):
        config = ResourceTypeConfig()
        config.set_included_types(["CloudResource"])
        config.set_excluded_types(["Networking"])

        assert [r.id for r in config.filter_resources(self.RESOURCES)] == ["vm", "vol", "bucket"]

    def test_load_from_file(self, tmp_path):
        path = tmp_path / "types.json"
        path.write_text(json.dumps({"include_types": ["Compute"]}))

        config = ResourceTypeConfig(str(path))

        assert [r.id for r in config.filter_resources(self.RESOURCES)] == ["vm"]

    def test_unreadable_file_means_no_filters(self, tmp_path):
        path = tmp_path / "types.json"
        path.write_text("{not json")

        config = ResourceTypeConfig(str(path))

        assert len(config.filter_resources(self.RESOURCES)) == len(self.RESOURCES)

    def test_initialize(self):
        config = initialize_resource_config(excluded_types=["Compute"])

        assert not config.is_included(VirtualMachine(id="vm"))
