"""
Resource type configuration for cloud resource discovery.

Decides which discovered resources are kept, based on ontology type names.
Because every resource carries its whole type chain, a filter can name either a
concrete variant ("VirtualMachine") or a category ("Storage").
"""

import json
from pathlib import Path
from typing import List, Optional
import logging

from ontology import IsResource, has_type

logger = logging.getLogger('cloud_discovery.types')


class ResourceTypeConfig:
    """Manages ontology resource type filtering"""

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize resource type configuration

        Args:
            config_path: Optional JSON file with an 'include_types' and/or an
                'exclude_types' list
        """
        self._included_types = set()
        self._excluded_types = set()
        self._config_path = Path(config_path) if config_path else None

        if self._config_path:
            self._load_configuration()

    def _load_configuration(self):
        """Load type filters from configuration file"""
        try:
            with open(self._config_path, 'r') as f:
                config_data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load configuration from {self._config_path}: {e}")
            logger.warning("Using no type filters")
            return

        self.set_included_types(config_data.get('include_types'))
        self.set_excluded_types(config_data.get('exclude_types'))
        logger.info(f"Loaded type filters from {self._config_path}")

    def set_included_types(self, included_types: Optional[List[str]] = None):
        """Only keep resources having at least one of these types"""
        self._included_types = set(included_types or [])
        if included_types:
            logger.info(f"Including {len(included_types)} resource types: {included_types}")

    def set_excluded_types(self, excluded_types: Optional[List[str]] = None):
        """Drop resources having any of these types"""
        self._excluded_types = set(excluded_types or [])
        if excluded_types:
            logger.info(f"Excluding {len(excluded_types)} resource types: {excluded_types}")

    def is_included(self, resource: IsResource) -> bool:
        """Check a single resource against the type filters"""
        if self._included_types and not any(has_type(resource, t) for t in self._included_types):
            return False

        return not any(has_type(resource, t) for t in self._excluded_types)

    def filter_resources(self, resources: List[IsResource]) -> List[IsResource]:
        """Get the resources passing the type filters"""
        filtered = [r for r in resources if self.is_included(r)]

        if len(filtered) != len(resources):
            logger.info(f"Filtered to {len(filtered)} of {len(resources)} resources by type")

        return filtered


def initialize_resource_config(config_path: Optional[str] = None,
                               included_types: Optional[List[str]] = None,
                               excluded_types: Optional[List[str]] = None) -> ResourceTypeConfig:
    """
    Build the type filters of a discovery run

    Args:
        config_path: Path to configuration file
        included_types: Resource types to keep
        excluded_types: Resource types to drop
    """
    type_config = ResourceTypeConfig(config_path)
    if included_types:
        type_config.set_included_types(included_types)
    if excluded_types:
        type_config.set_excluded_types(excluded_types)
    return type_config
