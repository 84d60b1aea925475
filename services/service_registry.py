"""
Service registry for managing cloud discoverer implementations.
"""

from typing import Dict, List, Type
import logging
import boto3

from core.base_discoverer import BaseDiscoverer
from core.config import DiscoveryConfig


class DiscovererRegistry:
    """Registry for discoverer implementations, keyed by service name"""

    def __init__(self):
        self._discoverers: Dict[str, Type[BaseDiscoverer]] = {}
        self.logger = logging.getLogger('cloud_discovery.registry')

    @staticmethod
    def _template(discoverer_class: Type[BaseDiscoverer]) -> BaseDiscoverer:
        """Temporary instance for reading service name and resource types, never used for API calls"""
        return discoverer_class(DiscoveryConfig(region='us-east-1'), boto3.Session(region_name='us-east-1'))

    def register_discoverer(self, discoverer_class: Type[BaseDiscoverer]):
        """Register a discoverer implementation"""
        service_name = self._template(discoverer_class).get_service_name()

        if service_name in self._discoverers:
            self.logger.warning(f"Discoverer {service_name} already registered, overwriting")

        self._discoverers[service_name] = discoverer_class
        self.logger.debug(f"Registered discoverer: {service_name}")

    def get_all_discoverers(self, config: DiscoveryConfig, session: boto3.Session) -> List[BaseDiscoverer]:
        """Get instances of all registered discoverers"""
        return [cls(config, session) for cls in self._discoverers.values()]

    def get_filtered_discoverers(self, service_filter: str, config: DiscoveryConfig, session: boto3.Session) -> List[BaseDiscoverer]:
        """Get discoverers filtered by service name pattern"""
        filter_lower = service_filter.lower()

        return [
            cls(config, session)
            for service_name, cls in self._discoverers.items()
            if filter_lower in service_name.lower()
        ]

    def list_registered_services(self) -> List[str]:
        """Get list of registered service names"""
        return list(self._discoverers.keys())

    def get_resource_type_mapping(self) -> Dict[str, str]:
        """Get mapping of ontology type names to the service discovering them"""
        mapping = {}

        for service_name, cls in self._discoverers.items():
            for resource_class in self._template(cls).get_supported_resource_types():
                mapping[resource_class.__name__] = service_name

        return mapping


# Global discoverer registry instance
_registry = DiscovererRegistry()


def register_discoverer(discoverer_class: Type[BaseDiscoverer]):
    """Decorator to register a discoverer class"""
    _registry.register_discoverer(discoverer_class)
    return discoverer_class


def get_registry() -> DiscovererRegistry:
    """Get the global discoverer registry"""
    return _registry


class DiscovererFactory:
    """Factory for creating discoverer instances"""

    def __init__(self, config: DiscoveryConfig, session: boto3.Session):
        self.config = config
        self.session = session
        self.registry = get_registry()
        self.logger = logging.getLogger('cloud_discovery.factory')

    def create_all_discoverers(self) -> List[BaseDiscoverer]:
        """Create instances of all registered discoverers"""
        return self.registry.get_all_discoverers(self.config, self.session)

    def create_filtered_discoverers(self, service_filter: str) -> List[BaseDiscoverer]:
        """Create discoverers filtered by name pattern"""
        return self.registry.get_filtered_discoverers(service_filter, self.config, self.session)

    def get_discoverers_for_discovery(self) -> List[BaseDiscoverer]:
        """Get discoverers based on configuration filters"""
        if self.config.service_filter:
            self.logger.info(f"Filtering discoverers by: {self.config.service_filter}")
            return self.create_filtered_discoverers(self.config.service_filter)
        else:
            self.logger.info("Discovering all services")
            return self.create_all_discoverers()

    def log_available_discoverers(self):
        """Log information about available discoverers"""
        services = self.registry.list_registered_services()
        self.logger.info(f"Available discoverers ({len(services)}): {', '.join(sorted(services))}")
