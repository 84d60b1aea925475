"""
Base exporter class for cloud resource discovery output formats.
"""

from abc import ABC, abstractmethod
from collections import Counter
from pathlib import Path
from typing import Any, Dict, List, Optional
import logging

from core.config import DiscoveryConfig
from core.resource_info import ResourceInfo
from graph.resource_graph import ResourceGraph


class BaseExporter(ABC):
    """
    Writes projected resources to the output directory.

    Subclasses set ``format_name`` and ``extension``. Resources whose
    projection failed are counted in the statistics but never written.
    """

    format_name = ""
    extension = ""

    def __init__(self, config: DiscoveryConfig, output_dir: Path):
        self.config = config
        self.output_dir = output_dir
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.logger = logging.getLogger(f'cloud_discovery.exporter.{self.format_name}')

    @abstractmethod
    def export_resources(self, resources: List[ResourceInfo], graph: Optional[ResourceGraph] = None,
                         filename: Optional[str] = None) -> Optional[Path]:
        """
        Write all resources into one file.

        Args:
            resources: Projected resources; failed projections are only summarized
            graph: Relationship graph to include, if the format supports it
            filename: File name without extension, a format default otherwise

        Returns:
            Path of the written file, None if the format is disabled
        """

    def export_individual_descriptions(self, resources: List[ResourceInfo]) -> List[Path]:
        """Write one file per resource; formats without a per-resource form write nothing"""
        return []

    def enabled(self) -> bool:
        """Check if this format was requested in the configuration"""
        return self.config.should_export_format(self.format_name)

    def target(self, name: str) -> Path:
        """Get the output path of a file with this format's extension"""
        return self.output_dir / f"{name}{self.extension}"

    @staticmethod
    def exportable(resources: List[ResourceInfo]) -> List[ResourceInfo]:
        """Get the resources that were projected without error"""
        return [r for r in resources if r.is_valid()]

    @staticmethod
    def resource_entry(resource: ResourceInfo) -> Dict[str, Any]:
        """Convert a projected resource into its exported form"""
        return {
            'id': resource.identifier,
            'type': resource.types,
            'service': resource.service,
            'region': resource.region,
            'properties': resource.properties,
            'related': [{'property': r.property, 'value': r.value} for r in resource.relationships]
        }

    @staticmethod
    def summarize(resources: List[ResourceInfo]) -> Dict[str, Any]:
        """
        Summarize a batch of projected resources.

        Args:
            resources: All projected resources, including failed ones

        Returns:
            Dictionary with totals, the projection error per resource identifier
            and the resource counts per type and per service
        """
        failed = [r for r in resources if r.has_error()]

        return {
            'total_resources': len(resources),
            'valid_resources': len(resources) - len(failed),
            'resources_with_errors': len(failed),
            'errors': {r.identifier: r.error for r in failed},
            'types': dict(Counter(r.resource_type for r in resources)),
            'services': dict(Counter(r.service or 'unknown' for r in resources))
        }

    def log_summary(self, summary: Dict[str, Any], output_path: Path):
        """Log where the file went and what was left out"""
        self.logger.info(f"📄 {self.format_name.upper()} written to {output_path}")
        self.logger.info(f"   Resources: {summary['valid_resources']}/{summary['total_resources']}")

        for identifier, error in list(summary['errors'].items())[:5]:
            self.logger.warning(f"   Not exported {identifier}: {error}")

        top_types = Counter(summary['types']).most_common(5)
        if top_types:
            self.logger.info(f"   Top Types: {', '.join(f'{t}({c})' for t, c in top_types)}")
