"""
JSON exporter for cloud resource discovery.

``resources.json`` holds the run metadata, a summary, the projected resources
and the relationship graph. With individual descriptions enabled every resource
is also written on its own, grouped by resource type:

    detailed-descriptions/VirtualMachine/arn_aws_ec2_..._instance_i-0abc.json
"""

import json
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from core.resource_info import ResourceInfo
from graph.resource_graph import ResourceGraph
from .base_exporter import BaseExporter

DESCRIPTIONS_DIR = "detailed-descriptions"
MAX_FILENAME_LENGTH = 100

_UNSAFE_CHARS = re.compile(r'[/\\:<>|*?"\s]')


def safe_filename(identifier: str) -> str:
    """Turn a resource ID (usually an ARN or URL) into a file name"""
    safe = _UNSAFE_CHARS.sub('_', identifier)
    if len(safe) > MAX_FILENAME_LENGTH:
        safe = safe[:MAX_FILENAME_LENGTH - 3] + "..."
    return safe


def _write(path: Path, data: Any):
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2, ensure_ascii=False, default=str)


class JSONExporter(BaseExporter):
    """Export canonical resource maps and their relationships to JSON"""

    format_name = "json"
    extension = ".json"

    def build_document(self, resources: List[ResourceInfo], graph: Optional[ResourceGraph] = None) -> Dict[str, Any]:
        """
        Build the content of resources.json.

        Args:
            resources: All projected resources of the run
            graph: Relationship graph of the exported resources

        Returns:
            Dictionary with metadata, summary, resources and graph
        """
        exported = self.exportable(resources)

        return {
            'metadata': {
                'exported_at': datetime.now(timezone.utc).isoformat(),
                'region': self.config.region,
                'service_filter': self.config.service_filter,
                'include_types': self.config.include_types,
                'exclude_types': self.config.exclude_types,
                'total_resources': len(resources),
                'exported_resources': len(exported)
            },
            'summary': self.summarize(resources),
            'resources': [self.resource_entry(r) for r in exported],
            'graph': graph.to_dict() if graph is not None else None
        }

    def export_resources(self, resources: List[ResourceInfo], graph: Optional[ResourceGraph] = None,
                         filename: Optional[str] = None) -> Optional[Path]:
        if not self.enabled():
            self.logger.debug("JSON output not requested, skipping")
            return None

        output_path = self.target(filename or "resources")
        document = self.build_document(resources, graph)

        try:
            _write(output_path, document)
        except (OSError, TypeError, ValueError) as e:
            self.logger.error(f"Could not write {output_path}: {e}")
            raise

        self.log_summary(document['summary'], output_path)
        return output_path

    def export_individual_descriptions(self, resources: List[ResourceInfo]) -> List[Path]:
        """Write the canonical map of each resource to its own file"""
        if not (self.enabled() and self.config.individual_descriptions):
            return []

        base_dir = self.output_dir / DESCRIPTIONS_DIR
        written = []

        for resource in self.exportable(resources):
            type_dir = base_dir / resource.resource_type
            type_dir.mkdir(parents=True, exist_ok=True)
            path = type_dir / f"{safe_filename(resource.identifier)}{self.extension}"

            try:
                _write(path, resource.properties)
            except OSError as e:
                self.logger.warning(f"Skipped description of {resource.identifier}: {e}")
                continue

            written.append(path)

        self.logger.info(f"📁 {len(written)} resource descriptions in {base_dir}")
        return written
