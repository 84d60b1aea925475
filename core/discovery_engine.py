"""
Main discovery engine for cloud resource discovery.

A run has three phases:

1. discover  - every discoverer lists its resources, in parallel if
               max_workers > 1, and the type filters are applied; a failing
               discoverer is recorded and skipped
2. project   - every resource is projected into its canonical map and
               relationships on its own
3. export    - the relationship graph is built and everything is written out
"""

from collections import Counter
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import asdict, dataclass, field
from datetime import datetime
from functools import partial
from typing import Any, Callable, Dict, List, Optional, Tuple

import boto3

from core.base_discoverer import BaseDiscoverer
from core.config import DiscoveryConfig
from core.errors import DiscoveryError
from core.resource_info import ResourceInfo
from core.resource_config import initialize_resource_config
from exporters.base_exporter import BaseExporter
from exporters.json_exporter import JSONExporter
from graph.resource_graph import ResourceGraph
from ontology import IsResource
from services.service_registry import DiscovererFactory
from utils.logging_setup import (
    setup_logging, configure_third_party_loggers, log_system_info, log_configuration,
    ProgressLogger, TimedLogger
)

# A discovered resource together with the discoverer that found it
Found = Tuple[IsResource, BaseDiscoverer]


@dataclass
class DiscoveryStats:
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    total_discoverers: int = 0
    successful_discoverers: int = 0
    failed_discoverers: int = 0
    total_resources: int = 0
    valid_resources: int = 0
    resources_with_errors: int = 0
    filtered_resources: int = 0
    resources_by_type: Counter = field(default_factory=Counter)
    resources_by_service: Counter = field(default_factory=Counter)
    exported_files: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def duration(self) -> float:
        if not (self.start_time and self.end_time):
            return 0.0
        return (self.end_time - self.start_time).total_seconds()


class DiscoveryEngine:
    """Runs discoverers and turns their output into exported ontology data"""

    def __init__(self, config: DiscoveryConfig, session: Optional[boto3.Session] = None):
        self.config = config
        self.output_dir = config.get_output_path()
        self.output_dir.mkdir(parents=True, exist_ok=True)

        self.logger = setup_logging(
            log_level=config.log_level,
            console_level=config.console_log_level,
            file_level=config.file_log_level,
            log_file=self.output_dir / "discovery.log"
        )
        configure_third_party_loggers()
        log_system_info(self.logger)
        log_configuration(self.logger, config)

        self.type_filter = initialize_resource_config(
            config_path=config.types_config,
            included_types=config.include_types,
            excluded_types=config.exclude_types
        )

        if session is None:
            session = boto3.Session(profile_name=config.profile, region_name=config.region)
        self.session = session

        self.factory = DiscovererFactory(config, self.session)
        self.graph: Optional[ResourceGraph] = None
        self.stats = DiscoveryStats()

    def discover_all_resources(self, discoverers: Optional[List[BaseDiscoverer]] = None) -> List[ResourceInfo]:
        """
        Run all phases of a discovery.

        Args:
            discoverers: Discoverers to run, by default the registered ones
                matching the service filter

        Returns:
            The projected resources, including those whose projection failed
        """
        if discoverers is None:
            self.factory.log_available_discoverers()
            discoverers = self.factory.get_discoverers_for_discovery()

        self.stats = DiscoveryStats(start_time=datetime.now(), total_discoverers=len(discoverers))

        with TimedLogger(self.logger, "Cloud Resource Discovery"):
            found = self.discover(discoverers)

            resources = self.project(found)
            self.graph = ResourceGraph.build(
                resource for (resource, _), info in zip(found, resources) if not info.has_error()
            )
            self.graph.log_statistics()

            self.export(resources)

        self.stats.end_time = datetime.now()
        self._log_final_statistics()
        return resources

    def discover(self, discoverers: List[BaseDiscoverer]) -> List[Found]:
        """
        Collect the resources of all discoverers that pass the type filters.

        Args:
            discoverers: Discoverers to run, in parallel unless max_workers is 1

        Returns:
            Every discovered resource paired with the discoverer that found it
        """
        progress = ProgressLogger(self.logger, len(discoverers), "Discoverers")
        found: List[Found] = []

        if self.config.max_workers == 1:
            self.logger.info("🔄 Running discoverers one after another")
            for discoverer in discoverers:
                self._collect(discoverer, partial(self._run_discoverer, discoverer), found)
                progress.update()
            return found

        self.logger.info(f"🔄 Running up to {self.config.max_workers} discoverers in parallel")
        with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
            futures = {executor.submit(self._run_discoverer, d): d for d in discoverers}
            for future in as_completed(futures):
                self._collect(futures[future], future.result, found)
                progress.update()

        return found

    def _run_discoverer(self, discoverer: BaseDiscoverer) -> List[IsResource]:
        """List the resources of one discoverer and log its statistics"""
        with TimedLogger(self.logger, discoverer.get_discoverer_name()):
            resources = discoverer.list_resources()
        discoverer.log_statistics()
        return resources

    def _collect(self, discoverer: BaseDiscoverer, outcome: Callable[[], List[IsResource]], found: List[Found]):
        """
        Record the outcome of one discoverer.

        Any exception raised by the discoverer only marks that discoverer as
        failed; the resources of the others are still collected.

        Args:
            discoverer: The discoverer that produced the outcome
            outcome: Callable returning the discovered resources or raising the
                discoverer's error
            found: List the resources passing the type filters are appended to
        """
        try:
            resources = outcome()
        except Exception as e:
            self.stats.failed_discoverers += 1
            self.stats.errors.append(f"{discoverer.get_service_name()}: {e}")
            self.logger.error(f"✗ {discoverer.get_discoverer_name()}: {e}", exc_info=not isinstance(e, DiscoveryError))
            return

        self.stats.successful_discoverers += 1
        kept = self.type_filter.filter_resources(resources)
        self.stats.filtered_resources += len(resources) - len(kept)
        found.extend((resource, discoverer) for resource in kept)
        self.logger.info(f"✓ {discoverer.get_discoverer_name()}: {len(resources)} resources")

    def project(self, found: List[Found]) -> List[ResourceInfo]:
        """
        Project each resource into its canonical map and relationships.

        A resource that cannot be serialized keeps its error in the returned
        ResourceInfo and is left out of the graph and the exports.

        Args:
            found: Resources with the discoverer that found them

        Returns:
            One ResourceInfo per resource, in the order of ``found``
        """
        projected = []

        for resource, discoverer in found:
            info = ResourceInfo.from_resource(resource, discoverer.get_service_name(), discoverer.region)
            if info.has_error():
                self.logger.warning(f"✗ Could not project {info.identifier}: {info.error}")
            projected.append(info)

        self.stats.total_resources = len(projected)
        self.stats.valid_resources = sum(1 for r in projected if r.is_valid())
        self.stats.resources_with_errors = sum(1 for r in projected if r.has_error())
        self.stats.resources_by_type.update(r.resource_type for r in projected)
        self.stats.resources_by_service.update(r.service for r in projected if r.service)
        return projected

    def exporters(self) -> List[BaseExporter]:
        """Get the exporters writing into the output directory"""
        return [JSONExporter(self.config, self.output_dir)]

    def export(self, resources: List[ResourceInfo]):
        """
        Write resources and graph with every configured exporter.

        A failing exporter is logged and recorded in the statistics; the
        remaining exporters still run.

        Args:
            resources: Projected resources of the run
        """
        for exporter in self.exporters():
            try:
                path = exporter.export_resources(resources, self.graph)
                descriptions = exporter.export_individual_descriptions(resources)
            except (OSError, TypeError, ValueError) as e:
                self.logger.error(f"✗ {exporter.format_name} export failed: {e}")
                self.stats.errors.append(f"export {exporter.format_name}: {e}")
                continue

            if path:
                self.stats.exported_files.append(str(path))
            self.stats.exported_files.extend(str(p) for p in descriptions)

    def _log_final_statistics(self):
        stats = self.stats

        self.logger.info("🎉 Discovery complete")
        self.logger.info(f"   Duration: {stats.duration:.2f}s")
        self.logger.info(f"   Discoverers: {stats.successful_discoverers}/{stats.total_discoverers} succeeded")
        self.logger.info(f"   Resources: {stats.valid_resources} projected, {stats.filtered_resources} filtered out")

        if stats.resources_with_errors:
            self.logger.warning(f"   Projection Failures: {stats.resources_with_errors}")

        top_types = stats.resources_by_type.most_common(5)
        if top_types:
            self.logger.info(f"   Top Types: {', '.join(f'{t}({c})' for t, c in top_types)}")

        if stats.exported_files:
            self.logger.info(f"   Files Written: {len(stats.exported_files)}")

        for error in stats.errors[:3]:
            self.logger.warning(f"   Error: {error}")

    def get_statistics(self) -> Dict[str, Any]:
        """
        Get the statistics of the last run.

        Returns:
            Dictionary of counters, durations and errors as plain data, with
            the graph statistics under 'graph' once a graph was built
        """
        stats = asdict(self.stats)
        stats['resources_by_type'] = dict(self.stats.resources_by_type)
        stats['resources_by_service'] = dict(self.stats.resources_by_service)
        stats['duration'] = self.stats.duration
        if self.graph is not None:
            stats['graph'] = self.graph.get_statistics()
        return stats
