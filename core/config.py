"""
Configuration management for cloud resource discovery.

Values passed explicitly win over the environment:

    AWS_REGION / AWS_DEFAULT_REGION   region when none is given
    LOG_LEVEL                         overall log level
    CLOUD_DISCOVERY_MAX_WORKERS       parallel discoverers
    CLOUD_DISCOVERY_OUTPUT_DIR        output directory
"""

import os
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from ontology import registered_resource_types, resource_types

LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')
OUTPUT_FORMATS = ('json',)
DEFAULT_MAX_WORKERS = 4


def known_type_names() -> set:
    """All names usable in a type filter: resource variants and their categories"""
    return {name for cls in registered_resource_types() for name in resource_types(cls)}


@dataclass
class DiscoveryConfig:
    """Settings of one discovery run"""

    region: Optional[str] = None
    profile: Optional[str] = None

    max_workers: Optional[int] = None
    service_filter: Optional[str] = None
    include_types: Optional[List[str]] = None
    exclude_types: Optional[List[str]] = None
    types_config: Optional[str] = None  # JSON file with include_types/exclude_types

    output_formats: List[str] = field(default_factory=lambda: list(OUTPUT_FORMATS))
    output_dir: Optional[str] = None
    individual_descriptions: bool = False

    log_level: Optional[str] = None
    console_log_level: str = "INFO"
    file_log_level: str = "DEBUG"

    def __post_init__(self):
        self._apply_env()
        self._check()

    def _apply_env(self):
        self.region = self.region or os.getenv('AWS_REGION') or os.getenv('AWS_DEFAULT_REGION')
        self.log_level = (self.log_level or os.getenv('LOG_LEVEL') or "INFO").upper()
        self.output_dir = self.output_dir or os.getenv('CLOUD_DISCOVERY_OUTPUT_DIR')

        if self.max_workers is None:
            workers = os.getenv('CLOUD_DISCOVERY_MAX_WORKERS')
            try:
                self.max_workers = int(workers) if workers else DEFAULT_MAX_WORKERS
            except ValueError:
                raise ValueError(f"CLOUD_DISCOVERY_MAX_WORKERS must be a number, got {workers!r}") from None

    def _check(self):
        unknown_formats = set(self.output_formats) - set(OUTPUT_FORMATS)
        if unknown_formats:
            raise ValueError(f"Unsupported output formats {sorted(unknown_formats)}, use one of {list(OUTPUT_FORMATS)}")

        for name, level in (('log_level', self.log_level),
                            ('console_log_level', self.console_log_level),
                            ('file_log_level', self.file_log_level)):
            if level not in LOG_LEVELS:
                raise ValueError(f"{name} must be one of {list(LOG_LEVELS)}, got {level!r}")

        if self.max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {self.max_workers}")

        unknown_types = set(self.include_types or []) | set(self.exclude_types or [])
        unknown_types -= known_type_names()
        if unknown_types:
            raise ValueError(f"Unknown resource types {sorted(unknown_types)}")

    def should_export_format(self, format_name: str) -> bool:
        return format_name in self.output_formats

    def get_output_path(self) -> Path:
        """Output directory, a timestamped one below the working directory by default"""
        if not self.output_dir:
            self.output_dir = f"cloud-discovery-{datetime.now():%Y%m%d-%H%M%S}"
        return Path(self.output_dir)
