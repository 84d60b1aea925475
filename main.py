#!/usr/bin/env python3
"""
Cloud Resource Discovery Tool

Discovers AWS resources, describes them with the cloud resource ontology and
writes their canonical property maps together with the relationship graph.

Exit codes: 0 success, 1 configuration or fatal error, 2 finished but at least
one discoverer failed.
"""

import argparse
import sys
from pathlib import Path

# Add the current directory to Python path to allow imports
sys.path.insert(0, str(Path(__file__).parent))

from core.config import DiscoveryConfig, LOG_LEVELS, known_type_names
from core.discovery_engine import DiscoveryEngine
from core.errors import DiscoveryError
from ontology import OntologyError, registered_resource_types, resource_types

# Importing the package registers the discoverers
import services

EXAMPLES = """
Examples:
  python main.py --region us-east-1
  python main.py --region eu-west-1 --include-types Storage --individual-descriptions
  python main.py --filter ec2 --exclude-types BlockStorage --max-workers 1
  python main.py --list-types

Type filters accept resource types and their categories, see --list-types.
Credentials are taken from the usual AWS environment variables or profiles.
"""


def create_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Describe AWS resources with the cloud resource ontology',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=EXAMPLES
    )

    aws = parser.add_argument_group('AWS')
    aws.add_argument('--region', help='region to discover (default: AWS_REGION or the profile region)')
    aws.add_argument('--profile', help='named AWS profile')

    scope = parser.add_argument_group('What to discover')
    scope.add_argument('--filter', dest='service_filter', metavar='SERVICE',
                       help='only run discoverers whose service name contains SERVICE (ec2, s3, iam)')
    scope.add_argument('--include-types', nargs='+', metavar='TYPE',
                       help='keep only resources having one of these types')
    scope.add_argument('--exclude-types', nargs='+', metavar='TYPE',
                       help='drop resources having one of these types')
    scope.add_argument('--types-config', metavar='FILE',
                       help='JSON file with "include_types" and "exclude_types" lists')
    scope.add_argument('--max-workers', type=int, metavar='N',
                       help='discoverers running in parallel (default: 4, 1 runs them in order)')

    output = parser.add_argument_group('Output')
    output.add_argument('--output-dir', metavar='DIR', help='output directory (default: timestamped)')
    output.add_argument('--individual-descriptions', action='store_true',
                        help='also write one JSON file per resource')

    logs = parser.add_argument_group('Logging')
    logs.add_argument('--log-level', choices=LOG_LEVELS, help='overall level (default: LOG_LEVEL or INFO)')
    logs.add_argument('--console-log-level', choices=LOG_LEVELS, default='INFO')
    logs.add_argument('--file-log-level', choices=LOG_LEVELS, default='DEBUG')

    info = parser.add_argument_group('Information')
    info.add_argument('--list-types', action='store_true', help='print the ontology resource types and exit')
    info.add_argument('--list-services', action='store_true', help='print the registered discoverers and exit')

    return parser


def config_from_args(args: argparse.Namespace) -> DiscoveryConfig:
    return DiscoveryConfig(
        region=args.region,
        profile=args.profile,
        max_workers=args.max_workers,
        service_filter=args.service_filter,
        include_types=args.include_types,
        exclude_types=args.exclude_types,
        types_config=args.types_config,
        output_dir=args.output_dir,
        individual_descriptions=args.individual_descriptions,
        log_level=args.log_level,
        console_log_level=args.console_log_level,
        file_log_level=args.file_log_level
    )


def list_types():
    """Print every resource type with its type chain and the service discovering it"""
    variants = sorted(registered_resource_types(), key=lambda cls: cls.__name__)
    categories = sorted(known_type_names() - {cls.__name__ for cls in variants})
    discovered_by = services.get_registry().get_resource_type_mapping()

    print(f"📋 Resource Types ({len(variants)}):")
    for cls in variants:
        service = discovered_by.get(cls.__name__, 'not discovered')
        print(f"   • {cls.__name__}: {' > '.join(resource_types(cls))} [{service}]")

    print(f"\n📂 Categories: {', '.join(categories)}")


def list_services():
    registry = services.get_registry()
    names = sorted(registry.list_registered_services())

    print(f"📋 Registered Discoverers ({len(names)}):")
    for name in names:
        print(f"   • {name}")


def main(argv=None) -> int:
    args = create_argument_parser().parse_args(argv)

    if args.list_types:
        list_types()
        return 0
    if args.list_services:
        list_services()
        return 0

    try:
        config = config_from_args(args)
    except ValueError as e:
        print(f"❌ Configuration error: {e}")
        return 1

    try:
        engine = DiscoveryEngine(config)
        print(f"🚀 Discovering into {engine.output_dir}")
        resources = engine.discover_all_resources()
    except KeyboardInterrupt:
        print("\n⚠️  Discovery interrupted")
        return 1
    except (DiscoveryError, OntologyError, OSError) as e:
        print(f"\n❌ Discovery failed: {e}")
        return 1

    stats = engine.get_statistics()
    print(f"\n✅ {len(resources)} resources, {stats.get('graph', {}).get('edges', 0)} relationships")
    print(f"   Output: {engine.output_dir}")

    if stats['failed_discoverers']:
        print(f"⚠️  {stats['failed_discoverers']} discoverer(s) failed, see {engine.output_dir / 'discovery.log'}")
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
