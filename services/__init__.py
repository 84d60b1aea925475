"""
Discoverer modules for cloud resource discovery.

Contains individual discoverer implementations for different AWS services.
"""

# Import all discoverer implementations to ensure they get registered
from .ec2_service import EC2Discoverer
from .s3_service import S3Discoverer
from .iam_service import IAMDiscoverer

# Import registry components for external use
from .service_registry import DiscovererRegistry, DiscovererFactory, get_registry, register_discoverer

__all__ = [
    'EC2Discoverer',
    'S3Discoverer',
    'IAMDiscoverer',
    'DiscovererRegistry',
    'DiscovererFactory',
    'get_registry',
    'register_discoverer'
]
