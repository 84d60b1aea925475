"""
Exceptions raised by the discovery layer.
"""

from botocore.exceptions import ClientError


class DiscoveryError(Exception):
    """Raised when a discoverer cannot list the resources of its service"""

    def __init__(self, message: str, service: str = ""):
        self.service = service
        super().__init__(message)


def format_client_error(error: Exception) -> str:
    """Format an AWS API error as "code: ..., message: ..." if possible"""
    if isinstance(error, ClientError):
        details = error.response.get('Error', {})
        code = details.get('Code', 'Unknown')
        message = details.get('Message', str(error))
        return f"code: {code}, message: {message}"
    return str(error)
