"""
Infrastructure layer - external system integrations.
Keeps lifecycle logic clean from transport details.
"""

from .http_client import get_http_client, close_http_client
from .event_gateway import HttpEventGateway

__all__ = ['get_http_client', 'close_http_client', 'HttpEventGateway']
