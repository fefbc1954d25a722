"""
Service interfaces for dependency inversion.
Allows swapping the transport without changing lifecycle logic.
"""

from .gateway import EventGateway

__all__ = ['EventGateway']
