# Services package
"""
Services built on top of the core chat client.

The Qt signal bridge is not imported here so that PyQt5 is only loaded by
code that uses it.
"""
from .configuration_service import ClientSettings, ConfigurationService

__all__ = [
    'ClientSettings',
    'ConfigurationService',
]
