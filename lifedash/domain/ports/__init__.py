"""Domain port protocols for decoupling services from infrastructure."""

from .configuration_provider import ConfigurationProvider
from .unit_of_work import UnitOfWork

__all__ = ["ConfigurationProvider", "UnitOfWork"]
