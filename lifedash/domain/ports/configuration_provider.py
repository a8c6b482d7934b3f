"""ConfigurationProvider port -- abstracts where habit rules come from."""

from typing import Protocol, runtime_checkable

from ...core.typed_config import Configuration


@runtime_checkable
class ConfigurationProvider(Protocol):
    """Loads a fresh, validated Configuration snapshot."""

    async def load(self) -> Configuration:
        """Return the current rules; raise InvalidConfigurationError if broken."""
        ...
