"""Exception taxonomy for devcat."""

from __future__ import annotations


class CatalogError(Exception):
    """Base class for all devcat errors."""


class ConfigError(CatalogError):
    """The endpoint configuration is missing or has the wrong shape."""


class EndpointError(CatalogError):
    """A single registry endpoint could not be used."""

    def __init__(self, endpoint: str, message: str):
        super().__init__(f"{endpoint}: {message}")
        self.endpoint = endpoint
        self.message = message


class EndpointUnreachableError(EndpointError):
    """Transport failure or non-2xx status from an endpoint."""


class MalformedResponseError(EndpointError):
    """The endpoint answered, but the body is not a list of descriptors."""


class DevfileNotFoundError(CatalogError):
    """No descriptor with the requested name exists in the collection."""

    def __init__(self, name: str, source_repo: str = ""):
        where = f" in '{source_repo}'" if source_repo else ""
        super().__init__(f"Devfile '{name}' not found{where}")
        self.name = name
        self.source_repo = source_repo
