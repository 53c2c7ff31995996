"""Configuration — registry endpoint map and application settings.

The endpoint map is a flat ``{endpoint_name: url}`` document stored as JSON
or YAML. Key order is preserved and decides aggregation order.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path

import yaml

from devcat.errors import ConfigError

DEFAULT_ENDPOINTS_PATH = Path("config") / "endpoints.json"
DEFAULT_REGISTRY_URL = "https://registry.devfile.io"
DEFAULT_REVALIDATE_SECONDS = 30.0


@dataclass
class CatalogSettings:
    """Application-edge settings for the CLI and the web portal."""

    endpoints_path: Path = DEFAULT_ENDPOINTS_PATH
    registry_url: str = DEFAULT_REGISTRY_URL
    revalidate_seconds: float = DEFAULT_REVALIDATE_SECONDS

    @classmethod
    def from_env(cls) -> CatalogSettings:
        """Build settings from ``DEVCAT_*`` environment variables."""
        revalidate = os.environ.get("DEVCAT_REVALIDATE_SECONDS", "")
        try:
            revalidate_seconds = float(revalidate) if revalidate else DEFAULT_REVALIDATE_SECONDS
        except ValueError:
            raise ConfigError(
                f"DEVCAT_REVALIDATE_SECONDS must be a number, got '{revalidate}'"
            )
        return cls(
            endpoints_path=Path(
                os.environ.get("DEVCAT_ENDPOINTS_FILE", str(DEFAULT_ENDPOINTS_PATH))
            ),
            registry_url=os.environ.get("DEVCAT_REGISTRY_URL", DEFAULT_REGISTRY_URL),
            revalidate_seconds=revalidate_seconds,
        )


def load_endpoints(path: str | Path) -> dict[str, str]:
    """Load the endpoint map from a JSON or YAML file.

    Files ending in ``.yaml``/``.yml`` are read with PyYAML, everything else
    as JSON.
    """
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Endpoint configuration not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            if path.suffix in (".yaml", ".yml"):
                data = yaml.safe_load(f)
            else:
                data = json.load(f)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigError(f"Could not parse {path}: {e}")

    return parse_endpoints(data)


def parse_endpoints(data: object) -> dict[str, str]:
    """Validate an already-decoded endpoint map."""
    if not isinstance(data, dict):
        raise ConfigError("Endpoint configuration must be a mapping of name -> URL")

    endpoints: dict[str, str] = {}
    for name, url in data.items():
        if not isinstance(name, str) or not name:
            raise ConfigError(f"Invalid endpoint name: {name!r}")
        if not isinstance(url, str) or not url:
            raise ConfigError(f"Endpoint '{name}' must map to a non-empty URL string")
        endpoints[name] = url
    return endpoints
