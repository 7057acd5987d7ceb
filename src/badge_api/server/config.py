"""Server configuration from defaults, an optional YAML file and CLI flags."""

from __future__ import annotations

import dataclasses
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

import yaml

from ..constants import Constants

logger = logging.getLogger(__name__)


@dataclass
class ServerConfig:
    """Configuration for the badge server."""

    host: str = Constants.DEFAULT_HOST
    port: int = Constants.DEFAULT_PORT
    github_org: str = Constants.GITHUB_DEFAULT_ORG
    github_token: Optional[str] = None
    nuget_base_url: str = Constants.REGISTRY_URL_NUGET_FLAT
    test_results_ttl: int = Constants.TEST_RESULTS_CACHE_TTL_SEC
    test_results_timeout: int = Constants.TEST_RESULTS_TIMEOUT
    gist_base_url_v1: str = Constants.GIST_BASE_URL_V1
    gist_base_url_v2: str = Constants.GIST_BASE_URL_V2
    gist_base_url_package: str = Constants.GIST_BASE_URL_WITH_PACKAGE

    def __post_init__(self) -> None:
        if self.github_token is None:
            self.github_token = os.environ.get(Constants.ENV_GITHUB_TOKEN)

    def update(self, values: Dict[str, Any]) -> None:
        """Overlay known keys from ``values``; unknown keys are logged and skipped."""
        names = {f.name for f in dataclasses.fields(self)}
        for key, value in values.items():
            attr = key.replace("-", "_")
            if attr not in names:
                logger.warning("Ignoring unknown config key: %s", key)
                continue
            if value is not None:
                setattr(self, attr, value)

    @classmethod
    def from_args(cls, args: Any) -> "ServerConfig":
        """Create config from CLI arguments.

        Values from ``--config`` are applied first, then explicit flags.

        Args:
            args: Parsed CLI arguments namespace.

        Returns:
            ServerConfig instance.
        """
        config = cls()
        config.update(load_config_file(getattr(args, "CONFIG", None)))
        config.update({
            "host": getattr(args, "HOST", None),
            "port": getattr(args, "PORT", None),
            "github_org": getattr(args, "GITHUB_ORG", None),
            "test_results_ttl": getattr(args, "TEST_RESULTS_TTL", None),
        })
        return config


def load_config_file(config_path: Optional[str]) -> Dict[str, Any]:
    """Load server settings from a YAML file.

    A top-level ``server`` section is used when present, otherwise the whole
    document.
    """
    if not config_path:
        return {}

    if not os.path.isfile(config_path):
        logger.warning("Config file not found: %s", config_path)
        return {}

    with open(config_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if not isinstance(data, dict):
        return {}
    section = data.get("server", data)
    return section if isinstance(section, dict) else {}
