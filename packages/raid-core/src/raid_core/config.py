"""
Controller connection configuration.

This module provides the ControllerConfig dataclass describing how to reach
the provisioning controller. The CLI fills it from options that fall back
to environment variables:

- MAAS_API_URL: Controller URL (e.g., http://maas:5240/MAAS)
- MAAS_API_KEY: API key in "consumer:token:secret" form
- MAAS_API_VERSION: API version (default "2.0")

Example:
    ```python
    from raid_core.config import ControllerConfig

    config = ControllerConfig(
        api_url="http://maas:5240/MAAS",
        api_key="consumer:token:secret",
    )
    config.base_url  # "http://maas:5240/MAAS/api/2.0/"
    ```
"""

from dataclasses import dataclass

API_URL_ENV = "MAAS_API_URL"
API_KEY_ENV = "MAAS_API_KEY"
API_VERSION_ENV = "MAAS_API_VERSION"

DEFAULT_API_VERSION = "2.0"
DEFAULT_TIMEOUT_SECONDS = 10.0


@dataclass
class ControllerConfig:
    """
    Connection settings for the provisioning controller.

    Attributes:
        api_url: Controller URL, without the /api/<version> suffix.
        api_key: API key in "consumer:token:secret" form.
        api_version: API version path segment.
        timeout_seconds: Timeout applied to every individual call. A staged
            update makes one call per phase, each with this timeout.
    """

    api_url: str
    api_key: str
    api_version: str = DEFAULT_API_VERSION
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    @property
    def base_url(self) -> str:
        """Root URL every API path is relative to."""
        return f"{self.api_url.rstrip('/')}/api/{self.api_version}/"

    def key_parts(self) -> tuple[str, str, str]:
        """
        Split the API key into consumer key, token and secret.

        Raises:
            ValueError: If the key is not in "consumer:token:secret" form.
        """
        parts = self.api_key.split(":")
        if len(parts) != 3 or not all(parts):
            raise ValueError(
                "Invalid API key: expected 'consumer:token:secret' "
                f"({len(parts)} part(s) found)"
            )
        return parts[0], parts[1], parts[2]
