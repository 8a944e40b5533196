"""
Factory function for creating MAAS controller clients.

This module provides a factory function for CLI integration, allowing
the raid-core CLI to create a MAAS client without direct imports from
raid-maas.
"""

import httpx

from raid_core.config import ControllerConfig

from raid_maas.auth import MAASAuth
from raid_maas.client import MAASClient


def create_maas_client(
    config: ControllerConfig,
    http: httpx.AsyncClient | None = None,
) -> MAASClient:
    """
    Create a MAAS client.

    Args:
        config: Controller URL, API key, version and per-call timeout.
        http: Optional pre-configured httpx client. If None, a new client
            is created against config.base_url with MAASAuth installed.

    Returns:
        MAASClient ready for use.

    Raises:
        ValueError: If the API key is malformed.

    Example:
        client = create_maas_client(
            ControllerConfig(api_url="http://maas:5240/MAAS", api_key="a:b:c")
        )
        machine = await client.get_machine("node-1")
    """
    if http is None:
        consumer_key, token_key, token_secret = config.key_parts()
        http = httpx.AsyncClient(
            base_url=config.base_url,
            auth=MAASAuth(consumer_key, token_key, token_secret),
            timeout=config.timeout_seconds,
        )

    return MAASClient(http=http)
