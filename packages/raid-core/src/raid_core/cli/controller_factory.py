"""
Factory for creating controller client instances.

Uses lazy imports to avoid loading unused controller packages.
Controllers are discovered via a hardcoded switch.
"""

from typing import TYPE_CHECKING

from raid_core.config import ControllerConfig

if TYPE_CHECKING:
    from raid_protocols import ControllerClientProtocol

# Hardcoded list of available controllers
AVAILABLE_CONTROLLERS = ["maas"]


def create_controller(
    controller_name: str,
    config: ControllerConfig,
) -> "ControllerClientProtocol":
    """
    Factory function to create a controller client.

    Args:
        controller_name: Controller identifier (e.g., "maas")
        config: Connection settings

    Returns:
        Controller client instance

    Raises:
        ValueError: If controller_name is not recognized or the API key
            is malformed
    """
    if controller_name == "maas":
        # Lazy import to avoid loading the MAAS package unless needed
        from raid_maas.factory import create_maas_client

        return create_maas_client(config)
    else:
        raise ValueError(
            f"Unknown controller '{controller_name}'. "
            f"Available controllers: {', '.join(AVAILABLE_CONTROLLERS)}"
        )
