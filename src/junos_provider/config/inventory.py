"""Device inventory management from YAML configuration."""
import logging
from pathlib import Path
from typing import Optional

import yaml

from ..session.base import ClientConfig
from ..session.client import Client

logger = logging.getLogger(__name__)

# Keys of a device entry that are not client settings
SESSION_TYPE_KEYS = ("session_type", "type")


class DeviceInventory:
    """Manages the Junos device inventory loaded from YAML config.

    ```yaml
    defaults:
      username: netconf
      sshkeyfile: ~/.ssh/id_ed25519
      commit_confirmed: 5

    devices:
      srx-lab:
        host: 192.0.2.10
      mx-edge:
        host: 192.0.2.20
        port: 22

    groups:
      routers:
        - mx-edge
    ```

    Settings left out of a device entry fall back to ``defaults``, then to
    the ``JUNOS_*`` environment variables.
    """

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = config_path or self._find_config()
        self._config: dict = {}
        self._clients: dict[str, Client] = {}
        self._load_config()

    def _find_config(self) -> str:
        """Find the devices.yaml config file."""
        search_paths = [
            Path.cwd() / "configs" / "devices.yaml",
            Path.cwd() / "devices.yaml",
            Path.home() / ".config" / "junos-provider" / "devices.yaml",
            Path("/etc/junos-provider/devices.yaml"),
        ]

        for path in search_paths:
            if path.exists():
                return str(path)

        raise FileNotFoundError(
            "Could not find devices.yaml. Create one in ./configs/devices.yaml"
        )

    def _load_config(self) -> None:
        """Load the YAML configuration."""
        with open(self.config_path) as f:
            self._config = yaml.safe_load(f) or {}

        # Apply defaults
        defaults = self._config.get("defaults", {})
        for device_id, device_config in self._config.get("devices", {}).items():
            for key, value in defaults.items():
                if key not in device_config:
                    device_config[key] = value

        self._validate_groups()

    def get_device_ids(self) -> list[str]:
        """Get all device IDs."""
        return list(self._config.get("devices", {}).keys())

    def get_device_config(self, device_id: str) -> dict:
        """Get raw config for a device."""
        devices = self._config.get("devices", {})
        if device_id not in devices:
            raise KeyError(f"Unknown device: {device_id}")
        return devices[device_id]

    def get_client(self, device_id: str) -> Client:
        """Get or create the client of a device.

        Raises:
            KeyError: If the device is not in the inventory
            ValueError: If the entry holds settings the client does not know
        """
        if device_id not in self._clients:
            settings = dict(self.get_device_config(device_id))
            session_type = "netconf"
            for key in SESSION_TYPE_KEYS:
                if key in settings:
                    session_type = settings.pop(key)
            config, warnings = ClientConfig.from_settings(settings)
            for warning in warnings:
                logger.warning(f"{device_id}: {warning}")
            self._clients[device_id] = Client(device_id, config, session_type=session_type)
        return self._clients[device_id]

    def get_all_clients(self) -> dict[str, Client]:
        """Get all client instances."""
        for device_id in self.get_device_ids():
            self.get_client(device_id)
        return self._clients

    # === Group Management ===

    def _validate_groups(self) -> None:
        """Validate that all group members reference valid devices."""
        groups = self._config.get("groups", {})
        devices = self._config.get("devices", {})

        for group_name, members in groups.items():
            if not isinstance(members, list):
                logger.warning(f"Group '{group_name}' should be a list of device IDs")
                continue
            for device_id in members:
                if device_id not in devices:
                    logger.warning(
                        f"Group '{group_name}' references unknown device: {device_id}"
                    )

    def get_groups(self) -> dict[str, list[str]]:
        """Get all defined groups and their members."""
        return dict(self._config.get("groups", {}))

    def get_group_names(self) -> list[str]:
        """Get list of all group names."""
        return list(self._config.get("groups", {}).keys())

    def get_group_members(self, group_name: str) -> list[str]:
        """Get device IDs in a group.

        Args:
            group_name: Name of the group

        Returns:
            List of device IDs in the group

        Raises:
            KeyError: If group doesn't exist
        """
        groups = self._config.get("groups", {})
        if group_name not in groups:
            raise KeyError(f"Unknown group: {group_name}")
        return list(groups[group_name])

    def get_clients_in_group(self, group_name: str) -> list[Client]:
        """Get clients for all members of a group."""
        return [self.get_client(device_id) for device_id in self.get_group_members(group_name)]

    def get_device_groups(self, device_id: str) -> list[str]:
        """Get all groups a device belongs to."""
        groups = []
        for group_name, members in self._config.get("groups", {}).items():
            if device_id in members:
                groups.append(group_name)
        return groups
