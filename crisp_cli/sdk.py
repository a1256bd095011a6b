"""
Crisp SDK - High-level client with one method per plugin endpoint.

Built on top of the core APIClient.
"""

from crisp_cli.core.client import APIClient, Response
from crisp_cli.core.types import (
    PluginInformation,
    PluginPersonalRank,
    PluginStars,
    parse_string_list,
)


class CrispClient:
    """
    High-level Crisp API client.

    Example:
        client = CrispClient(identifier="...", key="...")

        websites, _ = client.plugin.list_connect_websites()
        stars, _ = client.plugin.get_stars(plugin_id)
        client.plugin.rank(plugin_id, 5)

    """

    def __init__(
        self,
        identifier: str | None = None,
        key: str | None = None,
        tier: str | None = None,
        base_url: str | None = None,
        timeout: int = 60,
    ):
        """
        Initialize the Crisp client.

        Args:
            identifier: Crisp token identifier (or CRISP_API_IDENTIFIER env var)
            key: Crisp token key (or CRISP_API_KEY env var)
            tier: Token tier (or CRISP_API_TIER env var, defaults to "plugin")
            base_url: API base URL (or CRISP_API_BASE_URL env var)
            timeout: Request timeout in seconds

        """
        self._client = APIClient(
            identifier=identifier,
            key=key,
            tier=tier,
            base_url=base_url,
            timeout=timeout,
        )

        self.plugin = PluginOperations(self._client)


# =============================================================================
# Plugin Operations
# =============================================================================


def _plugin_path(plugin_id: str, *suffix: str) -> str:
    return "/".join(("plugin", str(plugin_id), *suffix))


class PluginOperations:
    """Operations on plugins and the connected plugin session."""

    def __init__(self, client: APIClient):
        self._client = client

    def check_connect_session_validity(self) -> Response:
        """
        Check whether the connected plugin session is valid.

        The session is valid when this returns; any error means it is not.

        Returns:
            Response descriptor

        """
        return self._client.head("plugin/connect/session")

    def list_connect_websites(self) -> tuple[list[str] | None, Response]:
        """
        List the websites linked to the connected plugin.

        Returns:
            Tuple of (website IDs in server order or None, response)

        """
        return self._client.get("plugin/connect/websites", parse_string_list)

    def get_information(self, plugin_id: str) -> tuple[PluginInformation | None, Response]:
        """
        Get plugin information.

        Args:
            plugin_id: The plugin ID

        Returns:
            Tuple of (PluginInformation or None, response)

        """
        return self._client.get(_plugin_path(plugin_id), PluginInformation.from_dict)

    def get_stars(self, plugin_id: str) -> tuple[PluginStars | None, Response]:
        """
        Get user rating statistics for a plugin.

        Args:
            plugin_id: The plugin ID

        Returns:
            Tuple of (PluginStars or None, response)

        """
        return self._client.get(_plugin_path(plugin_id, "stars"), PluginStars.from_dict)

    def get_personal_rank(self, plugin_id: str) -> tuple[PluginPersonalRank | None, Response]:
        """
        Get our own rank of a plugin, if we ever ranked it.

        Args:
            plugin_id: The plugin ID

        Returns:
            Tuple of (PluginPersonalRank or None, response)

        """
        return self._client.get(_plugin_path(plugin_id, "stars", "self"), PluginPersonalRank.from_dict)

    def rank(self, plugin_id: str, rank: int) -> Response:
        """
        Rank a plugin as the current user.

        Args:
            plugin_id: The plugin ID
            rank: The rank to give

        Returns:
            Response descriptor

        """
        body = PluginPersonalRank(rank=rank).to_dict()
        return self._client.patch(_plugin_path(plugin_id, "stars", "self"), body)

    def delete_rank(self, plugin_id: str) -> Response:
        """Delete our own rank of a plugin."""
        return self._client.delete(_plugin_path(plugin_id, "stars", "self"))
