"""Agent endpoint resolution.

Picks the agent chat base URL from the enterprise and local candidates.
The enterprise URL wins when it is set; otherwise the local URL is used,
and the local URL always has a loopback default so resolution never
produces an empty string.
"""

from typing import Optional

from src.issue_agent.config import DEFAULT_LOCAL_NETWORK_URL, AgentSettings


def resolve_agent_base_url(
    enterprise_url: Optional[str],
    local_url: Optional[str] = None,
) -> str:
    """Return the agent base URL to use for chat requests.

    Args:
        enterprise_url: Enterprise/production agent URL. Used when present
            and non-blank after trimming.
        local_url: Local development agent URL. Blank or missing values
            fall back to ``DEFAULT_LOCAL_NETWORK_URL``.

    Returns:
        The selected base URL without a trailing slash.
    """
    if enterprise_url and enterprise_url.strip():
        return enterprise_url.strip().rstrip("/")
    if local_url and local_url.strip():
        return local_url.strip().rstrip("/")
    return DEFAULT_LOCAL_NETWORK_URL


def resolve_from_settings(settings: AgentSettings) -> str:
    return resolve_agent_base_url(
        settings.github_enterprise_url,
        settings.local_network_url,
    )
