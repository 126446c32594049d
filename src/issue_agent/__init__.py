"""GitHub App webhook receiver for the git issue agent.

This package implements the issue agent service, providing:
- GitHub App authentication and webhook intake
- Welcome comments for newly opened issues and pull requests
- Trigger detection on issue comments
- Issue context assembly (metadata + linked branches)
- Forwarding triggered comments to the agent chat API and relaying replies
"""

__version__ = "1.0.0"
