"""Reply comment formatting for GitHub issues.

This module provides functions to quote the triggering comment as
GitHub-flavored markdown and to compose the reply posted back to the issue.
"""


QUOTE_PREFIX = "> "


def quote_comment(comment_body: str) -> str:
    """Render a comment body as a markdown block quote.

    Every line, including empty ones, is prefixed with ``"> "`` so the
    quote stays contiguous:

        >>> quote_comment("a\\nb\\n")
        '> a\\n> b\\n> '

    Args:
        comment_body: The raw comment text.

    Returns:
        The block-quoted text.
    """
    return "\n".join(f"{QUOTE_PREFIX}{line}" for line in comment_body.split("\n"))


def compose_reply(quoted_comment: str, response_text: str) -> str:
    """Join the quoted comment and the agent's response with a blank line."""
    return f"{quoted_comment}\n\n{response_text}"
