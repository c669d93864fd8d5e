"""Text Sanitizer

Strips the characters that could change how a downstream shell would read the
text before it is handed to the speech executable. This is a denylist: input
is cleaned and passed on, never rejected.
"""

# Command substitution and chaining metacharacters.
FORBIDDEN_CHARS = ("`", "$", ";", "|")


def sanitize(raw: str) -> str:
    """
    Cleans untrusted text for use as a single subprocess argument.

    1. Every '&' becomes the word 'and'.
    2. Backticks, '$', ';' and '|' are deleted.
    3. Leading and trailing whitespace (newlines included) is stripped.

    Args:
        raw: Text as received from the request.

    Returns:
        The cleaned text. Never raises.
    """
    text = raw.replace("&", "and")
    for char in FORBIDDEN_CHARS:
        text = text.replace(char, "")
    return text.strip()
