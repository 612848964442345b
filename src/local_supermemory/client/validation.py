"""Input hygiene for the agent-side client."""

import re
import socket

MAX_CONTAINER_TAG_LENGTH = 100

_TAG_CHARACTERS = re.compile(r"[A-Za-z0-9_.:-]+")
# Control characters except tab, newline and carriage return
_CONTROL_CHARACTERS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")


def default_container_tag(hostname: str | None = None) -> str:
    """``openclaw_<hostname>`` with every character outside ``[A-Za-z0-9_]`` replaced by ``_``."""
    host = hostname if hostname is not None else socket.gethostname()
    return "openclaw_" + re.sub(r"[^A-Za-z0-9_]", "_", host)


def container_tag_problem(container_tag: str) -> str | None:
    """Describe what is wrong with a container tag, or None when it looks fine.

    Tags are only advisory on the client side; the server accepts any
    non-empty string.
    """
    if not container_tag or not container_tag.strip():
        return "container tag is empty"
    if len(container_tag) > MAX_CONTAINER_TAG_LENGTH:
        return f"container tag exceeds {MAX_CONTAINER_TAG_LENGTH} characters"
    if not _TAG_CHARACTERS.fullmatch(container_tag):
        return "container tag contains characters outside [A-Za-z0-9_.:-]"
    return None


def sanitize_content(content: str) -> str:
    """Trim ``content`` and drop NUL and other control characters."""
    return _CONTROL_CHARACTERS.sub("", content).strip()
