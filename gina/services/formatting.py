"""
Reply post-processing: rebuild bullet resource lists into one display format.

    Here are some helpful resources:

    • **Name**: description
      Link: https://...

    <closing remark>

Only reorders and re-delimits what the model wrote. A bullet that yields no
name or no description is dropped.
"""

import logging
import re
from dataclasses import dataclass

logger = logging.getLogger(__name__)

BULLET = "•"
CANONICAL_INTRO = "Here are some helpful resources:"

_INTRO_RE = re.compile(r"Here are some[^:]*:", re.IGNORECASE)
_CLOSING_RE = re.compile(
    r"(If you need.*|Feel free.*|Remember.*|Take care.*|Let me know.*)$",
    re.IGNORECASE,
)
_BULLET_SPLIT_RE = re.compile(BULLET + r"\s*")
_BOLD_NAME_RE = re.compile(r"\*\*([^*]+)\*\*")
_BOLD_PREFIX_RE = re.compile(r"\*\*[^*]+\*\*:\s*")
# First colon that is not a URL scheme separator
_COLON_NAME_RE = re.compile(r"^(.*?):(?!//)(.*)$", re.DOTALL)

# Tried in order; first match wins
_LINK_PATTERNS = (
    re.compile(r"Link:\s*(https?://[^\s)]+)"),
    re.compile(r"\[[^\]]+\]\((https?://[^)]+)\)"),
    re.compile(r"(https?://[^\s)]+)"),
)


@dataclass
class Resource:
    name: str
    description: str
    link: str = ""

    def render(self) -> str:
        text = f"{BULLET} **{self.name}**: {self.description}"
        if self.link:
            text += f"\n  Link: {self.link}"
        return text


def has_resources(text: str) -> bool:
    return BULLET in text and ("Link:" in text or "http://" in text or "https://" in text)


def _extract_link(description: str) -> tuple[str, str]:
    """Returns (description without the link, link)."""
    for pattern in _LINK_PATTERNS:
        match = pattern.search(description)
        if match:
            return description[: match.start()], match.group(1)
    return description, ""


def parse_resource(block: str) -> Resource | None:
    text = block.strip()
    if not text:
        return None

    bold = _BOLD_NAME_RE.search(text)
    if bold:
        name = bold.group(1).strip()
        description = _BOLD_PREFIX_RE.sub("", text, count=1).strip()
    else:
        colon = _COLON_NAME_RE.match(text)
        if colon:
            name = colon.group(1).strip()
            description = colon.group(2).strip()
        else:
            name = "Resource"
            description = text

    description, link = _extract_link(description)

    description = re.sub(r"\s+", " ", description).strip()
    description = re.sub(r"\s*Link:\s*$", "", description)
    description = re.sub(r"\.\s*$", "", description).strip()

    if not name or not description:
        return None
    return Resource(name=name, description=description, link=link)


def format_resources(response: str) -> str:
    """Rebuild resource lists. Returns the input unchanged when there are none."""
    if not response or not has_resources(response):
        return response

    parts = _INTRO_RE.split(response)
    if len(parts) > 1:
        intro = parts[0] + CANONICAL_INTRO
        section = parts[1]
    else:
        intro = ""
        section = response

    section = _CLOSING_RE.sub("", section)

    resources = []
    for block in _BULLET_SPLIT_RE.split(section)[1:]:
        resource = parse_resource(block)
        if resource:
            resources.append(resource)

    formatted = intro.strip()
    for resource in resources:
        formatted += "\n\n" + resource.render()

    closing = _CLOSING_RE.search(response)
    if closing:
        formatted += "\n\n" + closing.group(1).strip()

    logger.debug("Formatted %d resource(s)", len(resources))
    return formatted.strip()
