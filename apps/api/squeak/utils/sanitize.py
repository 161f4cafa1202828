"""Free-text sanitization for user-supplied question and reply bodies."""

import nh3

# No markup is allowed in widget bodies
ALLOWED_TAGS: set[str] = set()

# nh3 serializes its output as HTML; these escapes are not markup and are
# turned back into the characters the user typed. "&lt;" and "&gt;" stay
# escaped so the output never contains tag characters.
_RESTORED_ENTITIES = (
    ("&nbsp;", "\u00a0"),
    ("&amp;", "&"),
)


def sanitize_text(raw: str) -> str:
    """
    Strip every HTML tag from ``raw``.

    Tags are removed rather than escaped; ``<script>``/``<style>`` content
    and comments are dropped entirely. Plain text comes back unchanged.
    """
    if not raw:
        return ""
    cleaned = nh3.clean(raw, tags=ALLOWED_TAGS)
    for entity, char in _RESTORED_ENTITIES:
        cleaned = cleaned.replace(entity, char)
    return cleaned
