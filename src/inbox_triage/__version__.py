"""Version information for inbox-triage.

Single source of truth for version number.
"""

__version__ = "1.2.0"
__version_info__ = tuple(int(part) for part in __version__.split("."))

# Version history:
# 1.2.0 - Nearest-neighbour few-shot examples in escalation prompts
# 1.1.0 - Partial heuristic results passed to the LLM as hints
# 1.0.0 - Rule-first classification with LLM fallback
