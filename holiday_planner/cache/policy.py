"""
Conversational cache bypass.

Only the opening turn of a plan change conversation is cacheable. Follow-up
turns change the answer through the history, which is not part of the cache
key, so they always go to the provider and are never stored.
"""

from typing import Any, Optional, Sequence


def should_use_cache(conversation_history: Optional[Sequence[Any]]) -> bool:
    """Return True only for an initial request with no prior messages."""
    return not conversation_history
