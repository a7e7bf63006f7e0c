"""
chronofuel/wiring.py

One-time collaborator binding.

Collaborator references (ledger engine address, certificate registry,
halving controller) are injected at construction or bound exactly once
afterwards. Rebinding to the same value is a no-op; rebinding to a
different value is refused.
"""

import logging
from typing import Any, Optional

from .errors import AlreadyConfiguredError, ValidationError

logger = logging.getLogger("chronofuel.wiring")


def bind_once(current: Optional[Any], new: Any, name: str) -> Any:
    """
    Resolve a one-time binding.

    Args:
        current: Value currently bound (None if unbound)
        new: Value the caller wants to bind
        name: Collaborator name for messages

    Returns:
        The value that should be stored

    Raises:
        ValidationError: new is None or empty
        AlreadyConfiguredError: already bound to a different value
    """
    if new is None or new == "":
        raise ValidationError(f"{name}: address cannot be null")

    if current is None:
        logger.info(f"{name} bound")
        return new

    if current == new:
        return current

    raise AlreadyConfiguredError(f"{name} is already configured")
