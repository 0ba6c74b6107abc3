"""
Message Store
=============

The conversation held by one Agent: an ordered list of role-tagged
messages, replayed verbatim to the backend on every turn.

Retention:
- When memory is enabled the store never holds more than max_messages
  entries; the policy is applied after every append.
- The (first) system message always survives. The remaining slots hold the
  most recent non-system messages in their original order.
- Without a system message, the most recent max_messages are kept.
- Dropped messages are gone for good.

The store lives only in RAM and is owned by exactly one Agent. It is not
safe to mutate from two concurrent turns.
"""

from aigent.types import MemoryPolicy, Message, Role
from aigent.utils.logger import Logger

logger = Logger("Memory")


class MessageStore:
    """
    Ordered, bounded conversation history.

    Example:
        store = MessageStore(MemoryPolicy(max_messages=3))
        store.append(Message.system("Be brief"))
        store.append(Message.user("hi"))
        store.snapshot()   # (system, user)
    """

    def __init__(self, policy: MemoryPolicy | None = None):
        self.policy = policy or MemoryPolicy()
        self._messages: list[Message] = []

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self):
        return iter(self.snapshot())

    @property
    def system_message(self) -> Message | None:
        for message in self._messages:
            if message.role is Role.SYSTEM:
                return message
        return None

    def append(self, message: Message) -> None:
        """Add a message at the end, then enforce retention."""
        self._messages.append(message)
        if self.policy.enabled:
            self._apply_retention()

    def snapshot(self) -> tuple[Message, ...]:
        """A read-only copy of the current history, oldest first."""
        return tuple(self._messages)

    def clear(self) -> None:
        """Drop everything except the system message (if there is one)."""
        system = self.system_message
        self._messages = [system] if system else []
        logger.debug("Memory cleared")

    def checkpoint(self) -> tuple[Message, ...]:
        """Capture the full state for a later restore()."""
        return self.snapshot()

    def restore(self, checkpoint: tuple[Message, ...]) -> None:
        """Reinstate a state captured by checkpoint()."""
        self._messages = list(checkpoint)

    def _apply_retention(self) -> None:
        limit = self.policy.max_messages
        if len(self._messages) <= limit:
            return

        system = self.system_message
        others = [m for m in self._messages if m is not system]
        keep = limit - 1 if system else limit
        recent = others[-keep:] if keep > 0 else []

        dropped = len(self._messages) - len(recent) - (1 if system else 0)
        self._messages = [system, *recent] if system else recent
        logger.debug(f"Retention dropped {dropped} message(s), {len(self._messages)} kept")
