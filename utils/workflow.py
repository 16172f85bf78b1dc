# utils/workflow.py
import enum
import logging

from utils.errors import BadRequest

logger = logging.getLogger(__name__)


class StatusEnum(enum.Enum):
    """Status enum with an explicit transition table.

    Subclasses define ``_transitions()`` returning ``{state: {targets}}``;
    states missing from the table are terminal.
    """

    @classmethod
    def _transitions(cls) -> dict:
        return {}

    def can_transition(self, target) -> bool:
        return target in self._transitions().get(self, ())

    @property
    def is_terminal(self) -> bool:
        return not self._transitions().get(self)


def ensure_status(obj, allowed, message: str, error=BadRequest) -> None:
    if obj.status not in allowed:
        raise error(message)


def transition(obj, target, message: str, error=BadRequest, label=None) -> None:
    """Move ``obj.status`` to ``target`` or raise ``error(message)``."""
    current = obj.status
    if not current.can_transition(target):
        raise error(message)
    obj.status = target
    logger.info(
        "%s %s: %s -> %s",
        obj.__class__.__name__,
        label or getattr(obj, "id", "?"),
        current.value,
        target.value,
    )
