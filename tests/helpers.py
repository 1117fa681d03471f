"""Test helpers shared across sniaff tests."""

from sniaff.core.docker import ContainerError


class FakeContainerRemover:
    """Records removal requests instead of talking to docker.

    Attributes:
        removed: Names passed to remove(), in call order.
        existing: Names that count as existing containers.
        error: If set, remove() raises ContainerError with this message.
    """

    def __init__(self) -> None:
        self.removed: list[str] = []
        self.existing: set[str] = set()
        self.error: str | None = None

    def remove(self, name: str) -> bool:
        self.removed.append(name)
        if self.error:
            raise ContainerError(self.error)
        if name in self.existing:
            self.existing.discard(name)
            return True
        return False


def make_record(session_id: str, **overrides) -> dict:
    """Build a minimal valid session record."""
    record = {
        "sessionId": session_id,
        "type": "reversing",
        "status": "active",
        "createdAt": "2024-01-01T12:00:00.000Z",
    }
    record.update(overrides)
    return record
