"""EventStoreClient protocol consumed by the ingestion pipeline."""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    from crease.deliveries.models import DeliveryEvent


@typ.runtime_checkable
class EventStoreClient(typ.Protocol):
    """Append-only store for delivery events.

    A single instance is shared by every in-flight request, so
    implementations must be safe for concurrent use. The pipeline performs
    no locking of its own around these calls.

    """

    @property
    def connected(self) -> bool:
        """Return whether ``connect()`` has succeeded."""
        ...

    async def connect(self) -> bool:
        """Open the store, returning ``False`` when it is unreachable."""
        ...

    async def push_event(self, event: DeliveryEvent, *, validate: bool) -> str:
        """Append ``event`` and return its identifier.

        Parameters
        ----------
        event
            The delivery to append.
        validate
            Re-run domain validation inside the store before writing.

        Returns
        -------
        str
            Identifier of the stored event. An empty string signals that
            the write did not take effect.

        Raises
        ------
        EventStoreError
            If the store refuses or fails the write.

        """
        ...
