"""ShareConfig — tunables for change-event delivery."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ShareConfig:
    """Configuration for a ``SharingService`` and its ``ChangeNotifier``."""

    subscriber_queue_size: int = 100
    """Pending events buffered per subscriber.  Further events are dropped until it drains."""

    send_timeout: float = 5.0
    """Seconds a single channel send may take before it counts as failed."""

    drop_failed_channels: bool = True
    """If True, a channel whose send raises or times out is unsubscribed."""

    def __post_init__(self) -> None:
        if self.subscriber_queue_size < 1:
            msg = f"subscriber_queue_size must be >= 1, got {self.subscriber_queue_size}"
            raise ValueError(msg)
        if self.send_timeout <= 0:
            msg = f"send_timeout must be > 0, got {self.send_timeout}"
            raise ValueError(msg)
