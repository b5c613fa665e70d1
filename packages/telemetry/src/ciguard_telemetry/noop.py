"""No-op sink: used when no telemetry token is configured."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ciguard_telemetry.base import BaseSink

if TYPE_CHECKING:
    from ciguard_telemetry.models import RunMetadata


class NoOpSink(BaseSink):
    """Silently discards all events.

    Lets the CLI always call sink.send_all() without checking whether
    telemetry is configured.
    """

    def send(self, event: dict, metadata: RunMetadata) -> bool:
        return False
