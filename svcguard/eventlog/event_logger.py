# eventlog/event_logger.py: routes events to the local and target host logs
#------------------------------------------
"""Author: Anselem Okeke
    MIT License
    Copyright (c) 2025 Anselem Okeke
    See LICENSE file in the project root for full license text.
"""
#------------------------------------------
from svcguard.models import REMOTE_EVENT_IDS, EventId
from svcguard.utils.build_msg import ENTRY_TYPES
from svcguard.utils.log_utils import get_logger

log = get_logger("svcguard.eventlog")


class EventLogger:
    """
    Emit numbered events to the event channel of this host and, for remote
    invocations, of the target host too.

    Sources are registered lazily, at most once per (host, channel). Ids 3
    (target unreachable) and 8 (local reboot) are only ever written locally.
    With enabled=False nothing reaches the event log; records still go to
    the application log.
    """

    def __init__(self, sink, source, channel, enabled=True):
        self.sink = sink
        self.source = source
        self.channel = channel
        self.enabled = enabled
        self._registered = set()

    def ensure_source(self, host=None):
        key = (host or "", self.channel)
        if key in self._registered:
            return True
        result = self.sink.register_source(host, self.channel, self.source)
        if not result.ok:
            log.error(f"could not register event source {self.source} in "
                      f"{self.channel.value} on {host or 'local host'}: {result.message}")
            return False
        self._registered.add(key)
        return True

    def _write(self, host, event_id, message):
        self.ensure_source(host)
        result = self.sink.write(host, self.channel, self.source, event_id,
                                 ENTRY_TYPES[event_id], message)
        if not result.ok:
            log.error(f"event {int(event_id)} not written on {host or 'local host'}: {result.message}")

    def emit(self, event_id, message, remote_host=None):
        event_id = EventId(event_id)
        level = "info" if ENTRY_TYPES[event_id] == "Information" else "warning"
        getattr(log, level)(f"event {int(event_id)}: {message}")

        if not self.enabled:
            return
        self._write(None, event_id, message)
        if remote_host and event_id in REMOTE_EVENT_IDS:
            self._write(remote_host, event_id, message)
