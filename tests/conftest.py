"""Shared fakes: scripted controller, recording event sink, fake reboot commands."""
import pytest

from svcguard.eventlog.event_logger import EventLogger
from svcguard.models import CommandResult, EventChannel, ServiceQuery, ServiceStatus
from svcguard.recovery.reboot import RebootCoordinator
from svcguard.recovery.service_recovery import ServiceGuard
from svcguard.utils.config_utils import Settings
from svcguard.utils.validate import build_invocation

OK = CommandResult(cmd=("fake",), returncode=0)


class FakeController:
    """Returns queued statuses; the last one repeats once the queue runs dry."""

    def __init__(self, statuses, start_result=OK):
        self.statuses = list(statuses)
        self.start_result = start_result
        self.calls = []

    def query(self, host, name):
        self.calls.append(("query", host, name))
        status = self.statuses.pop(0) if len(self.statuses) > 1 else self.statuses[0]
        if isinstance(status, ServiceQuery):
            return status
        return ServiceQuery(status)

    def start(self, host, name):
        self.calls.append(("start", host, name))
        return self.start_result

    @property
    def starts(self):
        return [c for c in self.calls if c[0] == "start"]


class RecordingSink:
    def __init__(self, register_result=OK, write_result=OK):
        self.register_result = register_result
        self.write_result = write_result
        self.registrations = []
        self.writes = []

    def register_source(self, host, channel, source):
        self.registrations.append((host, channel, source))
        return self.register_result

    def write(self, host, channel, source, event_id, entry_type, message):
        self.writes.append((host, int(event_id), message))
        return self.write_result

    def ids(self, host=None):
        return [eid for h, eid, _ in self.writes if h == host]


class FakeRebootCommands:
    def __init__(self, remote_result=OK, local_result=OK):
        self.remote_result = remote_result
        self.local_result = local_result
        self.calls = []

    def restart_remote(self, host):
        self.calls.append(("remote", host))
        return self.remote_result

    def restart_local(self):
        self.calls.append(("local",))
        return self.local_result


class FakeProber:
    def __init__(self, reachable=True):
        self.reachable = reachable
        self.hosts = []

    def __call__(self, host):
        self.hosts.append(host)
        return self.reachable


@pytest.fixture
def settings():
    return Settings(start_wait_s=20, post_reboot_wait_s=20, reboot_timeout_s=300, log_file="")


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def make_guard(settings, sink):
    """Build a ServiceGuard around fakes; returns (guard, parts) for assertions."""

    def _make(statuses, prober=None, reboot_commands=None, start_result=OK, **params):
        cfg = build_invocation(**{"service": "Spooler", **params})
        controller = FakeController(statuses, start_result=start_result)
        events = EventLogger(sink, settings.event_source, cfg.event_log, enabled=cfg.logging)
        commands = reboot_commands or FakeRebootCommands()
        sleeps = []
        rebooter = RebootCoordinator(controller, events, commands, settings, sleep=sleeps.append)
        prober = prober or FakeProber()
        guard = ServiceGuard(cfg, settings, controller, events, prober, rebooter, sleep=sleeps.append)
        parts = {
            "controller": controller,
            "events": events,
            "commands": commands,
            "prober": prober,
            "sleeps": sleeps,
            "sink": sink,
        }
        return guard, parts

    return _make


RUNNING = ServiceStatus.RUNNING
STOPPED = ServiceStatus.STOPPED
UNKNOWN = ServiceStatus.UNKNOWN
NOT_FOUND = ServiceStatus.NOT_FOUND
APPLICATION = EventChannel.APPLICATION
