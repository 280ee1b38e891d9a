#------------------------------------------
"""Author: Anselem Okeke
    MIT License
    Copyright (c) 2025 Anselem Okeke
    See LICENSE file in the project root for full license text.
"""
#------------------------------------------
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Optional


class ValidationError(ValueError):
    """Malformed invocation parameters; raised before any side effect."""


class ServiceStatus(str, Enum):
    RUNNING = "Running"
    STOPPED = "Stopped"
    UNKNOWN = "Unknown"
    NOT_FOUND = "NotFound"


class EventChannel(str, Enum):
    APPLICATION = "Application"
    SYSTEM = "System"


class EventId(IntEnum):
    NOT_FOUND = 0
    STARTED = 1
    START_FAILED = 2
    UNREACHABLE = 3
    RESTARTING_HOST = 4
    REBOOT_RUNNING = 5
    REBOOT_STOPPED = 6
    REBOOT_INDETERMINATE = 7
    LOCAL_REBOOT = 8


# ids 3 and 8 never reach the target host's log
REMOTE_EVENT_IDS = frozenset({
    EventId.NOT_FOUND,
    EventId.STARTED,
    EventId.START_FAILED,
    EventId.RESTARTING_HOST,
    EventId.REBOOT_RUNNING,
    EventId.REBOOT_STOPPED,
    EventId.REBOOT_INDETERMINATE,
})


class Outcome(Enum):
    """Final result of one invocation, value = (label, exit code)."""
    ALREADY_RUNNING = ("AlreadyRunning", 0)
    STARTED = ("Started", 0)
    REBOOTED_SUCCESS = ("RebootedSuccess", 0)
    STILL_STOPPED = ("StillStopped", 1)
    VALIDATION_FAILED = ("ValidationFailed", 2)
    UNREACHABLE = ("Unreachable", 3)
    NOT_FOUND = ("NotFound", 4)
    REBOOT_REQUESTED = ("RebootRequested", 5)
    REBOOTED_FAILURE = ("RebootedFailure", 6)
    REBOOT_INDETERMINATE = ("RebootIndeterminate", 7)
    STATUS_UNKNOWN = ("StatusUnknown", 8)

    @property
    def label(self) -> str:
        return self.value[0]

    @property
    def exit_code(self) -> int:
        return self.value[1]


@dataclass(frozen=True)
class InvocationConfig:
    service: str
    computer_name: str = ""
    reboot: bool = False
    tries: int = 1
    logging: bool = True
    event_log: EventChannel = EventChannel.APPLICATION

    @property
    def is_remote(self) -> bool:
        return bool(self.computer_name)

    @property
    def target(self) -> Optional[str]:
        """Host passed to collaborators; None means this machine."""
        return self.computer_name or None


@dataclass(frozen=True)
class CommandResult:
    cmd: tuple
    returncode: Optional[int] = None
    stdout: str = ""
    stderr: str = ""
    error: Optional[str] = None
    timed_out: bool = False
    dry_run: bool = False

    @property
    def ok(self) -> bool:
        if self.dry_run:
            return True
        return self.error is None and self.returncode == 0

    @property
    def message(self) -> str:
        """Best single-line explanation of what happened."""
        if self.error:
            return self.error
        text = (self.stderr or self.stdout or "").strip()
        return text.splitlines()[-1] if text else f"exit status {self.returncode}"


@dataclass(frozen=True)
class ServiceQuery:
    status: ServiceStatus
    detail: str = ""
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.error is not None
