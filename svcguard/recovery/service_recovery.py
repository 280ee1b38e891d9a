#------------------------------------------
"""Author: Anselem Okeke
    MIT License
    Copyright (c) 2025 Anselem Okeke
    See LICENSE file in the project root for full license text.
"""
#------------------------------------------
import time

from svcguard.eventlog.core import get_event_sink
from svcguard.eventlog.event_logger import EventLogger
from svcguard.models import EventId, Outcome, ServiceStatus
from svcguard.monitor.network_tools import make_prober
from svcguard.monitor.service_monitor import get_service_controller
from svcguard.recovery.reboot import RebootCoordinator, get_reboot_commands
from svcguard.utils.build_msg import build_msg
from svcguard.utils.log_utils import get_logger

log = get_logger("svcguard.recovery")


class ServiceGuard:
    """
    One invocation: make sure a single service is running on a single host.

    Local and remote runs share this path; cfg.target is None for the local
    host and every collaborator treats None as "this machine".
    """

    def __init__(self, cfg, settings, controller, events, prober, rebooter, sleep=time.sleep):
        self.cfg = cfg
        self.settings = settings
        self.controller = controller
        self.events = events
        self.prober = prober
        self.rebooter = rebooter
        self.sleep = sleep

    def _emit(self, event_id):
        self.events.emit(event_id, build_msg(event_id, self.cfg.service, self.cfg.target),
                         remote_host=self.cfg.target)

    def _query(self):
        q = self.controller.query(self.cfg.target, self.cfg.service)
        if q.error:
            log.warning(f"status query for {self.cfg.service} failed: {q.error}")
        return q

    def retry_loop(self, status):
        """
        Start/wait/evaluate until Running or out of tries.
        Returns the last observed status and how many attempts were made.
        """
        cfg = self.cfg
        remaining = cfg.tries
        attempts = 0
        while status is not ServiceStatus.RUNNING and remaining > 0:
            attempts += 1
            log.info(f"[{attempts}/{cfg.tries}] starting {cfg.service}")
            started = self.controller.start(cfg.target, cfg.service)
            if not started.ok:
                log.warning(f"start command for {cfg.service} failed: {started.message}")

            self.sleep(self.settings.start_wait_s)
            status = self._query().status

            if status is ServiceStatus.RUNNING:
                self._emit(EventId.STARTED)
            elif status is ServiceStatus.STOPPED:
                self._emit(EventId.START_FAILED)
            else:
                log.warning(f"{cfg.service} is {status.value} after attempt {attempts}")
            remaining -= 1
        return status, attempts

    def run(self):
        cfg = self.cfg
        where = cfg.computer_name or "local host"
        log.info(f"checking {cfg.service} on {where} (tries={cfg.tries}, reboot={cfg.reboot})")

        if cfg.is_remote and not self.prober(cfg.computer_name):
            # the remote log is out of reach by definition
            self.events.emit(EventId.UNREACHABLE, build_msg(EventId.UNREACHABLE, cfg.service, cfg.computer_name))
            return Outcome.UNREACHABLE

        q = self._query()
        if q.status is ServiceStatus.NOT_FOUND:
            self._emit(EventId.NOT_FOUND)
            return Outcome.NOT_FOUND

        if q.status is ServiceStatus.RUNNING:
            log.info(f"{cfg.service} already running on {where}")
            return Outcome.ALREADY_RUNNING

        status, attempts = self.retry_loop(q.status)
        if status is ServiceStatus.RUNNING:
            log.info(f"{cfg.service} running on {where} after {attempts} attempt(s)")
            return Outcome.STARTED

        if status is ServiceStatus.STOPPED and cfg.reboot:
            return self.rebooter.reboot(cfg)

        if status is ServiceStatus.STOPPED:
            log.error(f"{cfg.service} still stopped on {where} after {attempts} attempt(s)")
            return Outcome.STILL_STOPPED

        log.error(f"{cfg.service} status on {where} is {status.value}; no reboot attempted")
        return Outcome.STATUS_UNKNOWN


def build_service_guard(cfg, settings):
    """Wire the platform collaborators for a real run."""
    controller = get_service_controller(settings)
    events = EventLogger(get_event_sink(settings), settings.event_source, cfg.event_log, enabled=cfg.logging)
    rebooter = RebootCoordinator(controller, events, get_reboot_commands(settings), settings)
    return ServiceGuard(cfg, settings, controller, events, make_prober(settings), rebooter)
