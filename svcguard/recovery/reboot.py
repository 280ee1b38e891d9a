#------------------------------------------
"""Author: Anselem Okeke
    MIT License
    Copyright (c) 2025 Anselem Okeke
    See LICENSE file in the project root for full license text.
"""
#------------------------------------------
import os
import time

from svcguard.models import CommandResult, EventId, Outcome, ServiceStatus
from svcguard.monitor.service_monitor import resolve_backend
from svcguard.runner import powershell_cmd, ps_quote, run_command, ssh_wrap
from svcguard.utils.build_msg import build_msg
from svcguard.utils.log_utils import get_logger

log = get_logger("svcguard.reboot")

# --- platform reboot commands ---------------------------------------------

class WindowsRebootCommands:
    def __init__(self, settings, runner=run_command):
        self.settings = settings
        self.runner = runner

    def restart_remote(self, host):
        """Restart-Computer blocks until WinRM answers again or the timeout expires."""
        timeout = int(self.settings.reboot_timeout_s)
        script = (
            f"Restart-Computer -ComputerName {ps_quote(host)} -Force -Wait -For WinRM"
            f" -Timeout {timeout} -Delay 2 -ErrorAction Stop"
        )
        result = self.runner(
            powershell_cmd(script),
            timeout_s=timeout + 60,
            mutating=True,
            dry_run=self.settings.dry_run,
        )
        if not result.ok and "timeout" in result.message.lower():
            return CommandResult(cmd=result.cmd, returncode=result.returncode, stdout=result.stdout,
                                 stderr=result.stderr, error=result.message, timed_out=True)
        return result

    def restart_local(self):
        delay = int(self.settings.local_reboot_delay_s)
        cmd = ["shutdown", "/r", "/t", str(delay), "/c", "Service Guard: restarting to recover a stopped service"]
        return self.runner(cmd, timeout_s=self.settings.command_timeout_s,
                           mutating=True, dry_run=self.settings.dry_run)


class SystemdRebootCommands:
    def __init__(self, settings, runner=run_command, sleep=time.sleep, clock=time.monotonic):
        self.settings = settings
        self.runner = runner
        self.sleep = sleep
        self.clock = clock

    def _ssh_alive(self, host):
        r = self.runner(ssh_wrap(["true"], host, self.settings),
                        timeout_s=self.settings.ssh_connect_timeout_s + 5)
        return r.ok

    def restart_remote(self, host):
        cmd = ["systemctl", "reboot"]
        if self.settings.remote_sudo:
            cmd = ["sudo", "-n", *cmd]
        issued = self.runner(ssh_wrap(cmd, host, self.settings),
                             timeout_s=self.settings.command_timeout_s,
                             mutating=True, dry_run=self.settings.dry_run)
        if issued.dry_run:
            return issued
        # ssh exits 255 or hangs until the timeout when the host goes down under it
        if not issued.timed_out and (issued.error or issued.returncode not in (0, 255)):
            return issued

        deadline = self.clock() + self.settings.reboot_timeout_s
        went_down = False
        while self.clock() < deadline:
            self.sleep(self.settings.reboot_poll_interval_s)
            alive = self._ssh_alive(host)
            if not went_down:
                went_down = not alive
                continue
            if alive:
                return CommandResult(cmd=issued.cmd, returncode=0, stdout=f"{host} back online")

        phase = "come back" if went_down else "go down"
        return CommandResult(
            cmd=issued.cmd,
            error=f"{host} did not {phase} within {int(self.settings.reboot_timeout_s)}s",
            timed_out=True,
        )

    def restart_local(self):
        delay = int(self.settings.local_reboot_delay_s)
        cmd = ["systemd-run", f"--on-active={delay}", "systemctl", "reboot"]
        if os.geteuid() != 0:
            cmd = ["sudo", "-n", *cmd]
        return self.runner(cmd, timeout_s=self.settings.command_timeout_s,
                           mutating=True, dry_run=self.settings.dry_run)


def get_reboot_commands(settings, runner=run_command):
    if resolve_backend(settings) == "windows":
        return WindowsRebootCommands(settings, runner)
    return SystemdRebootCommands(settings, runner)

# --- coordinator ------------------------------------------------------------

class RebootCoordinator:
    """
    Last resort once the retry loop leaves the service Stopped.

    Remote: restart and block (bounded), then verify the service once and
    report Event 5, 6 or 7. Local: schedule the restart, report Event 8 and
    stop; this process does not survive to verify anything.
    """

    def __init__(self, controller, events, commands, settings, sleep=time.sleep):
        self.controller = controller
        self.events = events
        self.commands = commands
        self.settings = settings
        self.sleep = sleep

    def reboot(self, cfg):
        if cfg.is_remote:
            return self._reboot_remote(cfg)
        return self._reboot_local(cfg)

    def _reboot_remote(self, cfg):
        host = cfg.computer_name
        log.warning(f"{cfg.service} still stopped on {host}; restarting host "
                    f"(wait up to {int(self.settings.reboot_timeout_s)}s)")
        result = self.commands.restart_remote(host)
        self.events.emit(EventId.RESTARTING_HOST, build_msg(EventId.RESTARTING_HOST, cfg.service, host),
                         remote_host=host)

        if not result.ok:
            if result.timed_out:
                log.error(f"restart of {host} timed out: {result.message}")
            else:
                log.error(f"restart of {host} refused: {result.message}")
            self.events.emit(EventId.REBOOT_INDETERMINATE,
                             build_msg(EventId.REBOOT_INDETERMINATE, cfg.service, host), remote_host=host)
            return Outcome.REBOOT_INDETERMINATE

        self.sleep(self.settings.post_reboot_wait_s)
        q = self.controller.query(host, cfg.service)
        if q.status is ServiceStatus.RUNNING:
            self.events.emit(EventId.REBOOT_RUNNING,
                             build_msg(EventId.REBOOT_RUNNING, cfg.service, host), remote_host=host)
            return Outcome.REBOOTED_SUCCESS
        if q.status is ServiceStatus.STOPPED:
            self.events.emit(EventId.REBOOT_STOPPED,
                             build_msg(EventId.REBOOT_STOPPED, cfg.service, host), remote_host=host)
            return Outcome.REBOOTED_FAILURE

        if q.error:
            log.error(f"post-reboot query of {cfg.service} on {host} failed: {q.error}")
        self.events.emit(EventId.REBOOT_INDETERMINATE,
                         build_msg(EventId.REBOOT_INDETERMINATE, cfg.service, host), remote_host=host)
        return Outcome.REBOOT_INDETERMINATE

    def _reboot_local(self, cfg):
        result = self.commands.restart_local()
        if not result.ok:
            log.error(f"local reboot could not be scheduled: {result.message}")
            return Outcome.STILL_STOPPED
        log.warning(f"reboot scheduled in {self.settings.local_reboot_delay_s}s")
        self.events.emit(EventId.LOCAL_REBOOT, build_msg(EventId.LOCAL_REBOOT, cfg.service))
        return Outcome.REBOOT_REQUESTED
