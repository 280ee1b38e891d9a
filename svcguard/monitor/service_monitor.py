#------------------------------------------
"""Author: Anselem Okeke
    MIT License
    Copyright (c) 2025 Anselem Okeke
    See LICENSE file in the project root for full license text.
"""
#------------------------------------------
import os
import platform

import psutil

from svcguard.models import ServiceQuery, ServiceStatus, ValidationError
from svcguard.runner import run_command, ssh_wrap

SC_SERVICE_DOES_NOT_EXIST = 1060

# ---------- helpers ----------

def normalize_unit_name(unit: str) -> str:
    u = (unit or "").strip()
    # turn "/etc/systemd/system/foo.service" into "foo.service"
    u = os.path.basename(u) if "/" in u else u
    if "." not in u:
        u = f"{u}.service"
    return u


def normalize_windows_state(raw_state: str) -> ServiceStatus:
    r = (raw_state or "").strip().lower()
    if r == "running":
        return ServiceStatus.RUNNING
    if r == "stopped":
        return ServiceStatus.STOPPED
    # start_pending, stop_pending, paused, ...
    return ServiceStatus.UNKNOWN


def normalize_active_state(active_state: str) -> ServiceStatus:
    s = (active_state or "").strip().lower()
    if s in ("active", "reloading"):
        return ServiceStatus.RUNNING
    if s in ("inactive", "failed", "dead"):
        return ServiceStatus.STOPPED
    # activating / deactivating are neither
    return ServiceStatus.UNKNOWN


def parse_sc_state(output: str):
    """Pull the state word out of `sc.exe query` output ("STATE : 4  RUNNING")."""
    for line in (output or "").splitlines():
        line = line.strip()
        if line.startswith("STATE"):
            parts = line.partition(":")[2].strip().split()
            if len(parts) >= 2:
                return parts[1]
    return None


def parse_systemctl_show(output: str) -> dict:
    return dict(
        (k.strip(), v.strip())
        for line in (output or "").splitlines() if "=" in line
        for k, v in [line.split("=", 1)]
    )

# ---------- controllers ----------

class ServiceController:
    """
    Query and start one named service on this host (host=None) or a remote one.

    query() never raises: infrastructure failures come back as
    ServiceQuery(status=Unknown, error=...), a missing service as NotFound.
    start() is best-effort and returns the CommandResult untouched.
    """

    def __init__(self, settings, runner=run_command):
        self.settings = settings
        self.runner = runner

    def query(self, host, name) -> ServiceQuery:
        raise NotImplementedError

    def start(self, host, name):
        raise NotImplementedError

    def exists(self, host, name) -> bool:
        return self.query(host, name).status is not ServiceStatus.NOT_FOUND

    def status(self, host, name) -> ServiceStatus:
        return self.query(host, name).status

    def _run(self, cmd, mutating=False):
        return self.runner(
            cmd,
            timeout_s=self.settings.command_timeout_s,
            mutating=mutating,
            dry_run=self.settings.dry_run,
        )


class WindowsServiceController(ServiceController):
    """sc.exe for remote hosts and starts, psutil for local queries."""

    @staticmethod
    def sc_cmd(host, *args):
        cmd = ["sc.exe"]
        if host:
            cmd.append(f"\\\\{host}")
        cmd.extend(args)
        return cmd

    def query(self, host, name):
        if not host:
            return self._query_local(name)
        return self._from_sc(self._run(self.sc_cmd(host, "query", name)))

    def _query_local(self, name):
        try:
            raw = psutil.win_service_get(name).status()
        except psutil.NoSuchProcess:
            return ServiceQuery(ServiceStatus.NOT_FOUND, detail=f"{name} not installed")
        except (psutil.AccessDenied, OSError) as e:
            return ServiceQuery(ServiceStatus.UNKNOWN, error=f"service query failed: {e}")
        return ServiceQuery(normalize_windows_state(raw), detail=raw)

    @staticmethod
    def _from_sc(result):
        if result.error:
            return ServiceQuery(ServiceStatus.UNKNOWN, error=result.error)

        output = f"{result.stdout}\n{result.stderr}"
        if result.returncode == SC_SERVICE_DOES_NOT_EXIST or f"FAILED {SC_SERVICE_DOES_NOT_EXIST}" in output \
                or "does not exist as an installed service" in output:
            return ServiceQuery(ServiceStatus.NOT_FOUND, detail=output.strip())
        if result.returncode != 0:
            # 5 access denied, 1722 RPC server unavailable, ...
            return ServiceQuery(ServiceStatus.UNKNOWN, detail=output.strip(), error=result.message)

        raw = parse_sc_state(result.stdout)
        if raw is None:
            return ServiceQuery(ServiceStatus.UNKNOWN, detail=output.strip(), error="no STATE line in sc.exe output")
        return ServiceQuery(normalize_windows_state(raw), detail=raw)

    def start(self, host, name):
        return self._run(self.sc_cmd(host, "start", name), mutating=True)


class SystemdServiceController(ServiceController):
    """systemctl locally, systemctl over ssh for remote hosts."""

    def _needs_sudo(self, host):
        if host:
            return self.settings.remote_sudo
        return os.geteuid() != 0

    def systemctl_cmd(self, host, *args, privileged=False):
        cmd = ["systemctl", *args]
        if privileged and self._needs_sudo(host):
            cmd = ["sudo", "-n", *cmd]
        return ssh_wrap(cmd, host, self.settings)

    def query(self, host, name):
        unit = normalize_unit_name(name)
        result = self._run(self.systemctl_cmd(
            host, "show", unit, "--property=LoadState,ActiveState,SubState"))
        if result.error:
            return ServiceQuery(ServiceStatus.UNKNOWN, error=result.error)
        if result.returncode != 0:
            # ssh exits 255 on transport failure
            return ServiceQuery(ServiceStatus.UNKNOWN, error=result.message)

        fields = parse_systemctl_show(result.stdout)
        load_state = fields.get("LoadState", "").lower()
        if load_state == "not-found":
            return ServiceQuery(ServiceStatus.NOT_FOUND, detail=f"{unit} LoadState=not-found")
        if not load_state:
            return ServiceQuery(ServiceStatus.UNKNOWN, error=f"unexpected systemctl output for {unit}")

        active = fields.get("ActiveState", "unknown")
        sub_state = fields.get("SubState", "unknown")
        return ServiceQuery(normalize_active_state(active), detail=f"{active}/{sub_state}")

    def start(self, host, name):
        unit = normalize_unit_name(name)
        return self._run(self.systemctl_cmd(host, "start", unit, privileged=True), mutating=True)


def resolve_backend(settings):
    backend = (settings.backend or "auto").lower()
    if backend == "auto":
        return "windows" if platform.system() == "Windows" else "systemd"
    if backend not in ("windows", "systemd"):
        raise ValidationError(f"backend: expected auto, windows or systemd, got {settings.backend!r}")
    return backend


def get_service_controller(settings, runner=run_command):
    if resolve_backend(settings) == "windows":
        return WindowsServiceController(settings, runner)
    return SystemdServiceController(settings, runner)
