# eventlog/core.py
#------------------------------------------
"""Author: Anselem Okeke
    MIT License
    Copyright (c) 2025 Anselem Okeke
    See LICENSE file in the project root for full license text.
"""
#------------------------------------------
from svcguard.models import CommandResult, EventChannel
from svcguard.monitor.service_monitor import resolve_backend
from svcguard.runner import powershell_cmd, ps_quote, run_command, ssh_wrap

# -------------------------
# Windows Event Log (Windows PowerShell 5.1 cmdlets)
# -------------------------
ALREADY_REGISTERED_MARKERS = ("already registered", "already exists")


class WindowsEventLogSink:
    def __init__(self, settings, runner=run_command):
        self.settings = settings
        self.runner = runner

    def _run(self, script):
        return self.runner(
            powershell_cmd(script),
            timeout_s=self.settings.command_timeout_s,
            mutating=True,
            dry_run=self.settings.dry_run,
        )

    @staticmethod
    def _target(host):
        return f" -ComputerName {ps_quote(host)}" if host else ""

    def register_source(self, host, channel, source):
        """Create-if-absent; an existing source counts as success."""
        script = (
            f"New-EventLog -LogName {ps_quote(channel.value)} -Source {ps_quote(source)}"
            f"{self._target(host)} -ErrorAction Stop"
        )
        result = self._run(script)
        if not result.ok and any(m in result.message.lower() or m in result.stderr.lower()
                                 for m in ALREADY_REGISTERED_MARKERS):
            return CommandResult(cmd=result.cmd, returncode=0, stdout=result.stdout, stderr=result.stderr)
        return result

    def write(self, host, channel, source, event_id, entry_type, message):
        script = (
            f"Write-EventLog -LogName {ps_quote(channel.value)} -Source {ps_quote(source)}"
            f" -EventId {int(event_id)} -EntryType {entry_type} -Message {ps_quote(message)}"
            f"{self._target(host)} -ErrorAction Stop"
        )
        return self._run(script)


# -------------------------
# syslog via logger(1)
# -------------------------
SYSLOG_FACILITY = {
    EventChannel.APPLICATION: "user",
    EventChannel.SYSTEM: "daemon",
}
SYSLOG_PRIORITY = {
    "Information": "info",
    "Warning": "warning",
    "Error": "err",
}


class SyslogSink:
    def __init__(self, settings, runner=run_command):
        self.settings = settings
        self.runner = runner

    def register_source(self, host, channel, source):
        # syslog tags need no registration
        return CommandResult(cmd=(), returncode=0)

    def write(self, host, channel, source, event_id, entry_type, message):
        facility = SYSLOG_FACILITY[channel]
        priority = SYSLOG_PRIORITY.get(entry_type, "notice")
        cmd = ["logger", "-t", source, "-p", f"{facility}.{priority}", f"[{int(event_id)}] {message}"]
        return self.runner(
            ssh_wrap(cmd, host, self.settings),
            timeout_s=self.settings.command_timeout_s,
            mutating=True,
            dry_run=self.settings.dry_run,
        )


def get_event_sink(settings, runner=run_command):
    if resolve_backend(settings) == "windows":
        return WindowsEventLogSink(settings, runner)
    return SyslogSink(settings, runner)
