#------------------------------------------
"""Author: Anselem Okeke
    MIT License
    Copyright (c) 2025 Anselem Okeke
    See LICENSE file in the project root for full license text.
"""
#------------------------------------------
import shlex
import subprocess

from svcguard.models import CommandResult
from svcguard.utils.log_utils import get_logger

log = get_logger("svcguard.runner")


def run_command(cmd, timeout_s=30, *, mutating=False, dry_run=False):
    """
    Run a command and fold every failure mode into a CommandResult.

    Nothing raises out of here: a missing binary, a timeout or a non-zero
    exit all come back as data so callers can tell "command failed" apart
    from "service is stopped".
    :param cmd: argv list
    :param timeout_s: hard cap on wall time
    :param mutating: command changes state (start, reboot, event write)
    :param dry_run: skip mutating commands, report them as successful
    :return: CommandResult
    """
    argv = tuple(str(c) for c in cmd)
    if mutating and dry_run:
        log.info(f"[DRY-RUN] would run: {' '.join(argv)}")
        return CommandResult(cmd=argv, returncode=0, dry_run=True)

    log.debug(f"run: {' '.join(argv)} (timeout={timeout_s}s)")
    try:
        r = subprocess.run(list(argv), capture_output=True, text=True, timeout=timeout_s)
    except subprocess.TimeoutExpired:
        return CommandResult(cmd=argv, error=f"{argv[0]} timed out after {timeout_s}s", timed_out=True)
    except OSError as e:
        return CommandResult(cmd=argv, error=f"{argv[0]}: {e}")

    return CommandResult(
        cmd=argv,
        returncode=r.returncode,
        stdout=r.stdout or "",
        stderr=r.stderr or "",
    )


def ssh_wrap(cmd, host, settings):
    """Run cmd on host over ssh; no host means run it here unchanged."""
    if not host:
        return list(cmd)
    dest = f"{settings.ssh_user}@{host}" if settings.ssh_user else host
    return [
        "ssh",
        "-o", "BatchMode=yes",
        "-o", f"ConnectTimeout={settings.ssh_connect_timeout_s}",
        dest,
        shlex.join(str(c) for c in cmd),
    ]


def ps_quote(value) -> str:
    return "'" + str(value).replace("'", "''") + "'"


def powershell_cmd(script: str):
    return ["powershell.exe", "-NoProfile", "-NonInteractive", "-Command", script]
