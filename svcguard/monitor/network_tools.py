#------------------------------------------
"""Author: Anselem Okeke
    MIT License
    Copyright (c) 2025 Anselem Okeke
    See LICENSE file in the project root for full license text.
"""
#------------------------------------------
import platform

from svcguard.runner import run_command
from svcguard.utils.log_utils import get_logger

log = get_logger("svcguard.network")


def build_ping_cmd(target, count=1, timeout=2, system=None):
    system = system or platform.system()
    if system == "Windows":
        return ["ping", "-n", str(count), "-w", str(int(timeout * 1000)), target]
    return ["ping", "-c", str(count), "-W", str(int(timeout)), target]


def ping_host(target, count=1, timeout=2, runner=run_command):
    """
    Ping target IP or hostname to verify connectivity.
    Single probe, no retry: the caller decides what unreachable means.
    :param target: hostname
    :param count: echo requests in the probe
    :param timeout: per-reply wait in seconds
    :return: bool
    """
    cmd = build_ping_cmd(target, count, timeout)
    # overall cap: every echo may wait the full reply timeout
    result = runner(cmd, timeout_s=count * timeout + 5)
    if result.error:
        log.warning(f"ping {target} could not run: {result.error}")
        return False

    out = result.stdout or ""
    # Windows ping exits 0 on "Destination host unreachable" replies
    if "unreachable" in out.lower() and "ttl=" not in out.lower():
        return False
    return result.returncode == 0


def make_prober(settings, runner=run_command):
    """Bind the probe to configured count/timeout."""
    def probe(host):
        reachable = ping_host(host, settings.ping_count, settings.ping_timeout_s, runner)
        log.info(f"connectivity {host}: {'reachable' if reachable else 'unreachable'}")
        return reachable
    return probe
