#!/usr/bin/env python3
#------------------------------------------
"""Author: Anselem Okeke
    MIT License
    Copyright (c) 2025 Anselem Okeke
    See LICENSE file in the project root for full license text.



     Service Guard (entrypoint)
        - Checks one service on this host or a remote one
        - Starts it up to --tries times, optionally reboots the host
        - Writes numbered events to the local (and remote) event log
        - Exit code tells automation what happened

        HOW TO RUN IT
          local, three tries, reboot if still stopped
            svcguard -s Spooler -t 3 -r yes

          remote host, System log
            svcguard -s Spooler -cn host1 -e System

          show what would happen without starting or rebooting anything
            DRY_RUN=true svcguard -s nginx
"""
#------------------------------------------
import argparse
import sys
from dataclasses import replace

from svcguard import __version__
from svcguard.models import Outcome, ValidationError
from svcguard.recovery.service_recovery import build_service_guard
from svcguard.utils.config_utils import load_settings
from svcguard.utils.log_utils import get_logger, setup_logging
from svcguard.utils.validate import build_invocation

log = get_logger("svcguard")


def build_parser():
    parser = argparse.ArgumentParser(
        prog="svcguard",
        description="Make sure a service is running; retry, reboot and log the outcome.",
    )
    parser.add_argument("-s", "--service", required=True, help="Service name")
    parser.add_argument("-cn", "--computer-name", default="", help="Target host (empty = this host)")
    parser.add_argument("-r", "--reboot", default="False", help="Reboot if still stopped: True/False/1/0/Yes/No")
    parser.add_argument("-t", "--tries", default="1", help="Start attempts, 1-4")
    parser.add_argument("-l", "--logging", default="True", help="Write event log records: True/False/1/0/Yes/No")
    parser.add_argument("-e", "--event-log", default="Application", help="Application or System")
    parser.add_argument("--config", default=None, help="Settings JSON (default: SVCGUARD_CONFIG, ./config/service_guard.json, then the packaged default)")
    parser.add_argument("--dry-run", action="store_true", help="Log start/reboot/event commands instead of running them")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    settings = load_settings(args.config)
    if args.dry_run:
        settings = replace(settings, dry_run=True)
    setup_logging("DEBUG" if args.verbose else settings.log_level, settings.log_file)

    try:
        cfg = build_invocation(
            service=args.service,
            computer_name=args.computer_name,
            reboot=args.reboot,
            tries=args.tries,
            logging=args.logging,
            event_log=args.event_log,
        )
        guard = build_service_guard(cfg, settings)
    except ValidationError as e:
        log.error(f"invalid input: {e}")
        return Outcome.VALIDATION_FAILED.exit_code

    if settings.dry_run:
        log.info("dry run: start, reboot and event log commands are not executed")

    try:
        outcome = guard.run()
    except KeyboardInterrupt:
        log.warning("interrupted by user")
        return 130

    log.info(f"outcome={outcome.label} exit={outcome.exit_code}")
    return outcome.exit_code


if __name__ == "__main__":
    sys.exit(main())
