"""End-to-end behaviour of one invocation against fake collaborators."""
import pytest

from conftest import NOT_FOUND, RUNNING, STOPPED, UNKNOWN, FakeProber, FakeRebootCommands
from svcguard.models import CommandResult, EventChannel, Outcome, ServiceQuery, ServiceStatus


class TestLocalScenarios:
    def test_starts_on_first_attempt(self, make_guard):
        guard, p = make_guard([STOPPED, RUNNING])
        assert guard.run() is Outcome.STARTED
        assert p["sink"].ids(None) == [1]
        assert len(p["controller"].starts) == 1
        assert p["commands"].calls == []
        assert p["sleeps"] == [20]

    def test_already_running_does_nothing(self, make_guard):
        guard, p = make_guard([RUNNING])
        assert guard.run() is Outcome.ALREADY_RUNNING
        assert p["controller"].starts == []
        assert p["sink"].writes == []

    def test_never_starts_three_tries_then_local_reboot(self, make_guard):
        guard, p = make_guard([STOPPED], tries=3, reboot="yes")
        assert guard.run() is Outcome.REBOOT_REQUESTED
        assert p["sink"].ids(None) == [2, 2, 2, 8]
        assert p["commands"].calls == [("local",)]

    def test_reboot_false_never_reboots(self, make_guard):
        guard, p = make_guard([STOPPED], tries=3, reboot="False")
        assert guard.run() is Outcome.STILL_STOPPED
        assert p["sink"].ids(None) == [2, 2, 2]
        assert p["commands"].calls == []

    def test_missing_service_skips_loop(self, make_guard):
        guard, p = make_guard([NOT_FOUND], tries=4, reboot=True)
        assert guard.run() is Outcome.NOT_FOUND
        assert p["sink"].writes == [(None, 0, "Service Spooler does not exist")]
        assert p["controller"].starts == []
        assert p["commands"].calls == []

    def test_local_mode_never_probes(self, make_guard):
        prober = FakeProber(reachable=False)
        guard, p = make_guard([STOPPED, RUNNING], prober=prober)
        guard.run()
        assert prober.hosts == []
        assert 3 not in p["sink"].ids(None)

    def test_local_reboot_not_scheduled(self, make_guard):
        commands = FakeRebootCommands(local_result=CommandResult(cmd=("shutdown",), returncode=1, stderr="denied"))
        guard, p = make_guard([STOPPED], reboot=True, reboot_commands=commands)
        assert guard.run() is Outcome.STILL_STOPPED
        assert 8 not in p["sink"].ids(None)


class TestRetryLoop:
    @pytest.mark.parametrize("tries", [1, 2, 3, 4])
    def test_attempts_bounded_by_tries(self, make_guard, tries):
        guard, p = make_guard([STOPPED], tries=tries)
        guard.run()
        assert len(p["controller"].starts) == tries
        assert p["sleeps"] == [20] * tries

    def test_stops_as_soon_as_running(self, make_guard):
        guard, p = make_guard([STOPPED, STOPPED, RUNNING], tries=4)
        assert guard.run() is Outcome.STARTED
        assert len(p["controller"].starts) == 2
        assert p["sink"].ids(None) == [2, 1]

    def test_failed_start_command_is_not_an_outcome(self, make_guard):
        denied = CommandResult(cmd=("sc.exe",), returncode=5, stderr="Access is denied.")
        guard, p = make_guard([STOPPED, RUNNING], start_result=denied)
        assert guard.run() is Outcome.STARTED

    def test_unknown_status_consumes_attempt_without_event(self, make_guard):
        guard, p = make_guard([STOPPED, ServiceQuery(UNKNOWN, error="RPC server unavailable")], tries=2, reboot=True)
        assert guard.run() is Outcome.STATUS_UNKNOWN
        assert len(p["controller"].starts) == 2
        assert p["sink"].writes == []
        assert p["commands"].calls == []

    def test_unknown_initial_status_still_attempts_start(self, make_guard):
        guard, p = make_guard([UNKNOWN, RUNNING])
        assert guard.run() is Outcome.STARTED
        assert len(p["controller"].starts) == 1


class TestRemoteScenarios:
    def test_unreachable_host(self, make_guard):
        prober = FakeProber(reachable=False)
        guard, p = make_guard([STOPPED], computer_name="host1", prober=prober)
        assert guard.run() is Outcome.UNREACHABLE
        assert p["sink"].writes == [(None, 3, "Unable to connect to host1")]
        assert p["controller"].calls == []
        assert prober.hosts == ["host1"]

    def test_missing_service_logged_on_both_hosts(self, make_guard):
        guard, p = make_guard([NOT_FOUND], computer_name="host1")
        assert guard.run() is Outcome.NOT_FOUND
        assert p["sink"].ids(None) == [0]
        assert p["sink"].ids("host1") == [0]
        assert p["sink"].writes[0][2] == "Service Spooler does not exist on host1"

    def test_reboot_then_running(self, make_guard):
        guard, p = make_guard([STOPPED, STOPPED, RUNNING], computer_name="host1", reboot=True)
        assert guard.run() is Outcome.REBOOTED_SUCCESS
        assert p["sink"].ids(None) == [2, 4, 5]
        assert p["sink"].ids("host1") == [2, 4, 5]
        assert p["commands"].calls == [("remote", "host1")]
        assert p["sleeps"] == [20, 20]

    def test_reboot_then_still_stopped(self, make_guard):
        guard, p = make_guard([STOPPED], computer_name="host1", reboot=True, tries=2)
        assert guard.run() is Outcome.REBOOTED_FAILURE
        assert p["sink"].ids(None) == [2, 2, 4, 6]

    def test_reboot_then_unknown(self, make_guard):
        guard, p = make_guard([STOPPED, STOPPED, UNKNOWN], computer_name="host1", reboot=True)
        assert guard.run() is Outcome.REBOOT_INDETERMINATE
        assert p["sink"].ids("host1") == [2, 4, 7]

    def test_reboot_timeout_is_indeterminate(self, make_guard):
        timed_out = CommandResult(cmd=("ssh",), error="host1 did not come back within 300s", timed_out=True)
        guard, p = make_guard([STOPPED], computer_name="host1", reboot=True,
                              reboot_commands=FakeRebootCommands(remote_result=timed_out))
        assert guard.run() is Outcome.REBOOT_INDETERMINATE
        assert p["sink"].ids(None) == [2, 4, 7]
        # no post-reboot query after a timeout
        assert [c[0] for c in p["controller"].calls] == ["query", "start", "query"]

    def test_remote_calls_target_host(self, make_guard):
        guard, p = make_guard([STOPPED, RUNNING], computer_name="host1")
        guard.run()
        assert {c[1] for c in p["controller"].calls} == {"host1"}


class TestEventLogOptions:
    def test_logging_disabled_writes_nothing(self, make_guard):
        guard, p = make_guard([STOPPED], tries=2, logging="no", computer_name="host1", reboot=True)
        assert guard.run() is Outcome.REBOOTED_FAILURE
        assert p["sink"].writes == []
        assert p["sink"].registrations == []

    def test_system_channel(self, make_guard):
        guard, p = make_guard([STOPPED, RUNNING], event_log="system")
        guard.run()
        assert p["sink"].registrations == [(None, EventChannel.SYSTEM, "ServiceGuard")]


def test_outcome_exit_codes_distinguish_results():
    codes = {o.exit_code for o in Outcome if o not in (Outcome.ALREADY_RUNNING, Outcome.REBOOTED_SUCCESS)}
    assert len(codes) == len(Outcome) - 2
    assert Outcome.STARTED.exit_code == 0
    assert Outcome.VALIDATION_FAILED.exit_code == 2
    assert ServiceStatus("Running") is RUNNING
