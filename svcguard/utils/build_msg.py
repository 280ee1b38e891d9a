from svcguard.models import EventId

ENTRY_TYPES = {
    EventId.NOT_FOUND: "Error",
    EventId.STARTED: "Information",
    EventId.START_FAILED: "Warning",
    EventId.UNREACHABLE: "Error",
    EventId.RESTARTING_HOST: "Warning",
    EventId.REBOOT_RUNNING: "Information",
    EventId.REBOOT_STOPPED: "Error",
    EventId.REBOOT_INDETERMINATE: "Error",
    EventId.LOCAL_REBOOT: "Warning",
}


def _on(host):
    return f" on {host}" if host else ""


def build_msg(event_id, service="", host=None):
    """Render the event text for an id; host is None in local mode."""
    event_id = EventId(event_id)
    if event_id is EventId.NOT_FOUND:
        return f"Service {service} does not exist{_on(host)}"
    if event_id is EventId.STARTED:
        return f"{service} Started{_on(host)}"
    if event_id is EventId.START_FAILED:
        return f"{service} failed to start{_on(host)}"
    if event_id is EventId.UNREACHABLE:
        return f"Unable to connect to {host}"
    if event_id is EventId.RESTARTING_HOST:
        return f"Restarting {host}"
    if event_id is EventId.REBOOT_RUNNING:
        return f"{service} is running{_on(host)} after reboot"
    if event_id is EventId.REBOOT_STOPPED:
        return f"{service} failed to start{_on(host)} after reboot"
    if event_id is EventId.REBOOT_INDETERMINATE:
        return f"Unable to determine status of {service}{_on(host)} after reboot"
    return f"Rebooting Computer to see if {service} will start"
