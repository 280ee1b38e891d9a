#------------------------------------------
"""Author: Anselem Okeke
    MIT License
    Copyright (c) 2025 Anselem Okeke
    See LICENSE file in the project root for full license text.
"""
#------------------------------------------
from svcguard.models import EventChannel, InvocationConfig, ValidationError

TRUE_TOKENS = ("true", "1", "yes")
FALSE_TOKENS = ("false", "0", "no")
ALLOWED_TRIES = (1, 2, 3, 4)


def parse_bool(value, field="value"):
    if isinstance(value, bool):
        return value
    token = str(value if value is not None else "").strip().lower()
    if token in TRUE_TOKENS:
        return True
    if token in FALSE_TOKENS:
        return False
    raise ValidationError(f"{field}: expected one of True/False/1/0/Yes/No, got {value!r}")


def parse_tries(value):
    if isinstance(value, bool):
        raise ValidationError(f"Tries: expected 1-4, got {value!r}")
    try:
        tries = int(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationError(f"Tries: expected 1-4, got {value!r}") from None
    if tries not in ALLOWED_TRIES:
        raise ValidationError(f"Tries: expected 1-4, got {tries}")
    return tries


def parse_channel(value):
    if isinstance(value, EventChannel):
        return value
    token = str(value if value is not None else "").strip().lower()
    for channel in EventChannel:
        if channel.value.lower() == token:
            return channel
    raise ValidationError(f"EventLog: expected Application or System, got {value!r}")


def build_invocation(service, computer_name="", reboot=False, tries=1,
                     logging=True, event_log="Application"):
    """Normalise raw CLI input into the immutable InvocationConfig."""
    name = (service or "").strip()
    if not name:
        raise ValidationError("Service: a service name is required")

    return InvocationConfig(
        service=name,
        computer_name=(computer_name or "").strip(),
        reboot=parse_bool(reboot, "Reboot"),
        tries=parse_tries(tries),
        logging=parse_bool(logging, "Logging"),
        event_log=parse_channel(event_log),
    )
