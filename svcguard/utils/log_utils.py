import logging
import os
import pathlib
import socket

HOSTNAME = socket.gethostname()
LOG_FORMAT = "%(asctime)s %(levelname)s host=%(host)s msg=%(message)s"


class HostFilter(logging.Filter):
    def filter(self, record):
        # ensure 'host' exists for the formatter
        if not hasattr(record, "host"):
            record.host = HOSTNAME
        return True


class SafeExtraFormatter(logging.Formatter):
    def format(self, record):
        if not hasattr(record, "host"):
            record.host = HOSTNAME
        return super().format(record)


class HostAdapter(logging.LoggerAdapter):
    def process(self, msg, kwargs):
        kwargs["extra"] = {**kwargs.get("extra", {}), "host": HOSTNAME}
        return msg, kwargs


def get_logger(name):
    return HostAdapter(logging.getLogger(name), {})


def resolve_log_file(log_file):
    # relative to the working directory
    p = pathlib.Path(log_file).expanduser()
    if not p.is_absolute():
        p = pathlib.Path.cwd() / p
    return p


def setup_logging(level=None, log_file=None):
    """Console handler always, file handler when log_file is set and writable."""
    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    fmt = SafeExtraFormatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    root = logging.getLogger()
    root.handlers.clear()

    console = logging.StreamHandler()
    console.setFormatter(fmt)
    console.addFilter(HostFilter())
    root.addHandler(console)

    if log_file:
        path = resolve_log_file(log_file)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fh = logging.FileHandler(path, encoding="utf-8")
        except OSError as e:
            root.setLevel(getattr(logging, level, logging.INFO))
            logging.getLogger("svcguard").warning(f"file logging disabled ({path}): {e}")
        else:
            fh.setFormatter(fmt)
            fh.addFilter(HostFilter())
            root.addHandler(fh)

    root.setLevel(getattr(logging, level, logging.INFO))
    return root
