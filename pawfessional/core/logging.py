import logging

from pawfessional.core.config import settings

_CONTEXT_KEYS = (
    "owner_id",
    "user_id",
    "pet_id",
    "appointment_id",
    "phase",
    "status",
    "event",
    "request_seq",
    "reason",
    "error",
)


class ContextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        extras = []
        for key in _CONTEXT_KEYS:
            value = getattr(record, key, None)
            if value not in (None, ""):
                extras.append(f"{key}={value}")
        base = super().format(record)
        if extras:
            return f"{base} | " + " ".join(extras)
        return base


def configure_logging(level: str | None = None) -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(ContextFormatter("%(levelname)s:%(name)s:%(message)s"))

    root = logging.getLogger()
    root.setLevel(getattr(logging, (level or settings.LOG_LEVEL).upper(), logging.INFO))
    root.handlers.clear()
    root.addHandler(handler)
