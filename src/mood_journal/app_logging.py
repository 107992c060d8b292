"""Logging configuration helpers."""

import logging

# Attributes every LogRecord carries; anything else arrived through ``extra``.
_RECORD_FIELDS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime"}


class ContextFormatter(logging.Formatter):
    """Append ``extra`` fields (client, entry_id, media_file...) as key=value."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = {
            key: value
            for key, value in vars(record).items()
            if key not in _RECORD_FIELDS
        }
        if not context:
            return line
        pairs = " ".join(f"{key}={value}" for key, value in sorted(context.items()))
        return f"{line} [{pairs}]"


def configure_logging(level: str = "INFO") -> None:
    """Configure the mood_journal logger with a single stream handler."""
    logger = logging.getLogger("mood_journal")
    logger.setLevel(level.upper())
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(
        ContextFormatter("%(asctime)s %(levelname)s: %(name)s: %(message)s")
    )
    logger.addHandler(handler)
    logger.propagate = False
