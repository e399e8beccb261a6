"""Logging configuration for the form and the render service."""
import datetime
import json
import logging

from config import load_settings


class StructuredFormatter(logging.Formatter):
    """Structured JSON formatter for log shipping."""

    def format(self, record):
        log_entry = {
            'timestamp': datetime.datetime.now(datetime.timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }

        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        if hasattr(record, 'extra_fields'):
            log_entry.update(record.extra_fields)

        return json.dumps(log_entry)


def setup_logging(settings=None):
    """Setup root logging from settings (LOG_LEVEL / LOG_FORMAT).

    Args:
        settings: dict from config.load_settings() (optional)
    """
    settings = settings or load_settings()

    log_level_str = str(settings.get('log_level', 'INFO')).upper()
    log_level = getattr(logging, log_level_str, logging.INFO)

    logger = logging.getLogger()
    logger.setLevel(log_level)

    if settings.get('log_format') == 'json':
        formatter = StructuredFormatter()
    else:
        formatter = logging.Formatter(
            '%(asctime)s %(levelname)-8s %(name)-20s %(message)s'
        )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)

    # Replace our own handler only; Streamlit reruns call this again
    for handler in list(logger.handlers):
        if getattr(handler, "_site_visit", False):
            logger.removeHandler(handler)
    console_handler._site_visit = True
    logger.addHandler(console_handler)

    # Quieter third-party loggers
    logging.getLogger('urllib3').setLevel(logging.WARNING)
    logging.getLogger('requests').setLevel(logging.WARNING)
    logging.getLogger('fontTools').setLevel(logging.WARNING)
    logging.getLogger('PIL').setLevel(logging.WARNING)

    logger.debug("Logging initialized", extra={
        'extra_fields': {
            'log_level': log_level_str,
            'structured_logging': settings.get('log_format') == 'json',
        }
    })

    return logger
