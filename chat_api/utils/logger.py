import logging
import contextvars

# Request ID of the request being handled; set by RequestIDMiddleware
request_id_context = contextvars.ContextVar('request_id', default=None)

NO_REQUEST_ID = "no-request-id"


class RequestAwareFormatter(logging.Formatter):
    """Formatter that fills ``%(request_id)s`` for every record.

    Records logged outside a request (startup, CLI) get ``no-request-id``.
    """

    def format(self, record: logging.LogRecord) -> str:
        if not getattr(record, 'request_id', None):
            record.request_id = request_id_context.get() or NO_REQUEST_ID
        return super().format(record)


class RequestAwareLogger:
    """
    Thin wrapper over a stdlib logger that attaches the current request ID.

    ``request_id=`` may be passed to any call to log against a specific
    request, e.g. after the context has been cleared.
    """

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)
        self.name = name

    def _log(self, level: int, msg: str, *args, request_id=None, **kwargs):
        request_id = request_id or request_id_context.get()
        if request_id:
            kwargs.setdefault('extra', {})['request_id'] = request_id
        self.logger.log(level, msg, *args, **kwargs)

    def debug(self, msg: str, *args, **kwargs):
        self._log(logging.DEBUG, msg, *args, **kwargs)

    def info(self, msg: str, *args, **kwargs):
        self._log(logging.INFO, msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs):
        self._log(logging.WARNING, msg, *args, **kwargs)

    def error(self, msg: str, *args, **kwargs):
        self._log(logging.ERROR, msg, *args, **kwargs)

    def exception(self, msg: str, *args, **kwargs):
        kwargs['exc_info'] = True
        self._log(logging.ERROR, msg, *args, **kwargs)


def get_logger(name: str) -> RequestAwareLogger:
    """Request-aware logger for ``name`` (usually ``__name__``)."""
    return RequestAwareLogger(name)


def set_request_context(request_id: str):
    request_id_context.set(request_id)


def clear_request_context():
    request_id_context.set(None)
