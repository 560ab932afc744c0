import sys
import logging
import traceback

logging.basicConfig(stream=sys.stderr,
                    format="%(message)s")
log = logging.getLogger("crosschain")

blocking_warn_threshold = 500 # ms
tracebacks_in_log = True


def format_tb(e):
    return ''.join(traceback.format_exception(type(e), e, e.__traceback__))


def log_exception(e=None, with_traceback=None):
    if e is None:
        e = sys.exc_info()[1]
    if with_traceback is None:
        with_traceback = tracebacks_in_log

    if with_traceback and e.__traceback__ is not None:
        log.error("%s\n%s", str(e), format_tb(e).rstrip())
    else:
        log.error("%s", str(e))


def launch(f, *args, **kwargs):
    """
    Run f(*args, **kwargs) as an event loop task.

    Whatever escapes the task is logged instead of unwinding the loop;
    this includes a Failure raised by Deferred.fail() when nobody
    attached an errback.  The return value of f is passed through, or
    None if it raised.
    """
    try:
        return f(*args, **kwargs)
    except Exception:
        log_exception()
