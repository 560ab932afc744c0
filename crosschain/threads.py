from crosschain.core import log
from crosschain.deferred import Deferred


def capture(f, *args, **kw):
    """
    Run f on the calling (worker) thread and return (ok, value) instead
    of letting an exception escape it.
    """
    try:
        return True, f(*args, **kw)
    except Exception as e:
        return False, e


def defer_to_thread(eventloop, f, *args, **kw):
    """
    Run the blocking call f(*args, **kw) on one of eventloop's worker
    threads.

    Returns a Deferred that fires on the event loop thread with f's
    return value, or fails with what it raised.  The Deferred is only
    ever touched from the loop thread; the worker just hands back the
    outcome.

    There is no cancellation: if f never returns, neither does the
    Deferred.
    """
    d = Deferred()
    name = getattr(f, '__qualname__', None) or repr(f)

    def completed(ok, value):
        log.debug("thread job '%s' completed (ok=%s)", name, ok)
        if ok:
            d.succeed(value)
        else:
            d.fail(value)

    log.debug("dispatching thread job '%s'", name)
    eventloop.call_in_thread(f, completed, *args, **kw)
    return d
