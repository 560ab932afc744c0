# Sort of like Twisted's Deferred: results travel down a chain of
# (callback, errback) pairs, and whatever a handler raises or returns
# decides which side of the next pair runs.

import time
from collections import deque

from crosschain import core
from crosschain.core import log
from crosschain.failure import Failure


class AlreadyCalledError(Exception):
    pass


def _passthrough(result):
    return result


def _with_args(f, args, kw):
    if not args and not kw:
        return f
    def handler(*results):
        return f(*(results + args), **kw)
    return handler


def _handler_name(handler):
    return getattr(handler, '__qualname__', None) or repr(handler)


class Deferred(object):
    """
    A result that may not be known yet.

    Handlers are registered in pairs; each pair sees the output of the
    one before it.  A failure skips the callback side of every pair
    until some errback returns a normal value, after which callbacks
    run again::

        d = Deferred()
        d.add_callback(parse)
        d.add_errback(report)
        d.add_callback(store)
        d.succeed(raw_bytes)

    The Deferred itself is the chain; the add_* methods return None.
    Pairs attached after the Deferred has fired run immediately against
    the current result, so a chain built late behaves the same as one
    built up front.

    Everything here is meant to run on the event loop thread.
    """

    UNRESOLVED = "unknown"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    def __init__(self):
        self.status = self.UNRESOLVED
        self.result = None
        self._pending = deque()
        self._running = False
        self._splat = False

    def __repr__(self):
        if self.called:
            return "<%s.%s object at 0x%x; %s: %r>" % (self.__class__.__module__,
                                                       self.__class__.__name__,
                                                       id(self),
                                                       self.status,
                                                       self.result)
        return "<%s.%s object at 0x%x; unresolved>" % (self.__class__.__module__,
                                                      self.__class__.__name__,
                                                      id(self))

    def __del__(self):
        if (getattr(self, 'status', None) == self.FAILED and
            isinstance(self.result, Failure) and not self._pending):
            log.error("Unhandled error in Deferred:\n%s",
                      self.result.get_traceback().rstrip())

    @property
    def called(self):
        return self.status != self.UNRESOLVED

    @classmethod
    def succeeded(cls, value):
        d = cls()
        d.succeed(value)
        return d

    @classmethod
    def failed(cls, error):
        # unlike fail(), this never raises: the failure is waiting for
        # errbacks attached after construction
        d = cls()
        if not isinstance(error, Failure):
            error = Failure(error)
        d._resolve(cls.FAILED, error)
        return d

    def add_callbacks(self, callback, errback):
        self._pending.append((callback, errback))
        if self.called:
            self._run_pending()

    def add_callback(self, callback, *args, **kw):
        self.add_callbacks(_with_args(callback, args, kw), _passthrough)

    def add_errback(self, errback, *args, **kw):
        self.add_callbacks(_passthrough, _with_args(errback, args, kw))

    def add_both(self, handler, *args, **kw):
        handler = _with_args(handler, args, kw)
        self.add_callbacks(handler, handler)

    def succeed(self, value=None):
        self._check_unresolved()
        self._resolve(self.SUCCEEDED, value)

    def fail(self, *args):
        """
        Fire the errback side of the chain with args[0] wrapped in a
        Failure.

        If nothing is attached to handle it the Failure is raised right
        here and the Deferred stays unresolved.  With more than one
        argument the values are stored raw, unwrapped, and handed to the
        first handler as separate arguments.
        """
        self._check_unresolved()
        if len(args) > 1:
            self._splat = True
            self._resolve(self.FAILED, args)
            return

        reason = args[0] if args else None
        if not isinstance(reason, Failure):
            reason = Failure(reason)

        if not self._pending:
            raise reason
        self._resolve(self.FAILED, reason)

    def chain_deferred(self, d):
        raise NotImplementedError("chain_deferred is not supported")

    def _check_unresolved(self):
        if self.called:
            raise AlreadyCalledError("%r was already fired" % self)

    def _resolve(self, status, result):
        self.status = status
        self.result = result
        self._run_pending()

    def _run_pending(self):
        # pairs added while we're draining are picked up by this loop
        if self._running:
            return
        self._running = True
        try:
            while self._pending:
                callback, errback = self._pending.popleft()
                if self.status == self.SUCCEEDED:
                    handler = callback
                else:
                    handler = errback
                if handler is _passthrough and self._splat:
                    # raw multi-value failures wait for a handler that takes them
                    continue
                self._run_handler(handler)
        finally:
            self._running = False

    def _run_handler(self, handler):
        if self._splat:
            args = self.result
            self._splat = False
        else:
            args = (self.result,)

        start = time.time()
        try:
            result = handler(*args)
        except Exception as e:
            result = e
        finally:
            duration = (time.time() - start) * 1000
            if duration > core.blocking_warn_threshold:
                log.warning("handler '%s' blocked for %dms",
                            _handler_name(handler), duration)

        # returning an exception counts the same as raising it
        if isinstance(result, Exception):
            if not isinstance(result, Failure):
                result = Failure(result)
            self.status = self.FAILED
        else:
            self.status = self.SUCCEEDED
        self.result = result


def succeed(value):
    return Deferred.succeeded(value)


def fail(error):
    return Deferred.failed(error)


def maybe_deferred(f, *args, **kw):
    raise NotImplementedError("maybe_deferred is not supported")
