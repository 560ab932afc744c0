import threading

from twisted.internet.error import ReactorNotRunning

from crosschain.core import launch
from crosschain.threads import capture


# thanks to Peter Norvig
def singleton(object, message="singleton class already instantiated",
              instantiated=[]):
    """
    Raise an exception if an object of this class has been instantiated before.
    """
    assert object.__class__ not in instantiated, message
    instantiated.append(object.__class__)


class EventLoop(object):
    def __init__(self, reactor=None):
        if reactor is None:
            singleton(self, "Twisted can only have one EventLoop (reactor)")
            from twisted.internet import reactor
        self._reactor = reactor
        self._halted = False
        self._thread_ident = threading.get_ident()

    def queue_task(self, delay, callable, *args, **kw):
        if threading.get_ident() != self._thread_ident:
            self._reactor.callFromThread(self._reactor.callLater,
                                         delay, launch, callable, *args, **kw)
        else:
            return self._reactor.callLater(delay, launch, callable, *args, **kw)

    def call_in_thread(self, callable, on_complete, *args, **kw):
        def work():
            ok, value = capture(callable, *args, **kw)
            self._reactor.callFromThread(launch, on_complete, ok, value)
        self._reactor.callInThread(work)

    def run(self):
        if not self._halted:
            self._thread_ident = threading.get_ident()
            self._reactor.run()

    def halt(self):
        try:
            self._reactor.stop()
        except ReactorNotRunning:
            self._halted = True
