import heapq
import itertools
import queue
import threading
import time
from concurrent.futures import ThreadPoolExecutor

from crosschain.core import launch
from crosschain.threads import capture


class EventLoop(object):
    """
    Event loop with no dependencies beyond the standard library: a heap
    of timed tasks, plus a queue through which other threads hand tasks
    to the loop thread.  It does no I/O.
    """
    def __init__(self, max_workers=4):
        self._running = True
        self._queue = []
        self._counter = itertools.count()
        self._incoming = queue.Queue()
        self._thread_ident = threading.get_ident()
        self._max_workers = max_workers
        self._executor = None

    def queue_task(self, delay, callable, *args, **kw):
        when = time.time() + delay
        if threading.get_ident() != self._thread_ident:
            self._incoming.put((when, callable, args, kw))
        else:
            self._push(when, callable, args, kw)

    def call_in_thread(self, callable, on_complete, *args, **kw):
        def work():
            ok, value = capture(callable, *args, **kw)
            self.queue_task(0, on_complete, ok, value)

        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=self._max_workers)
        self._executor.submit(work)

    def run(self):
        self._running = True
        self._thread_ident = threading.get_ident()
        try:
            while self._running:
                timeout = None
                if self._queue:
                    wait = self._queue[0][0] - time.time()
                    if wait <= 0:
                        when, _, callable, args, kw = heapq.heappop(self._queue)
                        launch(callable, *args, **kw)
                        self._take_incoming(block=False)
                        continue
                    timeout = wait
                self._take_incoming(block=True, timeout=timeout)
        finally:
            if self._executor is not None:
                self._executor.shutdown(wait=False)
                self._executor = None

    def halt(self):
        self._running = False
        # wake run() if it's blocked waiting for work
        self._incoming.put(None)

    def _push(self, when, callable, args, kw):
        heapq.heappush(self._queue, (when, next(self._counter), callable, args, kw))

    def _take_incoming(self, block, timeout=None):
        try:
            item = self._incoming.get(block=block, timeout=timeout)
        except queue.Empty:
            return
        while True:
            if item is not None:
                self._push(*item)
            try:
                item = self._incoming.get_nowait()
            except queue.Empty:
                return
