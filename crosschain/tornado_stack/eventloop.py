import threading
from concurrent.futures import ThreadPoolExecutor

import tornado.ioloop

from crosschain.core import launch
from crosschain.threads import capture


class Task(object):
    def __init__(self, tornado_ioloop, timeout):
        self._timeout = timeout
        self._tornado_ioloop = tornado_ioloop

    def cancel(self):
        self._tornado_ioloop.remove_timeout(self._timeout)


class EventLoop(object):
    def __init__(self, io_loop=None, max_workers=4):
        if io_loop is None:
            io_loop = tornado.ioloop.IOLoop.current()
        self._tornado_ioloop = io_loop
        self._thread_ident = threading.get_ident()
        self._max_workers = max_workers
        self._executor = None

    def queue_task(self, delay, callable, *args, **kw):
        def task():
            return launch(callable, *args, **kw)
        def queue():
            timeout = self._tornado_ioloop.call_later(delay, task)
            return Task(self._tornado_ioloop, timeout)

        if threading.get_ident() != self._thread_ident:
            self._tornado_ioloop.add_callback(queue)
        else:
            return queue()

    def call_in_thread(self, callable, on_complete, *args, **kw):
        def work():
            ok, value = capture(callable, *args, **kw)
            self._tornado_ioloop.add_callback(launch, on_complete, ok, value)

        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=self._max_workers)
        self._executor.submit(work)

    def run(self):
        self._thread_ident = threading.get_ident()
        try:
            self._tornado_ioloop.start()
        finally:
            if self._executor is not None:
                self._executor.shutdown(wait=False)
                self._executor = None

    def halt(self):
        if threading.get_ident() != self._thread_ident:
            self._tornado_ioloop.add_callback(self._tornado_ioloop.stop)
        else:
            self._tornado_ioloop.stop()
