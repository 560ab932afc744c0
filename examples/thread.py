import sys
import time

import crosschain
crosschain.init(sys.argv[1] if len(sys.argv) > 1 else 'simple')

from crosschain import DeferredList, defer_to_thread
from crosschain.stack import eventloop


def slow_square(x):
    time.sleep(1)
    return x * x

def broken():
    time.sleep(0.5)
    raise ValueError("boom")

def done(results):
    for ok, value in results:
        print("ok" if ok else "failed", value)
    eventloop.halt()

dl = DeferredList([defer_to_thread(eventloop, slow_square, 3),
                   defer_to_thread(eventloop, broken),
                   defer_to_thread(eventloop, slow_square, 4)],
                  consume_errors=True)
dl.add_callback(done)
eventloop.run()
