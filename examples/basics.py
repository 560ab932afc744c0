import sys

import crosschain
crosschain.init(sys.argv[1] if len(sys.argv) > 1 else 'simple')

from crosschain import Deferred
from crosschain.stack import eventloop


def fetch():
    d = Deferred()
    eventloop.queue_task(0.5, d.succeed, "The result")
    return d

def stage1(result):
    print("stage 1 got:", result)
    raise Exception("An error")

def stage2(failure):
    print("stage 2 got:", failure)
    return failure

def stage3(result):
    print("not reached")

def stage4(failure):
    print("stage 4 got:", repr(failure.value))
    return "Error is resolved"

def stage5(result):
    print("stage 5 got:", result)
    eventloop.halt()

d = fetch()
d.add_callback(stage1)
d.add_errback(stage2)
d.add_callback(stage3)
d.add_errback(stage4)
d.add_callback(stage5)
eventloop.run()
