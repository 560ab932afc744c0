import sys

import crosschain
crosschain.init(sys.argv[1] if len(sys.argv) > 1 else 'simple')

from crosschain import Deferred
from crosschain.stack import eventloop


def nobody_listens():
    # fail() with no errback raises right here; the loop logs it
    d = Deferred()
    d.fail(ValueError("lost"))

eventloop.queue_task(0, nobody_listens)
eventloop.queue_task(0.1, eventloop.halt)
eventloop.run()
