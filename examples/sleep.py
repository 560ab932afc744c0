import sys

import crosschain
crosschain.init(sys.argv[1] if len(sys.argv) > 1 else 'simple')

from crosschain.stack import eventloop
from crosschain.util import sleep


def tick(n):
    print(n)
    if n == 5:
        eventloop.halt()
        return
    d = sleep(eventloop, 1, n + 1)
    d.add_callback(tick)

tick(1)
eventloop.run()
