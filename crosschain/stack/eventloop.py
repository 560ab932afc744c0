import importlib

import crosschain

if crosschain._stack_name is None:
    raise RuntimeError("crosschain.init() must be called before "
                       "importing crosschain.stack.eventloop")

_stack = importlib.import_module("crosschain.%s_stack.eventloop" %
                                 crosschain._stack_name)

EventLoop = _stack.EventLoop

evlp = EventLoop()
queue_task = evlp.queue_task
call_in_thread = evlp.call_in_thread
run = evlp.run
halt = evlp.halt
