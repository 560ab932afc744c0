import sys

VERSION = '0.1.0'

from crosschain.core import launch, log_exception
from crosschain.failure import Failure
from crosschain.deferred import (Deferred, AlreadyCalledError, succeed, fail,
                                 maybe_deferred)
from crosschain.deferred_list import DeferredList
from crosschain.threads import defer_to_thread

STACKS = ('twisted', 'tornado', 'simple')

_stack_name = None


def init(stack_name):
    """
    Pick the event loop behind crosschain.stack.eventloop: one of
    'twisted', 'tornado' or 'simple'.
    """
    global _stack_name
    if stack_name not in STACKS:
        raise ValueError("unknown stack '%s', expected one of: %s" %
                         (stack_name, ", ".join(STACKS)))
    if ("crosschain.stack.eventloop" in sys.modules and
        stack_name != _stack_name):
        raise RuntimeError("stack '%s' is already in use" % _stack_name)
    _stack_name = stack_name
