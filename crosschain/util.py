from crosschain.deferred import Deferred


def sleep(eventloop, seconds, result=None):
    d = Deferred()
    eventloop.queue_task(seconds, d.succeed, result)
    return d
