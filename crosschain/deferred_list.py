from functools import partial

from crosschain.deferred import Deferred


class DeferredList(Deferred):
    """
    Collects the outcome of several Deferreds.

    Once every one of them has fired, this Deferred succeeds with a list
    of (success, result) pairs in the same order as `deferreds`; for a
    failed child, result is its Failure.  The errback side is never
    fired: child failures are data here, not failures of the list.

    Each child's own result is passed on unchanged to whatever it has
    chained after the list, unless consume_errors is set, in which case
    failed children continue with None.
    """

    def __init__(self, deferreds, consume_errors=False):
        super(DeferredList, self).__init__()
        self.deferreds = list(deferreds)
        self.results = [None] * len(self.deferreds)
        self.remaining = len(self.deferreds)
        self.consume_errors = consume_errors

        if not self.deferreds:
            # nothing to wait for
            self.succeed([])
            return

        for index, d in enumerate(self.deferreds):
            d.add_callbacks(partial(self._record, index, True),
                            partial(self._record, index, False))
            d.add_both(self._settled)

    def _record(self, index, succeeded, *results):
        result = results[0] if len(results) == 1 else results
        self.results[index] = (succeeded, result)
        if not succeeded and self.consume_errors:
            return None
        return result

    def _settled(self, result):
        self.remaining -= 1
        if self.remaining == 0:
            self.succeed(self.results)
        return result
