import gc
import logging

import pytest

from crosschain import (Deferred, Failure, AlreadyCalledError, succeed, fail,
                        maybe_deferred)
from crosschain import core


class TestResolution:

    def test_starts_unresolved(self):
        d = Deferred()

        assert d.status == Deferred.UNRESOLVED
        assert not d.called

    def test_succeed_runs_callbacks_in_order(self):
        seen = []
        d = Deferred()
        d.add_callback(lambda r: seen.append(("first", r)) or r + 1)
        d.add_callback(lambda r: seen.append(("second", r)) or r * 10)

        d.succeed(1)

        assert seen == [("first", 1), ("second", 2)]
        assert d.status == Deferred.SUCCEEDED
        assert d.result == 20

    def test_add_methods_return_none(self):
        d = Deferred()

        assert d.add_callback(lambda r: r) is None
        assert d.add_errback(lambda f: f) is None
        assert d.add_both(lambda r: r) is None
        assert d.add_callbacks(lambda r: r, lambda f: f) is None

    def test_succeed_twice_raises(self):
        d = Deferred()
        d.succeed(1)

        with pytest.raises(AlreadyCalledError):
            d.succeed(2)
        assert d.result == 1

    def test_fail_after_succeed_raises(self):
        d = Deferred()
        d.succeed(1)

        with pytest.raises(AlreadyCalledError):
            d.fail(ValueError("late"))

    def test_extra_handler_arguments(self):
        d = Deferred()
        d.add_callback(lambda r, a, b=0: r + a + b, 2, b=3)

        d.succeed(1)

        assert d.result == 6


class TestFail:

    def test_fail_without_errback_raises_to_caller(self):
        d = Deferred()
        error = ValueError("nobody listens")

        with pytest.raises(Failure) as excinfo:
            d.fail(error)

        assert excinfo.value.value is error
        assert d.status == Deferred.UNRESOLVED

    def test_fail_wraps_value_in_failure(self):
        seen = []
        d = Deferred()
        d.add_errback(seen.append)

        d.fail("x")

        assert isinstance(seen[0], Failure)
        assert seen[0].value == "x"

    def test_existing_failure_is_not_rewrapped(self):
        seen = []
        failure = Failure(ValueError("once"))
        d = Deferred()
        d.add_errback(seen.append)

        d.fail(failure)

        assert seen == [failure]

    def test_multiple_arguments_are_passed_raw(self):
        seen = []
        d = Deferred()
        d.add_callback(lambda r: pytest.fail("callback ran"))
        d.add_errback(lambda code, message: seen.append((code, message)))

        d.fail(404, "not found")

        assert seen == [(404, "not found")]

    def test_multiple_arguments_without_errback_do_not_raise(self):
        d = Deferred()

        d.fail(500, "oops")

        assert d.status == Deferred.FAILED
        assert d.result == (500, "oops")

    def test_failed_constructor_waits_for_late_errback(self):
        seen = []
        d = Deferred.failed(ValueError("early"))

        assert d.status == Deferred.FAILED
        d.add_errback(lambda f: seen.append(f.value.args[0]) or "handled")

        assert seen == ["early"]
        assert d.status == Deferred.SUCCEEDED
        assert d.result == "handled"

    def test_module_helpers(self):
        assert succeed(5).result == 5
        assert fail("x").result.value == "x"


class TestCrossChain:

    def test_worked_example(self):
        log = []

        def stage1(result):
            log.append(result)
            raise Exception("An error")

        def stage2(failure):
            log.append(str(failure))
            return failure

        def stage3(result):
            log.append("not reached")

        def stage4(failure):
            log.append(failure.value)
            return "Error is resolved"

        d = Deferred()
        d.add_callback(stage1)
        d.add_errback(stage2)
        d.add_callback(stage3)
        d.add_errback(stage4)
        d.add_callback(log.append)

        d.succeed("The result")

        assert log[0] == "The result"
        assert log[1] == "Exception - An error"
        assert isinstance(log[2], Exception)
        assert str(log[2]) == "An error"
        assert log[3] == "Error is resolved"
        assert "not reached" not in log

    def test_failure_skips_callbacks_until_recovered(self):
        path = []
        d = Deferred()
        d.add_callbacks(lambda r: path.append("cb1") or r,
                        lambda f: path.append("eb1") or f)
        d.add_callbacks(lambda r: path.append("cb2") or r,
                        lambda f: path.append("eb2") or "fixed")
        d.add_callbacks(lambda r: path.append("cb3") or r,
                        lambda f: path.append("eb3") or f)

        d.fail(ValueError("broken"))

        assert path == ["eb1", "eb2", "cb3"]
        assert d.result == "fixed"

    @pytest.mark.parametrize("how", ["raise", "return"])
    def test_returning_an_error_equals_raising_it(self, how):
        error = KeyError("missing")
        seen = []

        def handler(result):
            if how == "raise":
                raise error
            return error

        d = Deferred()
        d.add_callback(handler)
        d.add_callback(lambda r: seen.append("callback"))
        d.add_errback(seen.append)
        d.succeed(None)

        assert isinstance(seen[0], Failure)
        assert seen[0].value is error
        assert d.status == Deferred.SUCCEEDED

    def test_errback_sees_exception_valued_success(self):
        seen = []
        d = Deferred()
        d.add_errback(seen.append)

        d.succeed(ValueError("v"))

        assert isinstance(seen[0], Failure)
        assert seen[0].value.args == ("v",)
        assert d.status == Deferred.SUCCEEDED

    def test_callback_skipped_for_exception_valued_success(self):
        d = Deferred()
        d.add_callback(lambda r: r)
        d.add_callback(lambda r: pytest.fail("callback ran"))

        d.succeed(KeyError("k"))

        assert d.status == Deferred.FAILED
        assert d.result.check(KeyError)
        d.add_errback(lambda f: None)

    def test_returned_failure_is_not_rewrapped(self):
        failure = Failure("x")
        d = Deferred()
        d.add_callback(lambda r: failure)
        d.add_errback(lambda f: f)

        d.succeed(None)

        assert d.status == Deferred.FAILED
        assert d.result is failure

    def test_add_both_sees_either_outcome(self):
        seen = []
        d = Deferred()
        d.add_both(lambda r: seen.append(r) or r)
        d.add_callback(lambda r: pytest.fail("should be failed by now"))
        d.add_both(lambda r: seen.append(r) or "done")

        d.succeed(ValueError("a value, not a failure"))

        assert isinstance(seen[0], ValueError)
        assert isinstance(seen[1], Failure)
        assert d.result == "done"

    def test_chain_built_late_matches_chain_built_early(self):
        def handlers():
            return [
                (lambda r: r + 1, lambda f: f),
                (lambda r: ValueError(r), lambda f: f),
                (lambda r: r, lambda f: f.value.args[0] * 2),
                (lambda r: r - 1, lambda f: 0),
            ]

        early = Deferred()
        for callback, errback in handlers():
            early.add_callbacks(callback, errback)
        early.succeed(1)

        late = Deferred()
        late.succeed(1)
        for callback, errback in handlers():
            late.add_callbacks(callback, errback)

        assert (early.status, early.result) == (late.status, late.result)
        assert late.result == 3

    def test_late_failing_handler_does_not_raise_at_attach(self):
        d = succeed(1)

        d.add_callback(lambda r: 1 / 0)

        assert d.status == Deferred.FAILED
        assert d.result.check(ZeroDivisionError)


class TestReentrancy:

    def test_handler_attaching_to_same_deferred_runs_in_same_pass(self):
        order = []
        d = Deferred()

        def first(result):
            order.append("first")
            d.add_callback(lambda r: order.append("added") or r)
            return result

        d.add_callback(first)
        d.add_callback(lambda r: order.append("second") or r)
        d.succeed(None)

        assert order == ["first", "second", "added"]

    def test_handler_resolving_other_deferred_drains_it_inline(self):
        order = []
        inner = Deferred()
        inner.add_callback(lambda r: order.append(("inner", r)))

        outer = Deferred()
        outer.add_callback(lambda r: inner.succeed(r * 2))
        outer.add_callback(lambda r: order.append(("outer", r)))
        outer.succeed(2)

        assert order == [("inner", 4), ("outer", None)]

    def test_resolving_self_from_handler_becomes_failure(self):
        d = Deferred()
        d.add_callback(lambda r: d.succeed(r))

        d.succeed(1)

        assert d.status == Deferred.FAILED
        assert d.result.check(AlreadyCalledError)
        d.add_errback(lambda f: None)


class TestLogging:

    def test_slow_handler_warns(self, caplog, monkeypatch):
        monkeypatch.setattr(core, "blocking_warn_threshold", -1)
        d = Deferred()

        def sluggish(result):
            return result

        d.add_callback(sluggish)
        with caplog.at_level(logging.WARNING, logger="crosschain"):
            d.succeed(1)

        assert "sluggish" in caplog.text
        assert "blocked for" in caplog.text

    def test_collected_with_unhandled_failure_logs(self, caplog):
        d = Deferred.failed(ValueError("forgotten"))

        with caplog.at_level(logging.ERROR, logger="crosschain"):
            del d
            gc.collect()

        assert "Unhandled error in Deferred" in caplog.text
        assert "forgotten" in caplog.text

    def test_collected_after_recovery_logs_nothing(self, caplog):
        gc.collect()
        d = Deferred.failed(ValueError("handled"))
        d.add_errback(lambda f: None)

        with caplog.at_level(logging.ERROR, logger="crosschain"):
            del d
            gc.collect()

        assert "Unhandled error" not in caplog.text


def test_unsupported_helpers():
    with pytest.raises(NotImplementedError):
        maybe_deferred(lambda: 1)
    with pytest.raises(NotImplementedError):
        Deferred().chain_deferred(Deferred())
