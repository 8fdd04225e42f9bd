"""Tests for perch.middleware.protocol: Outcome and middleware invocation."""

import pytest

from perch.errors import HandlerExecutionError
from perch.http.request import Request
from perch.http.response import Response
from perch.middleware.protocol import Outcome, invoke


class TestOutcomeOf:
    def test_outcomes_pass_through(self) -> None:
        assert Outcome.of(Outcome.HALT) is Outcome.HALT
        assert Outcome.of(Outcome.CONTINUE) is Outcome.CONTINUE

    def test_bools(self) -> None:
        assert Outcome.of(True) is Outcome.CONTINUE
        assert Outcome.of(False) is Outcome.HALT

    def test_none_continues(self) -> None:
        assert Outcome.of(None) is Outcome.CONTINUE

    @pytest.mark.parametrize("value", [0, 1, "no", []])
    def test_other_values_rejected(self, value: object) -> None:
        with pytest.raises(HandlerExecutionError):
            Outcome.of(value)


class TestInvoke:
    def test_process_method(self) -> None:
        class Gate:
            def process(self, request, response):
                response.set_status(403)
                return Outcome.HALT

        response = Response()
        assert invoke(Gate(), Request.build(), response) is Outcome.HALT
        assert response.status == 403

    def test_plain_callable(self) -> None:
        seen = []

        def logger(request, response):
            seen.append(request.path)

        assert invoke(logger, Request.build("GET", "/x"), Response()) is Outcome.CONTINUE
        assert seen == ["/x"]

    def test_not_a_middleware(self) -> None:
        with pytest.raises(HandlerExecutionError, match="not a middleware"):
            invoke(42, Request.build(), Response())
