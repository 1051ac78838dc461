from __future__ import annotations

from dataclasses import FrozenInstanceError

import pytest

from rate_governors.core.invocation import Invocation, forward, resolve_context


def test_resolve_context_prefers_fixed_context():
    assert resolve_context("fixed", "call-site") == "fixed"
    assert resolve_context(None, "call-site") == "call-site"
    assert resolve_context(None, None) is None


def test_forward_prepends_context_only_when_present():
    def collect(*args, **kwargs):
        return args, kwargs

    assert forward(collect, None, (1,), {"k": 2}) == ((1,), {"k": 2})
    assert forward(collect, "ctx", (1,), {}) == (("ctx", 1), {})


def test_capture_copies_arguments():
    kwargs = {"k": 1}
    invocation = Invocation.capture(None, "site", [1, 2], kwargs)  # type: ignore[arg-type]
    kwargs["k"] = 99
    assert invocation.context == "site"
    assert invocation.args == (1, 2)
    assert invocation.kwargs == {"k": 1}
    assert invocation.replay(lambda *args, **kw: (args, kw)) == (("site", 1, 2), {"k": 1})


def test_invocation_is_immutable():
    invocation = Invocation()
    with pytest.raises(FrozenInstanceError):
        invocation.args = (1,)  # type: ignore[misc]
