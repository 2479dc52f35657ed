import pickle
from typing import Protocol, runtime_checkable

import pytest

from causechain.markers import (
    ErrorMark,
    WithMark,
    causes,
    has_interface,
    has_type,
    if_,
    is_,
    is_any,
    mark,
    unwrap_once,
)


class Wrapper(Exception):
    def __init__(self, cause, msg=None):
        super().__init__(cause, msg)
        self.cause = cause
        self.msg = msg

    def __str__(self):
        if self.msg is None:
            return str(self.cause)
        return f"{self.msg}: {self.cause}"

    def unwrap(self):
        return self.cause


class Fundamental(Exception):
    pass


class Fundamental2(Exception):
    pass


class MyErrType1(Exception):
    pass


class MyErrType2(Exception):
    pass


class InvalidError(Exception):
    def __str__(self):
        raise AttributeError("empty reference")

    def unwrap(self):
        return None


class ErrWithIs(Exception):
    def __init__(self, msg, secret_word):
        super().__init__(msg, secret_word)
        self.msg = msg
        self.secret_word = secret_word

    def __str__(self):
        return self.msg

    def matches(self, other):
        return isinstance(other, ErrWithIs) and self.secret_word == other.secret_word


class FooError(Exception):
    def foo(self):
        return None


@runtime_checkable
class Fooer(Protocol):
    def foo(self): ...


@runtime_checkable
class NetError(Protocol):
    def timeout(self): ...

    def temporary(self): ...


class AddrError(Exception):
    def timeout(self):
        return False

    def temporary(self):
        return False


class ExampleError(Exception):
    pass


def network(err):
    return pickle.loads(pickle.dumps(err))


def test_unwrap_once_prefers_unwrap_then_cause():
    inner = ValueError("inner")
    assert unwrap_once(Wrapper(inner, "w")) is inner
    try:
        try:
            raise inner
        except ValueError as e:
            raise RuntimeError("outer") from e
    except RuntimeError as outer:
        assert unwrap_once(outer) is inner
    assert unwrap_once(None) is None


def test_causes_lists_chain():
    inner = ValueError("a")
    mid = Wrapper(inner, "b")
    outer = Wrapper(mid, "c")
    assert list(causes(outer)) == [outer, mid, inner]
    assert list(causes(None)) == []


def test_local_error_equivalence():
    err1 = ValueError("hello")
    err2 = ValueError("world")
    assert not is_(err1, err2)
    assert is_(err1, err1)
    assert is_(err2, err2)
    assert not is_(err1, None)
    assert is_(None, None)
    assert not is_(None, err1)


def test_structural_equivalence():
    assert is_(ValueError("hello"), ValueError("hello"))


def test_error_type_equivalence():
    err1 = ValueError("hello")
    err2 = Fundamental("hello")
    err3 = Fundamental2("hello")
    assert not is_(err1, err2)
    assert not is_(err2, err3)


def test_remote_error_equivalence():
    err1 = ValueError("hello")
    err2 = ValueError("world")
    new_err1 = network(err1)
    assert is_(err1, new_err1)
    assert not is_(err2, new_err1)


def test_standard_error_remote_equivalence():
    err1 = EOFError("EOF")
    err2 = TimeoutError("context deadline exceeded")
    new_err1 = network(err1)
    assert is_(err1, new_err1)
    assert not is_(err2, new_err1)


def test_unknown_error_type_difference():
    err1 = Fundamental("hello")
    err2 = Fundamental2("hello")
    assert not is_(err1, err2)
    new_err1 = network(err1)
    assert is_(err1, new_err1)
    new_err2 = network(err2)
    assert not is_(new_err1, new_err2)


def test_known_error_type_difference():
    err1 = ValueError("hello")
    err2 = Fundamental("hello")
    assert not is_(err1, err2)
    new_err1 = network(err1)
    new_err2 = network(err2)
    assert is_(err1, new_err1)
    assert is_(err2, new_err2)
    assert not is_(new_err1, new_err2)


def test_marker_driven_equivalence():
    err1 = ValueError("hello")
    err2 = ValueError("world")
    assert not is_(err1, err2)
    m = ValueError("mark")
    err1w = mark(err1, m)
    err2w = mark(err2, m)
    assert is_(err1w, m)
    assert is_(err2w, m)
    assert is_(err1w, err2w)


def test_wrapped_equivalence():
    err1 = ValueError("hello")
    err2 = Wrapper(ValueError("hello"), "world")
    assert is_(err2, err1)
    m2 = ValueError("m2")
    err2w = mark(err2, m2)
    assert is_(err2w, err1)


def test_is_any():
    err1 = ValueError("hello")
    err2 = ValueError("world")
    err3 = Wrapper(err1, "world")
    err4 = Wrapper(err2, "universe")
    assert is_any(err1, err1)
    assert not is_any(err1, err2, err3, err4)
    assert is_any(err3, err1)
    assert is_any(err3, err3)
    assert is_any(err3, err2, err1)
    assert is_any(err3, err2, None, err1)
    assert is_any(None, err2, None, err1)
    assert not is_any(None, err2, err1)


def test_marker_driven_difference():
    err1 = ValueError("hello")
    err2 = ValueError("hello")
    assert is_(err1, err2)
    m1 = ValueError("m1")
    m2 = ValueError("m2")
    err1w = mark(err1, m1)
    err2w = mark(err2, m2)
    assert is_(err1w, m1)
    assert is_(err2w, m2)
    assert not is_(err1w, err2w)


def test_remote_marker_equivalence():
    m = ValueError("mark")
    err1w = mark(ValueError("hello"), m)
    new_err1w = network(err1w)
    assert is_(err1w, new_err1w)
    err2w = mark(ValueError("world"), m)
    assert is_(new_err1w, err2w)


def test_has_type():
    base = FooError("hmm")
    wrapped = Wrapper(base, "boom")
    assert not has_type(base, None)
    assert not has_type(wrapped, None)
    assert has_type(base, FooError)
    assert has_type(wrapped, FooError)
    assert not has_type(None, None)


def test_has_type_is_exact():
    class Sub(FooError):
        pass

    assert not has_type(Sub("x"), FooError)
    assert has_type(Sub("x"), Sub)


def test_has_interface():
    base = FooError("hmm")
    wrapped = Wrapper(base, "boom")
    assert has_interface(base, Fooer)
    assert has_interface(wrapped, Fooer)
    assert not has_interface(base, NetError)
    assert not has_interface(wrapped, NetError)
    assert not has_interface(None, NetError)


def test_example_has_type():
    err = Wrapper(ExampleError("world"), "hello")
    assert has_type(err, ExampleError) is True
    assert has_type(err, None) is False
    assert has_type(err, AddrError) is False


def test_example_has_interface():
    err = Wrapper(AddrError("ndn doesn't really exist"), "bummer")
    assert has_interface(err, NetError) is True
    with pytest.raises(TypeError):
        has_interface(err, AddrError)


def test_local_local_equivalence():
    err1 = ValueError("hello")
    err2 = ValueError("hello")
    err3 = ValueError("world")
    assert not is_(err1, err3)
    assert is_(err1, err1)
    assert is_(err2, err2)
    assert is_(err3, err3)
    m = ValueError("mark")
    err1w = mark(err1, m)
    err3w = mark(err3, m)
    assert is_(err1w, m)
    assert is_(err3w, m)
    assert is_(err3w, err1w)
    m2 = ValueError("m2")
    err2w = mark(err2, m2)
    assert not is_(err2w, err1w)


def test_local_remote_equivalence():
    err1 = ValueError("hello")
    err2 = ValueError("hello")
    err3 = ValueError("world")
    err1dec = network(err1)
    err2dec = network(err2)
    err3dec = network(err3)
    assert is_(err1, err1dec) and is_(err1dec, err1)
    assert is_(err2, err2dec) and is_(err2dec, err2)
    assert is_(err3, err3dec) and is_(err3dec, err3)
    assert not is_(err1dec, err3)
    assert not is_(err2dec, err3)

    m = ValueError("mark")
    err1w = mark(err1, m)
    err3w = mark(err3, m)
    m2 = ValueError("m2")
    err2w = mark(err2, m2)
    err1decw = network(err1w)
    err2decw = network(err2w)
    err3decw = network(err3w)
    assert is_(err1decw, err1w) and is_(err1w, err1decw)
    assert is_(err2decw, err2w) and is_(err2w, err2decw)
    assert is_(err3decw, err3w) and is_(err3w, err3decw)
    assert is_(err1decw, err3w) and is_(err3decw, err1w)
    assert not is_(err1w, err2decw) and not is_(err2w, err1decw)


def test_remote_remote_equivalence():
    err1 = ValueError("hello")
    err2 = ValueError("hello")
    err3 = ValueError("world")
    err1dec, err2dec, err3dec = network(err1), network(err2), network(err3)
    err1o, err2o, err3o = network(err1), network(err2), network(err3)
    assert is_(err1dec, err1o) and is_(err2dec, err2o) and is_(err3dec, err3o)
    assert is_(err1dec, err2o)
    assert not is_(err1dec, err3o) and not is_(err2dec, err3dec)

    m = ValueError("mark")
    err1w = mark(err1, m)
    err3w = mark(err3, m)
    m2 = ValueError("m2")
    err2w = mark(err2, m2)
    e1, e2, e3 = network(err1w), network(err2w), network(err3w)
    o1, o2, o3 = network(err1w), network(err2w), network(err3w)
    assert is_(e1, o1) and is_(o1, e1)
    assert is_(e2, o2) and is_(o2, e2)
    assert is_(e3, o3) and is_(o3, e3)
    assert is_(e1, o3) and is_(e3, o1)
    assert not is_(e1, o2) and not is_(e2, o1)


def test_masked_error_equivalence():
    ref_err = Wrapper(MyErrType1("world"), "hello")
    some_err = Wrapper(MyErrType2("hello: world"))
    assert str(ref_err) == str(some_err)
    assert not is_(some_err, ref_err)
    assert not is_(network(some_err), ref_err)


def test_format_simple():
    ref_err = ValueError("foo")
    marked = mark(ValueError("woo"), ref_err)
    assert str(marked) == "woo"
    assert f"{marked}" == "woo"
    assert str(mark(Wrapper(ValueError("woo"), "waa"), ref_err)) == "waa: woo"
    assert str(Wrapper(mark(ValueError("woo"), ref_err), "waa")) == "waa: woo"


def test_mark_contents():
    ref_err = Wrapper(ValueError("foo"), "bar")
    marked = mark(ValueError("woo"), ref_err)
    assert isinstance(marked, WithMark)
    assert marked.mark == ErrorMark(
        msg="bar: foo",
        types=(
            (f"{__name__}/Wrapper", ""),
            ("builtins/ValueError", ""),
        ),
    )
    assert marked.mark.family_name == f"{__name__}/Wrapper"
    assert marked.mark.extension == ""
    assert unwrap_once(marked) is marked.cause


def test_mark_none():
    assert mark(None, ValueError("x")) is None
    with pytest.raises(TypeError):
        mark(ValueError("x"), None)


def test_invalid_error():
    err = InvalidError()
    err_ref = ValueError("hello")
    assert not is_(err, err_ref)
    assert is_(err, err)
    assert has_type(err, InvalidError)


def test_delegate_to_matches_method():
    efoo = ErrWithIs("foo", "foo")
    efoo2 = ErrWithIs("foo", "bar")
    ebar = ErrWithIs("bar", "foo")
    assert is_(efoo, efoo2)
    assert is_(efoo, ebar)
    assert not is_(efoo2, ebar)
    assert is_any(efoo, efoo2, ebar)
    assert is_any(efoo2, ebar, efoo)
    assert not is_any(efoo2, ebar, ValueError("other"))


def test_if_returns_first_match():
    inner = ValueError("inner")
    outer = Wrapper(Wrapper(inner, "mid"), "top")
    value, ok = if_(outer, lambda c: (str(c), isinstance(c, ValueError)))
    assert (value, ok) == ("inner", True)
    assert if_(outer, lambda c: ("x", False)) == (None, False)
    assert if_(None, lambda c: ("x", True)) == (None, False)