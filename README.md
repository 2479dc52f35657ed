# causechain

Wrap exceptions in layers of context and still reason about them: compare
errors by identity or by structure, attach PII-free details and telemetry
keys, record where an error was wrapped, and turn the whole chain into a
structured report.

The package has no dependencies outside the standard library.

## Installation

```
pip install causechain
```

To run the test suite:

```
pip install "causechain[test]"
pytest
```

## Walking the cause chain (`causechain.markers`)

Every wrapper in this package keeps its cause. `unwrap_once(err)` steps one
level down, using an `unwrap()` method when the error has one and
`__cause__` otherwise. `causes(err)` yields every layer, outermost first.

Two errors are equivalent for `is_(err, reference)` when a layer of `err`
is `reference` itself, when a layer's `matches(reference)` method returns
true, or when their marks agree. A mark (`ErrorMark`) is the error's
message together with the type of every layer of its chain. `mark(err,
reference)` returns a `WithMark` wrapper that gives `err` the mark of
`reference`, so that it compares equal to it and to anything else marked
the same way.

```python
from causechain.markers import causes, is_, is_any, mark, has_type

base = ValueError("hello")
marker = RuntimeError("mark")

marked = mark(base, marker)
assert is_(marked, marker)                 # equivalence through a mark
assert is_(ValueError("hello"), base)      # same types and message
assert is_any(marked, KeyError("x"), marker)
assert has_type(marked, ValueError)
assert [type(c) for c in causes(marked)][-1] is ValueError
```

- `is_(err, None)` is true only when `err` is `None`.
- `is_any(err, *references)` is true when any reference matches; a `None`
  reference matches a `None` error.
- `if_(err, pred)` calls `pred(layer)` on each layer, which returns a
  `(value, ok)` pair, and gives back the first pair with `ok` true, or
  `(None, False)`.
- `has_type(err, cls_or_instance)` looks for a layer of exactly that class;
  `None` never matches.
- `has_interface(err, iface)` looks for a layer that is an instance of
  `iface`, which must be an abstract base class or a runtime-checkable
  protocol; anything else raises `TypeError`.

## Secondary errors (`causechain.secondary`)

`with_secondary_error(err, other)` returns a `WithSecondaryError` that keeps
`other` for context only: it takes no part in `is_`, and the message stays
that of `err`. Its `safe_details()` gathers the safe details of every layer
of `other`. If either argument is `None`, `err` is returned unchanged.

`combine_errors(err, other)` returns `other` when `err` is `None`, and
otherwise attaches `other` to `err` as above.

## Safe details and redaction (`causechain.safedetails`)

```python
from causechain.safedetails import safe, with_safe_details, redacted_format

err = with_safe_details(ValueError("woo"), "a %s %s", "b", safe("c"))
assert err.safe_details() == ["a × c"]
assert str(err) == "woo"
assert redacted_format("%d items", safe(3)) == "3 items"
```

- `safe(value)` returns a `SafeValue`, whose printed form is kept as is.
  Any object with a `safe_message()` method is treated as safe too.
- `redact(obj)` prints `obj` with everything unsafe replaced by `×`. An
  `OSError` keeps its errno and message but hides its file names; an error
  whose message is `"<prefix>: <cause message>"` keeps the redacted form of
  its cause.
- `redacted_format(format, *args)` applies printf-style verbs (`%s`, `%v`,
  `%d`, `%x`, `%q`, `%f`, ...) to `args`, redacting the unsafe ones. The
  format text is considered safe. Missing or extra arguments are shown in
  the output rather than raising.
- `with_safe_details(err, format, *args)` wraps `err` in a
  `WithSafeDetails` carrying the redacted text. With no format text and no
  arguments it returns `err` unchanged; with `err` set to `None` it returns
  `None`.

## Telemetry keys (`causechain.telemetrykeys`)

```python
from causechain.telemetrykeys import with_telemetry, get_telemetry_keys

err = with_telemetry(with_telemetry(ValueError("x"), "a", "b"), "b", "c")
assert sorted(get_telemetry_keys(err)) == ["a", "b", "c"]
```

`with_telemetry(err, *keys)` returns a `WithTelemetry` wrapper whose
`safe_details()` are its keys. `get_telemetry_keys(err)` collects the keys
of every layer without duplicates.

## Operating-system errors (`causechain.oserror`)

`is_permission`, `is_exist`, `is_not_exist` and `is_timeout` look through
every wrapping layer for the matching built-in exception class
(`PermissionError`, `FileExistsError`, `FileNotFoundError`,
`TimeoutError`) or an `OSError` with a matching errno. `is_timeout` also
accepts any layer whose `timeout()` method returns true.

## Stack traces (`causechain.withstack`)

`with_stack(err)` returns a `WithStack` recording up to 32 call frames,
starting at its caller; `with_stack_depth(err, depth)` skips `depth` more
frames (a depth below -1 raises `ValueError`). `WithStack.stack_trace()`
returns the frames as `StackEntry(function, file, line)` tuples, innermost
first, and `safe_details()` returns them printed by `format_stack`:

```
<module>.<function>
	<file>:<line>
```

`parse_printed_stack(text)` reads that form back into a
`ReportableStackTrace` of `Frame` objects, oldest call first, with file
names trimmed of the interpreter's library prefixes. `function_name(name)`
splits a qualified name into module and function.

`get_reportable_stack_trace(err)` converts the stack of one layer, or
returns `None` when that layer has no `stack_trace()` method or an empty
stack. `get_one_line_source(err)` returns a `SourceLocation(file, line,
function)` for the topmost frame of the innermost recorded stack in the
chain, with the file reduced to its base name, or `None`.

## Reports (`causechain.report`)

`build_report(err)` returns an `(Event, extras)` pair, or `(None, None)`
for no error. The event's `message` holds the redacted error, then a
"report composition" listing every layer from the innermost out, with its
file and line when it recorded a stack and its first safe detail line
otherwise. Every layer with a stack becomes a `ReportException`; when none
has one, a single entry is made from the leaf error type and the first
detail line. `extras["error types"]` lists the full type name of each
layer.

`report_error(err, capture)` builds the report, copies the extras into
`event.extra`, sets `event.server_name` to `"<redacted>"` and the tag
`report_type` to `"error"`, then calls `capture(event)` and returns the
identifier it gives back, or `""`. Passing `None` raises `TypeError`.

`print_stack_trace(stack)` renders a `ReportableStackTrace` one line per
frame, innermost first: `file:line: in function()`.

`ISSUE_REFERRAL` is a ready-made hint text asking users to report a problem.

## What this package does not do

- It does not send reports anywhere: `report_error` only hands the event to
  the `capture` callable you supply.
- It does not serialise errors for transfer between processes; marks and
  details live only on the Python objects.
- It has no verbose multi-line rendering of an error chain beyond what
  `build_report` puts in the report message.