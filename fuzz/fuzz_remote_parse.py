#!/usr/bin/env python3
"""
LibFuzzer harness for remote protocol JSON parsing (RemoteSource._parse_line).

Feed raw bytes (UTF-8). Fuzzer exercises JSON parsing, type coercion and the
heading sentinel conversion.
Run: python fuzz/fuzz_remote_parse.py fuzz/corpus/remote_parse/ [options]
"""

import sys

try:
    import atheris
except ImportError:
    print("Install atheris: pip install atheris")
    sys.exit(1)

with atheris.instrument_imports():
    from transponder.sources.remote import RemoteSource


def test_one_input(data: bytes) -> None:
    """Single fuzz iteration: decode data as UTF-8 and parse as remote protocol line."""
    try:
        line = data.decode("utf-8").strip()
    except UnicodeDecodeError:
        return
    source = RemoteSource(host="127.0.0.1", port=0)
    source._parse_line(line)
    source.read()
    source.get_fix()
    source.access_error()
    source.failure()
    event = source.poll_event()
    if event is not None:
        for value in (event.true_heading, event.magnetic_heading):
            assert value is None or 0.0 <= value < 360.0


def main() -> None:
    atheris.Setup(sys.argv, test_one_input)
    atheris.Fuzz()


if __name__ == "__main__":
    main()
