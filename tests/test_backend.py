"""ScriptBackend: running user programs through an external interpreter."""

import sys

import pytest

from symcalc import error as E
from symcalc.backend import ScriptBackend
from symcalc.numeric import Number


def test_default_command_runs_the_entry_function():
    backend = ScriptBackend()
    assert backend.execute("def answer():\n    return 6 * 7\n", "answer") == 42


def test_precise_result():
    backend = ScriptBackend()
    value = backend.execute("def third():\n    return '0.1'\n", "third", precision_bits=128)
    assert value.bits == 128
    assert value == Number.parse("0.1", 128)


def test_only_the_last_line_counts():
    backend = ScriptBackend()
    source = "def answer():\n    print('working...')\n    return 2.5\n"
    assert backend.execute(source, "answer") == 2.5


def test_placeholders_are_substituted(tmp_path):
    backend = ScriptBackend(command=["{python}", "{source}", "--entry={entry}"])
    command = backend._build_command(tmp_path / "program.py", "main")
    assert command == [sys.executable, str(tmp_path / "program.py"), "--entry=main"]


def test_program_failure():
    backend = ScriptBackend()
    with pytest.raises(E.BackendError, match="exited with code"):
        backend.execute("def answer():\n    raise RuntimeError('broken')\n", "answer")


def test_non_numeric_output():
    backend = ScriptBackend()
    with pytest.raises(E.BackendError, match="non-numeric"):
        backend.execute("def answer():\n    return 'hello'\n", "answer")


def test_no_output():
    backend = ScriptBackend(command=["{python}", "{source}"])
    with pytest.raises(E.BackendError, match="no result"):
        backend.execute("x = 1\n", "unused")


def test_missing_executable():
    backend = ScriptBackend(command=["/nonexistent/prog", "{source}"])
    with pytest.raises(E.BackendError, match="Could not start"):
        backend.execute("", "answer")


def test_timeout():
    backend = ScriptBackend(command=[sys.executable, "-c", "import time; time.sleep(5)"], timeout=0.5)
    with pytest.raises(E.BackendError, match="did not finish"):
        backend.execute("", "answer")
