# backend.py
"""
Compile-and-run collaborator.

Expensive evaluations can be delegated to an external program: the source
text is written to a temporary file and the configured command is run on
it. The last line the program prints is the result.
"""

import logging
import subprocess
import sys
import tempfile
import threading
from pathlib import Path

from . import config_manager as config_manager
from . import error as E
from .ScientificEngine import parse_literal

logger = logging.getLogger(__name__)

# The external toolchain is not reentrant; one run at a time per process.
_run_lock = threading.Lock()


class ScriptBackend:
    def __init__(self, command=None, timeout=None, suffix=".py"):
        settings = config_manager.load_setting_value("all")
        self.command = list(command or settings["backend_command"])
        self.timeout = timeout if timeout is not None else settings["backend_timeout"]
        self.suffix = suffix

    def _build_command(self, source_file, entry):
        placeholders = {"{python}": sys.executable, "{source}": str(source_file), "{entry}": entry}
        command = []
        for part in self.command:
            for placeholder, value in placeholders.items():
                part = part.replace(placeholder, value)
            command.append(part)
        return command

    def execute(self, source, entry, precision_bits=0):
        """Run `entry` from `source`; returns the printed value as a Number."""
        with _run_lock, tempfile.TemporaryDirectory(prefix="symcalc-") as workdir:
            source_file = Path(workdir) / f"program{self.suffix}"
            source_file.write_text(source, encoding="utf-8")
            cmd = self._build_command(source_file, entry)
            logger.debug("running %s", cmd)

            try:
                completed = subprocess.run(
                    cmd,
                    capture_output=True,
                    text=True,
                    encoding='utf-8',
                    timeout=self.timeout,
                    check=True)
            except subprocess.CalledProcessError as e:
                logger.error("backend exited with %s: %s", e.returncode, e.stderr.strip())
                raise E.BackendError(f"Program exited with code {e.returncode}: {e.stderr.strip()}")
            except subprocess.TimeoutExpired:
                logger.error("backend timed out after %s s", self.timeout)
                raise E.BackendError(f"Program did not finish within {self.timeout} seconds.")
            except OSError as e:
                logger.error("backend could not be started: %s", e)
                raise E.BackendError(f"Could not start '{cmd[0]}': {e}")

        lines = completed.stdout.strip().splitlines()
        if not lines:
            raise E.BackendError("Program printed no result.")
        try:
            return parse_literal(lines[-1].strip(), precision_bits)
        except E.MathError:
            raise E.BackendError(f"Program printed a non-numeric result: '{lines[-1].strip()}'")
