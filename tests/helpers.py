"""Shared fixtures data and small scripted candidates for the test suite."""
import sys
import textwrap
from pathlib import Path

import numpy as np

ROOT = Path(__file__).resolve().parent.parent
PYTHON_CANDIDATE = ROOT / "fft_harness" / "candidates" / "cooley_tukey.py"

# generate_signal(4) rounded to 2 decimals: theta = 0, pi/4, pi/2, 3pi/4
EXPECTED_INPUTS_4 = np.array([1.5 + 0.0j, 0.35 + 1.35j, -1.0 + 0.5j, -0.35 - 0.65j])
EXPECTED_INPUT_LINES_4 = ["1.50,0.00", "0.35,1.35", "-1.00,0.50", "-0.35,-0.65"]

# Rounded unitary DFT of EXPECTED_INPUTS_4
EXPECTED_OUTPUTS_4 = np.array([0.25 + 0.6j, 2.25 - 0.6j, 0.25 - 0.1j, 0.25 + 0.1j])
EXPECTED_OUTPUT_LINES_4 = ["0.25,0.60", "2.25,-0.60", "0.25,-0.10", "0.25,0.10"]


def write_script(directory: Path, name: str, body: str) -> list:
    """Write a small Python program and return the command line that runs it."""
    path = Path(directory) / name
    path.write_text(textwrap.dedent(body), encoding="utf-8")
    return [sys.executable, str(path)]


def echo_candidate(directory: Path, lines, name: str = "echo.py") -> list:
    """A candidate that prints ``lines`` verbatim, one per line."""
    payload = Path(directory) / (name + ".out")
    payload.write_text("".join(line + "\n" for line in lines), encoding="utf-8")
    return write_script(
        directory,
        name,
        f"""
        import sys
        with open({str(payload)!r}, encoding="utf-8") as f:
            sys.stdout.write(f.read())
        """,
    )
