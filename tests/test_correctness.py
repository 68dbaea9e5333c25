"""
Correctness tests for reference datasets and the differential runner.

Candidates here are real subprocesses: the built-in Python demo and small
scripted programs that print fixed text, so no external toolchain is needed.
"""
import logging
import sys

import numpy as np
import pytest

from fft_harness import config
from fft_harness.artifacts import resolve_artifact
from fft_harness.dataset import generate_datasets, load_dataset, materialize_dataset
from fft_harness.exceptions import (
    CandidateExecutionError,
    CandidateTimeoutError,
    MismatchError,
    OutputParseError,
)
from fft_harness.generator import generate_signal
from fft_harness.runner import Candidate, check_all
from fft_harness.utils import format_samples, round_half_away
from tests.helpers import (
    EXPECTED_INPUT_LINES_4,
    EXPECTED_OUTPUT_LINES_4,
    EXPECTED_OUTPUTS_4,
    PYTHON_CANDIDATE,
    echo_candidate,
    write_script,
)


OUTPUT_TEXT_4 = "".join(line + "\n" for line in EXPECTED_OUTPUT_LINES_4)


@pytest.fixture
def data_dir(tmp_path):
    return tmp_path / "data"


@pytest.fixture
def reference_4(data_dir):
    return {4: materialize_dataset(data_dir, 4)}


# ========== Test: Dataset materialization ==========

def test_materialize_size_4_matches_hard_coded_vector(data_dir):
    outputs = materialize_dataset(data_dir, 4)
    assert np.array_equal(outputs, EXPECTED_OUTPUTS_4), f"unexpected reference output: {outputs}"
    assert format_samples(outputs, 2) == EXPECTED_OUTPUT_LINES_4


def test_materialize_writes_inputs(data_dir):
    materialize_dataset(data_dir, 4)
    text = (data_dir / "inputs" / "4.dat").read_text(encoding="utf-8")
    assert text.splitlines() == EXPECTED_INPUT_LINES_4
    assert text.endswith("\n")
    assert not (data_dir / "outputs").exists(), "outputs must not be written unless requested"


def test_materialize_writes_outputs_when_requested(data_dir):
    materialize_dataset(data_dir, 4, output_files=True)
    lines = (data_dir / "outputs" / "4.dat").read_text(encoding="utf-8").splitlines()
    assert lines == EXPECTED_OUTPUT_LINES_4


def test_materialize_leaves_no_temporary_files(data_dir):
    materialize_dataset(data_dir, 64, output_files=True)
    names = sorted(p.name for p in data_dir.rglob("*") if p.is_file())
    assert names == ["64.dat", "64.dat"]


def test_materialize_overwrites_existing_file(data_dir):
    path = data_dir / "inputs" / "4.dat"
    path.parent.mkdir(parents=True)
    path.write_text("stale\n" * 100, encoding="utf-8")
    materialize_dataset(data_dir, 4)
    assert path.read_text(encoding="utf-8").splitlines() == EXPECTED_INPUT_LINES_4


@pytest.mark.parametrize("size", [1, 2, 64, 1024])
def test_load_dataset_round_trips_rounded_input(data_dir, size):
    materialize_dataset(data_dir, size)
    loaded = load_dataset(data_dir / "inputs" / f"{size}.dat")
    assert np.array_equal(loaded, round_half_away(generate_signal(size), 2))


def test_materialized_output_is_rounded_every_line_fixed_precision(data_dir):
    materialize_dataset(data_dir, 256, output_files=True)
    for line in (data_dir / "outputs" / "256.dat").read_text(encoding="utf-8").splitlines():
        re, im = line.split(",")
        assert len(re.split(".")[1]) == 2 and len(im.split(".")[1]) == 2, line


def test_generate_datasets_ascending(data_dir):
    reference = generate_datasets(data_dir, [64, 4, 16, 4])
    assert list(reference) == [4, 16, 64]
    assert all(len(reference[size]) == size for size in reference)


def test_materialize_deterministic_across_calls(tmp_path):
    a = materialize_dataset(tmp_path / "a", 1024)
    b = materialize_dataset(tmp_path / "b", 1024)
    assert np.array_equal(a, b)
    assert (tmp_path / "a" / "inputs" / "1024.dat").read_bytes() == (tmp_path / "b" / "inputs" / "1024.dat").read_bytes()


# ========== Test: Differential runner (passing) ==========

def test_python_candidate_size_4(reference_4):
    candidate = Candidate("Python", [sys.executable, str(PYTHON_CANDIDATE), "4"])
    results = candidate.assert_working(reference_4)
    assert [r.size for r in results] == [4]
    assert results[0].n_samples == 4
    assert results[0].elapsed > 0


def test_python_candidate_fed_from_stdin(data_dir):
    reference = generate_datasets(data_dir, [1, 2, 4])
    candidate = Candidate(
        "Python",
        [sys.executable, str(PYTHON_CANDIDATE)],
        stdin_dir=data_dir / "inputs",
    )
    results = candidate.assert_working(reference)
    assert [r.size for r in results] == [1, 2, 4]


def test_resolved_python_candidate_end_to_end(tmp_path, data_dir):
    """The configured Python candidate resolves, copies into bins/ and passes."""
    spec = next(s for s in config.CANDIDATES if s.name == "Python")
    artifact = resolve_artifact(spec, tmp_path, tmp_path / "bins")
    assert artifact == tmp_path / "bins" / "python.py"
    assert artifact.read_bytes() == PYTHON_CANDIDATE.read_bytes()

    reference = generate_datasets(data_dir, [4])
    candidate = Candidate.from_spec(spec, artifact, inputs_dir=data_dir / "inputs", feed_stdin=True)
    assert candidate.stdin_path(4) == data_dir / "inputs" / "4.dat"
    check_all([candidate], reference)


def test_candidate_printing_more_digits_passes(tmp_path, reference_4):
    """Output rounded to 2 decimals but printed with %f still equals the reference."""
    lines = ["%f,%f" % (z.real, z.imag) for z in EXPECTED_OUTPUTS_4]
    candidate = Candidate("Verbose", echo_candidate(tmp_path, lines))
    candidate.assert_working(reference_4)


def test_exit_status_is_not_interpreted(tmp_path, reference_4):
    cmd = write_script(
        tmp_path,
        "exits.py",
        f"""
        import sys
        sys.stdout.write({OUTPUT_TEXT_4!r})
        sys.exit(3)
        """,
    )
    Candidate("Exits", cmd).assert_working(reference_4)


def test_candidate_command_is_reused(tmp_path, reference_4):
    candidate = Candidate("Echo", echo_candidate(tmp_path, EXPECTED_OUTPUT_LINES_4))
    command = candidate.command
    for _ in range(3):
        candidate.assert_working(reference_4)
    assert candidate.command is command


# ========== Test: Differential runner (failing) ==========

def test_mismatch_detected_with_diagnostic(tmp_path, reference_4):
    lines = list(EXPECTED_OUTPUT_LINES_4)
    lines[2] = "0.25,-0.15"          # imaginary part off by 0.05
    candidate = Candidate("Broken", echo_candidate(tmp_path, lines))

    with pytest.raises(MismatchError) as excinfo:
        candidate.assert_working(reference_4)

    err = excinfo.value
    assert err.name == "Broken"
    assert err.size == 4
    assert np.array_equal(err.expected, EXPECTED_OUTPUTS_4)
    assert err.actual[2] == complex(0.25, -0.15)
    message = str(err)
    assert "Broken (size=4)" in message
    assert "first difference at index 2" in message
    assert "\n-0.25,-0.1\n" in message
    assert "+0.25,-0.15" in message
    assert "--- expected" in message and "+++ actual" in message


def test_mismatch_diagnostic_shows_full_sequences(tmp_path, data_dir):
    reference = generate_datasets(data_dir, [64])
    lines = format_samples(reference[64], 2)
    re, _ = lines[30].split(",")
    lines[30] = re + ",9.99"
    candidate = Candidate("Broken64", echo_candidate(tmp_path, lines))

    with pytest.raises(MismatchError) as excinfo:
        candidate.assert_working(reference)

    message = str(excinfo.value).splitlines()
    assert "expected 64 samples, got 64; first difference at index 30" in message
    # header, file headers, hunk header, every sample once, one replaced line
    assert len(message) == 2 + 3 + 64 + 1
    assert message[5] == " " + f"{reference[64][0].real!r},{reference[64][0].imag!r}", "first sample must be shown"
    assert message[-1] == " " + f"{reference[64][63].real!r},{reference[64][63].imag!r}", "last sample must be shown"


def test_mismatch_is_an_assertion_error(tmp_path, reference_4):
    lines = list(EXPECTED_OUTPUT_LINES_4)
    lines[0] = "0.26,0.60"
    with pytest.raises(AssertionError):
        Candidate("Broken", echo_candidate(tmp_path, lines)).assert_working(reference_4)


def test_unrounded_output_is_a_mismatch(tmp_path, reference_4):
    lines = list(EXPECTED_OUTPUT_LINES_4)
    lines[1] = "2.2500001,-0.60"
    with pytest.raises(MismatchError):
        Candidate("Sloppy", echo_candidate(tmp_path, lines)).assert_working(reference_4)


def test_length_mismatch(tmp_path, reference_4):
    candidate = Candidate("Short", echo_candidate(tmp_path, EXPECTED_OUTPUT_LINES_4[:3]))
    with pytest.raises(MismatchError) as excinfo:
        candidate.assert_working(reference_4)
    assert "expected 4 samples, got 3" in str(excinfo.value)


def test_empty_output_is_a_mismatch(tmp_path, reference_4):
    candidate = Candidate("Silent", write_script(tmp_path, "silent.py", "pass\n"))
    with pytest.raises(MismatchError) as excinfo:
        candidate.assert_working(reference_4)
    assert len(excinfo.value.actual) == 0


def test_parse_error_names_candidate_size_and_line(tmp_path, reference_4):
    lines = ["0.25,0.60", "2.25 -0.60", "0.25,-0.10", "0.25,0.10"]
    candidate = Candidate("Garbled", echo_candidate(tmp_path, lines))
    with pytest.raises(OutputParseError) as excinfo:
        candidate.assert_working(reference_4)
    err = excinfo.value
    assert (err.name, err.size, err.lineno, err.line) == ("Garbled", 4, 2, "2.25 -0.60")
    assert str(err).startswith("Garbled (size=4): line 2")


def test_parse_error_is_left_to_the_caller_to_report(tmp_path, reference_4, caplog):
    candidate = Candidate("Garbled", echo_candidate(tmp_path, ["oops"]))
    caplog.set_level(logging.INFO, logger="fft_harness")
    with pytest.raises(OutputParseError):
        candidate.assert_working(reference_4)
    errors = [r for r in caplog.records if r.levelno >= logging.ERROR]
    assert errors == [], "the parse error must not be logged before it propagates"


def test_stops_at_first_failing_size(tmp_path, data_dir):
    """Sizes run in ascending order; the first failure ends the check."""
    reference = generate_datasets(data_dir, [4, 8, 16])
    shuffled = {16: reference[16], 4: reference[4], 8: reference[8]}
    marker = tmp_path / "calls.txt"
    cmd = write_script(
        tmp_path,
        "counting.py",
        f"""
        import sys
        with open({str(marker)!r}, "a") as f:
            f.write("x")
        sys.stdout.write({OUTPUT_TEXT_4!r})
        """,
    )

    with pytest.raises(MismatchError) as excinfo:
        Candidate("Fixed4", cmd).assert_working(shuffled)

    assert excinfo.value.size == 8
    assert marker.read_text() == "xx", "size 16 must not be attempted after size 8 fails"


def test_check_all_aborts_before_later_candidates(tmp_path, reference_4):
    good = Candidate("Good", echo_candidate(tmp_path, EXPECTED_OUTPUT_LINES_4, "good.py"))
    bad = Candidate("Bad", echo_candidate(tmp_path, ["0,0"], "bad.py"))
    marker = tmp_path / "never.txt"
    never = Candidate("Never", write_script(tmp_path, "never.py", f"open({str(marker)!r}, 'w').close()\n"))

    with pytest.raises(MismatchError) as excinfo:
        check_all([good, bad, never], reference_4)
    assert excinfo.value.name == "Bad"
    assert not marker.exists()


def test_timeout_kills_candidate(tmp_path, reference_4):
    cmd = write_script(tmp_path, "hang.py", "import time\ntime.sleep(30)\n")
    candidate = Candidate("Hangs", cmd, timeout=0.5)
    with pytest.raises(CandidateTimeoutError) as excinfo:
        candidate.assert_working(reference_4)
    assert excinfo.value.name == "Hangs"
    assert excinfo.value.size == 4
    assert "timed out after 0.5s" in str(excinfo.value)


def test_missing_executable(tmp_path, reference_4):
    candidate = Candidate("Ghost", [str(tmp_path / "does-not-exist")])
    with pytest.raises(CandidateExecutionError, match="Ghost"):
        candidate.assert_working(reference_4)


def test_missing_stdin_file(tmp_path, reference_4):
    candidate = Candidate("Python", [sys.executable, str(PYTHON_CANDIDATE)], stdin_dir=tmp_path / "nowhere")
    with pytest.raises(CandidateExecutionError, match="cannot open input"):
        candidate.assert_working(reference_4)


def test_non_utf8_output(tmp_path, reference_4):
    cmd = write_script(tmp_path, "binary.py", "import sys\nsys.stdout.buffer.write(b'\\xff\\xfe,1\\n')\n")
    with pytest.raises(CandidateExecutionError, match="UTF-8"):
        Candidate("Binary", cmd).assert_working(reference_4)
