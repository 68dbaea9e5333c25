"""
Test suite for the FFT differential harness.

This package contains:
- test_unit.py: rounding, text format, signal generator and transforms
- test_correctness.py: reference datasets and differential checks against real subprocesses
- test_edge_cases.py: artifact resolution, configuration and failure paths
- test_benchmark.py: benchmark driver and the command-line run controller
"""

__version__ = "0.1.0"
