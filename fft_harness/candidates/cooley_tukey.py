"""
Python FFT demo: recursive radix-2 Cooley-Tukey transform.

Prints one ``re,im`` line per output sample, rounded to 2 decimals.

Usage:
    python cooley_tukey.py SIZE          # transform the two-tone signal of length SIZE
    python cooley_tukey.py < 4.dat       # transform "re,im" lines read from standard input
    python cooley_tukey.py < /dev/null   # no input: the two-tone signal of length 16384
"""
import sys

import numpy as np

DEFAULT_SIZE = 16384


def round2(x):
    # precision = 2, ties away from zero
    y = np.asarray(x) * 100.0
    whole = np.trunc(y)
    return (whole + np.where(np.abs(y - whole) >= 0.5, np.sign(y), 0.0)) / 100.0


def generate_inputs(n):
    theta = np.arange(n) / n * np.pi
    re = 1.0 * np.cos(10.0 * theta) + 0.5 * np.cos(25.0 * theta)
    im = 1.0 * np.sin(10.0 * theta) + 0.5 * np.sin(25.0 * theta)
    return round2(re) + 1j * round2(im)


def read_inputs(stream):
    values = []
    for line in stream:
        line = line.strip()
        if line:
            re, im = line.split(",", 1)
            values.append(complex(float(re), float(im)))
    return np.array(values, dtype=np.complex128)


def fft(x):
    n = len(x)
    if n <= 1:
        return x
    even = fft(x[0::2])
    odd = fft(x[1::2])
    w = np.exp(-2j * np.pi * np.arange(n // 2) / n) * odd
    return np.concatenate([even + w, even - w])


def main(argv):
    signal = None
    if argv:
        signal = generate_inputs(int(argv[0]))
    elif not sys.stdin.isatty():
        signal = read_inputs(sys.stdin)
    if signal is None or len(signal) == 0:
        signal = generate_inputs(DEFAULT_SIZE)

    out = fft(signal) / np.sqrt(len(signal))
    re, im = round2(out.real), round2(out.imag)
    sys.stdout.write("".join("%f,%f\n" % pair for pair in zip(re.tolist(), im.tolist())))
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
