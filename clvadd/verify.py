"""Host-side check of c = a + b."""

from dataclasses import dataclass, field

import numpy as np

TOL = 0.001


@dataclass
class Mismatch:
    index: int
    a: float
    b: float
    c: float
    deviation: float

    @property
    def expected(self):
        return self.c + self.deviation

    def __str__(self):
        return (f" tmp {self.deviation:f} h_a {self.a:f} h_b {self.b:f} "
                f"h_c {self.c:f} expected {self.expected:f}")


@dataclass
class VerificationReport:
    accepted: int
    total: int
    mismatches: list = field(default_factory=list)

    @property
    def all_correct(self):
        return self.accepted == self.total

    def summary(self):
        return (f"C = A+B: {self.accepted} out of {self.total} "
                "results were correct.")


def check(a, b, c, tolerance=TOL):
    """Compare ``c`` with ``a + b`` element by element.

    An element is accepted when the squared deviation is below the squared
    tolerance. Rejected elements are returned in the report, not raised.
    """
    a = np.asarray(a, dtype=np.float32)
    b = np.asarray(b, dtype=np.float32)
    c = np.asarray(c, dtype=np.float32)
    if not (a.shape == b.shape == c.shape):
        raise ValueError(
            f"vector shapes differ: a={a.shape} b={b.shape} c={c.shape}")

    # float32 throughout, as the device computes it
    deviation = (a + b) - c
    ok = deviation * deviation < np.float32(tolerance * tolerance)

    mismatches = [
        Mismatch(int(i), float(a[i]), float(b[i]), float(c[i]),
                 float(deviation[i]))
        for i in np.flatnonzero(~ok)
    ]
    return VerificationReport(int(ok.sum()), int(a.size), mismatches)


def print_report(report):
    for mismatch in report.mismatches:
        print(mismatch)
    print(report.summary())
