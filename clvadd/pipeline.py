"""The whole vadd run: device search through verification."""

import logging
from dataclasses import dataclass

import numpy as np

from clvadd.buffers import allocate_vectors, download
from clvadd.context import ExecutionContext
from clvadd.device import select_device
from clvadd.dispatch import dispatch
from clvadd.program import KERNEL_SOURCE, compile_program
from clvadd.verify import TOL, VerificationReport, check

logger = logging.getLogger(__name__)


@dataclass
class RunResult:
    c: np.ndarray
    report: VerificationReport
    device_name: str
    kernel_seconds: float
    released: list


def make_vectors(length, seed=None):
    """Random inputs in [0, 1) and a zeroed output, all float32."""
    rng = np.random.default_rng(seed)
    a = rng.random(length, dtype=np.float32)
    b = rng.random(length, dtype=np.float32)
    c = np.zeros(length, dtype=np.float32)
    return a, b, c


def run_vadd(a, b, device_type="default", tolerance=TOL, build_options=None,
             source=KERNEL_SOURCE):
    """Compute ``a + b`` on an OpenCL device and verify it on the host.

    Every device resource is created here and released, in reverse order,
    before returning or raising. Any ComputeError is fatal to the run;
    mismatching elements are only reported.
    """
    a = np.ascontiguousarray(a, dtype=np.float32)
    b = np.ascontiguousarray(b, dtype=np.float32)
    if a.shape != b.shape or a.ndim != 1:
        raise ValueError(
            f"expected two 1-D vectors of equal length, "
            f"got {a.shape} and {b.shape}")
    length = a.size
    if length < 1:
        raise ValueError("vectors must hold at least one element")
    c = np.zeros_like(a)

    device = select_device(device_type)

    with ExecutionContext.create(device) as ctx:
        compiled = compile_program(ctx, source, options=build_options)
        buffers = allocate_vectors(ctx, a, b, c)
        seconds = dispatch(ctx, compiled.kernel, buffers, length)
        download(ctx.queue, buffers.c, c, "d_c")

    logger.debug("Released in order: %s", ", ".join(ctx.released))
    report = check(a, b, c, tolerance)
    return RunResult(c, report, device.name.strip(), seconds, ctx.released)
