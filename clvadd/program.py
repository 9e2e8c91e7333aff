"""Runtime compilation of the vadd kernel."""

import logging
import time

import pyopencl as cl

from clvadd.errors import CompileError, KernelExtractionError, status_of

logger = logging.getLogger(__name__)

KERNEL_NAME = "vadd"

# c[i] = a[i] + b[i] over a one-dimensional range, one work-item per element
KERNEL_SOURCE = """
__kernel void vadd(
   __global const float* a,
   __global const float* b,
   __global float* c)
{
   int i = get_global_id(0);
   c[i] = a[i] + b[i];
}
"""

# size of the diagnostic text kept from a failed build
BUILD_LOG_LIMIT = 2048


class CompiledProgram:
    """A built program and the one kernel taken from it."""

    def __init__(self, program, kernel, name):
        self.program = program
        self.kernel = kernel
        self.name = name

    def release_kernel(self):
        self.kernel = None

    def release_program(self):
        self.program = None


def build_log(program, device, limit=BUILD_LOG_LIMIT):
    """Return the device compiler output for ``program``, cut to ``limit``."""
    log = program.get_build_info(device, cl.program_build_info.LOG)
    if isinstance(log, bytes):
        log = log.decode(errors="replace")
    return log.rstrip("\x00")[:limit]


def compile_program(ctx, source=KERNEL_SOURCE, kernel_name=KERNEL_NAME,
                    options=None):
    """Build ``source`` for the context's device and extract ``kernel_name``.

    The program and kernel are adopted by ``ctx``. A failed build raises
    CompileError with the device build log attached.
    """
    try:
        program = cl.Program(ctx.context, source)
    except cl.Error as e:
        raise CompileError("Creating program", status_of(e)) from e
    compiled = CompiledProgram(program, None, kernel_name)
    ctx.adopt("program", compiled.release_program)

    start = time.perf_counter()
    try:
        program.build(options=list(options or []), devices=[ctx.device])
    except cl.Error as e:
        try:
            log = build_log(program, ctx.device)
        except cl.Error:
            log = ""
        if not log.strip():
            log = str(e)[:BUILD_LOG_LIMIT]
        raise CompileError("Building program", status_of(e),
                           build_log=log) from e
    logger.info("Built program in %.3f s", time.perf_counter() - start)

    try:
        compiled.kernel = cl.Kernel(program, kernel_name)
    except cl.Error as e:
        raise KernelExtractionError(
            f"Creating kernel {kernel_name}", status_of(e)) from e
    ctx.adopt("kernel", compiled.release_kernel)

    return compiled
