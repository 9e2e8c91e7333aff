"""Argument binding, launch and synchronization of the vadd kernel."""

import logging
import time

import pyopencl as cl

from clvadd.errors import (
    ArgumentBindingError,
    LaunchError,
    SyncError,
    status_of,
)

logger = logging.getLogger(__name__)


def bind_arguments(kernel, args):
    """Bind ``args`` to the kernel's slots 0..n-1.

    The argument count is checked against the compiled kernel before any
    slot is touched. Each slot is bound on its own so a failure names it.
    """
    expected = kernel.num_args
    if expected != len(args):
        raise ArgumentBindingError(
            None, cl.status_code.INVALID_KERNEL_ARGS,
            step=f"Setting kernel arguments: kernel takes {expected}, "
                 f"got {len(args)}")

    for slot, arg in enumerate(args):
        try:
            kernel.set_arg(slot, arg)
        except cl.Error as e:
            raise ArgumentBindingError(slot, status_of(e)) from e


def launch(queue, kernel, length):
    """Enqueue ``kernel`` over a 1-D range of ``length`` work-items.

    The work-group size is left to the OpenCL runtime.
    """
    try:
        return cl.enqueue_nd_range_kernel(queue, kernel, (length,), None)
    except cl.Error as e:
        raise LaunchError("Enqueueing kernel", status_of(e)) from e


def synchronize(queue):
    """Block until every command enqueued on ``queue`` has completed."""
    try:
        queue.finish()
    except cl.Error as e:
        raise SyncError("Waiting for kernel to finish", status_of(e)) from e


def dispatch(ctx, kernel, buffers, length):
    """Bind, launch and wait. Returns the wall-clock time in seconds."""
    bind_arguments(kernel, buffers.as_args())

    start = time.perf_counter()
    launch(ctx.queue, kernel, length)
    synchronize(ctx.queue)
    elapsed = time.perf_counter() - start

    logger.info("Kernel over %d work-items took %.6f s", length, elapsed)
    return elapsed
