"""Device buffers and blocking host/device transfers."""

import enum
import logging
from dataclasses import dataclass

import pyopencl as cl

from clvadd.errors import (
    BufferAllocationError,
    ReadBackError,
    TransferError,
    status_of,
)

logger = logging.getLogger(__name__)


class Access(enum.Enum):
    """How the kernel uses a buffer."""

    READ_ONLY = "read-only"
    WRITE_ONLY = "write-only"

    @property
    def flags(self):
        if self is Access.READ_ONLY:
            return cl.mem_flags.READ_ONLY
        return cl.mem_flags.WRITE_ONLY


def allocate(ctx, nbytes, access, name="buffer"):
    """Allocate ``nbytes`` of device memory owned by ``ctx``."""
    try:
        buf = cl.Buffer(ctx.context, access.flags, size=nbytes)
    except cl.Error as e:
        raise BufferAllocationError(
            f"Creating buffer {name}", status_of(e)) from e
    ctx.adopt(name, buf.release)
    logger.debug("Allocated %s: %d bytes, %s", name, nbytes, access.value)
    return buf


def _check_size(buf, host, step, error=TransferError):
    if host.nbytes != buf.size:
        raise error(step, cl.status_code.INVALID_VALUE)


def upload(queue, buf, host, name="buffer"):
    """Copy ``host`` into ``buf`` and wait for the copy to finish."""
    step = f"Copying host data to device at {name}"
    _check_size(buf, host, step)
    try:
        cl.enqueue_copy(queue, buf, host, is_blocking=True)
    except cl.Error as e:
        raise TransferError(step, status_of(e)) from e


def download(queue, buf, host, name="buffer"):
    """Copy ``buf`` back into ``host`` and wait for the copy to finish."""
    step = f"Reading {name} back from device"
    _check_size(buf, host, step, ReadBackError)
    try:
        cl.enqueue_copy(queue, host, buf, is_blocking=True)
    except cl.Error as e:
        raise ReadBackError(step, status_of(e)) from e


@dataclass
class VectorBuffers:
    """Device copies of a, b and c, in kernel argument order."""

    a: object
    b: object
    c: object

    def as_args(self):
        return (self.a, self.b, self.c)


def allocate_vectors(ctx, a, b, c):
    """Allocate the three vector buffers and upload both inputs."""
    if not (len(a) == len(b) == len(c)):
        raise ValueError(
            f"vector lengths differ: a={len(a)} b={len(b)} c={len(c)}")

    buffers = VectorBuffers(
        a=allocate(ctx, a.nbytes, Access.READ_ONLY, "d_a"),
        b=allocate(ctx, b.nbytes, Access.READ_ONLY, "d_b"),
        c=allocate(ctx, c.nbytes, Access.WRITE_ONLY, "d_c"),
    )
    upload(ctx.queue, buffers.a, a, "d_a")
    upload(ctx.queue, buffers.b, b, "d_b")
    return buffers
