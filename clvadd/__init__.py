"""Elementwise vector addition on an OpenCL device, verified on the host."""

from clvadd.errors import (
    ArgumentBindingError,
    BufferAllocationError,
    CompileError,
    ComputeError,
    ContextCreationError,
    KernelExtractionError,
    LaunchError,
    NoDeviceError,
    NoPlatformError,
    QueueCreationError,
    ReadBackError,
    SyncError,
    TransferError,
    err_code,
)
from clvadd.pipeline import RunResult, make_vectors, run_vadd
from clvadd.verify import VerificationReport, check

__version__ = "0.1.0"

__all__ = [
    "ArgumentBindingError",
    "BufferAllocationError",
    "CompileError",
    "ComputeError",
    "ContextCreationError",
    "KernelExtractionError",
    "LaunchError",
    "NoDeviceError",
    "NoPlatformError",
    "QueueCreationError",
    "ReadBackError",
    "RunResult",
    "SyncError",
    "TransferError",
    "VerificationReport",
    "err_code",
    "make_vectors",
    "run_vadd",
    "check",
]
