"""Status-code names and the failure kinds of the vadd pipeline."""

import pyopencl as cl

# Returned by the ICD loader when no vendor platform is installed. Not every
# pyopencl build exposes it on ``status_code``.
PLATFORM_NOT_FOUND_KHR = -1001

UNKNOWN_STATUS = -9999


def err_code(status):
    """Return the symbolic name of an OpenCL status code."""
    if status == PLATFORM_NOT_FOUND_KHR:
        return "CL_PLATFORM_NOT_FOUND_KHR"
    try:
        return "CL_" + cl.status_code.to_string(status)
    except (ValueError, TypeError):
        return "UNKNOWN_ERROR"


def status_of(exc):
    """Status code carried by a pyopencl error."""
    try:
        return int(exc.code)
    except (AttributeError, TypeError):
        # pyopencl raises bare ``Error("...")`` from some pure-Python paths
        return UNKNOWN_STATUS


class ComputeError(Exception):
    """A fatal failure in one step of the pipeline."""

    def __init__(self, step, status=UNKNOWN_STATUS):
        super().__init__(step, status)
        self.step = step
        self.status = status

    @property
    def status_name(self):
        return err_code(self.status)

    def __str__(self):
        return f"Error: {self.step}: {self.status} ({self.status_name})"


class NoPlatformError(ComputeError):
    """No OpenCL platform is visible on this host."""

    def __init__(self, status=PLATFORM_NOT_FOUND_KHR):
        super().__init__("Finding platforms", status)


class NoDeviceError(ComputeError):
    """No platform offered a device of the requested class."""

    def __init__(self, status=cl.status_code.DEVICE_NOT_FOUND):
        super().__init__("Finding a device", status)


class ContextCreationError(ComputeError):
    pass


class QueueCreationError(ComputeError):
    pass


class CompileError(ComputeError):
    """The device compiler rejected the program source.

    ``build_log`` holds the compiler output reported by the device.
    """

    def __init__(self, step, status=cl.status_code.BUILD_PROGRAM_FAILURE,
                 build_log=""):
        super().__init__(step, status)
        self.build_log = build_log


class KernelExtractionError(ComputeError):
    pass


class BufferAllocationError(ComputeError):
    pass


class TransferError(ComputeError):
    pass


class ArgumentBindingError(ComputeError):
    """Binding kernel arguments failed.

    ``slot`` is the position whose bind failed, or None when the argument
    count did not match the kernel.
    """

    def __init__(self, slot, status=UNKNOWN_STATUS, step=None):
        super().__init__(step or f"Setting kernel argument {slot}", status)
        self.slot = slot


class LaunchError(ComputeError):
    pass


class SyncError(ComputeError):
    pass


class ReadBackError(TransferError):
    """Copying a result buffer back to the host failed."""
