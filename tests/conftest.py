from __future__ import annotations

import re
import weakref

import numpy as np
import pyopencl as cl
import pyopencl._cl as _cl
import pytest

import clvadd.pipeline
from clvadd.context import ExecutionContext


def cl_error(code, routine="clFake", msg="injected failure", kind=None):
    """Build a pyopencl error the way pyopencl itself raises them."""
    kind = kind or cl.RuntimeError
    return kind(_cl._ErrorRecord(msg=msg, code=code, routine=routine))


class FakeDevice:
    def __init__(self, name="Fake GPU", type=cl.device_type.GPU):
        self.name = name + "  "
        self.type = type
        self.max_compute_units = 8
        self.global_mem_size = 512 * 1024 ** 2


class FakePlatform:
    def __init__(self, name, devices, error=None):
        self.name = name
        self.vendor = "Fake Vendor"
        self.version = "OpenCL 3.0 fake"
        self.devices = devices
        self.error = error

    def get_devices(self, device_type=cl.device_type.ALL):
        if self.error is not None:
            raise cl_error(self.error, "clGetDeviceIDs")
        if device_type in (cl.device_type.ALL, cl.device_type.DEFAULT):
            return list(self.devices)
        return [d for d in self.devices if d.type & device_type]


class FakeRuntime:
    """In-memory stand-in for the pyopencl entry points used by clvadd.

    ``fail(stage, code, at=n)`` makes the n-th call of a stage raise a
    pyopencl error with ``code``. Stages: platforms, context, queue, build,
    alloc, upload, download, bind, launch, sync.
    """

    def __init__(self):
        self.platforms = [FakePlatform("Fake Platform", [FakeDevice()])]
        self.faults = {}
        self.calls = {}
        self.offset = np.float32(0.0)
        self.build_log = "<kernel>:1:1: error: expected declaration"
        self.build_options = []
        self.buffers = []
        self.contexts = []
        self.context_refs = []
        self.launches = []

    def fail(self, stage, code, at=0):
        self.faults[stage] = (code, at)

    def check(self, stage, routine="clFake"):
        n = self.calls.get(stage, 0)
        self.calls[stage] = n + 1
        if stage in self.faults:
            code, at = self.faults[stage]
            if n == at:
                raise cl_error(code, routine)

    # pyopencl API

    def get_platforms(self):
        self.check("platforms", "clGetPlatformIDs")
        return list(self.platforms)

    def Context(self, devices):
        self.check("context", "clCreateContext")
        context = FakeContext(devices)
        self.context_refs.append(weakref.ref(context))
        return context

    def CommandQueue(self, context, device=None, properties=None):
        self.check("queue", "clCreateCommandQueue")
        return FakeQueue(self, context)

    def Program(self, context, source):
        return FakeProgram(self, context, source)

    def Kernel(self, program, name):
        if name not in program.kernel_names:
            raise cl_error(cl.status_code.INVALID_KERNEL_NAME,
                           "clCreateKernel", kind=cl.LogicError)
        return FakeKernel(self, name)

    def Buffer(self, context, flags, size=0, hostbuf=None):
        self.check("alloc", "clCreateBuffer")
        buf = FakeBuffer(flags, size)
        self.buffers.append(buf)
        return buf

    def enqueue_copy(self, queue, dest, src, is_blocking=True):
        if isinstance(dest, FakeBuffer):
            self.check("upload", "clEnqueueWriteBuffer")
            dest.data[:] = src
        else:
            self.check("download", "clEnqueueReadBuffer")
            dest[:] = src.data

    def enqueue_nd_range_kernel(self, queue, kernel, global_size, local_size):
        self.check("launch", "clEnqueueNDRangeKernel")
        self.launches.append((global_size, local_size))
        a, b, c = (kernel.args[i] for i in range(3))
        (n,) = global_size
        c.data[:n] = a.data[:n] + b.data[:n] + self.offset


class FakeContext:
    def __init__(self, devices):
        self.devices = devices


class FakeQueue:
    def __init__(self, runtime, context):
        self.runtime = runtime
        self.context = context
        self.finished = 0

    def finish(self):
        self.runtime.check("sync", "clFinish")
        self.finished += 1


class FakeProgram:
    def __init__(self, runtime, context, source):
        self.runtime = runtime
        self.source = source
        self.kernel_names = re.findall(r"__kernel\s+void\s+(\w+)\s*\(", source)

    def build(self, options=None, devices=None):
        self.runtime.build_options = list(options or [])
        self.runtime.check("build", "clBuildProgram")
        if not self.kernel_names or "}" not in self.source:
            raise cl_error(cl.status_code.BUILD_PROGRAM_FAILURE,
                           "clBuildProgram", msg="build failed")
        return self

    def get_build_info(self, device, param):
        return self.runtime.build_log


class FakeKernel:
    def __init__(self, runtime, name):
        self.runtime = runtime
        self.function_name = name
        self.num_args = 3
        self.args = {}

    def set_arg(self, slot, value):
        self.runtime.check("bind", "clSetKernelArg")
        self.args[slot] = value


class FakeBuffer:
    def __init__(self, flags, size):
        self.flags = flags
        self.size = size
        self.data = np.zeros(size // 4, dtype=np.float32)
        self.release_count = 0

    def release(self):
        self.release_count += 1


@pytest.fixture
def fake_cl(monkeypatch):
    runtime = FakeRuntime()
    for name in ("get_platforms", "Context", "CommandQueue", "Program",
                 "Kernel", "Buffer", "enqueue_copy",
                 "enqueue_nd_range_kernel"):
        monkeypatch.setattr(cl, name, getattr(runtime, name))

    class RecordingContext(ExecutionContext):
        def __init__(self, *args, **kwargs):
            super().__init__(*args, **kwargs)
            runtime.contexts.append(self)

    monkeypatch.setattr(clvadd.pipeline, "ExecutionContext", RecordingContext)
    return runtime


@pytest.fixture
def ctx(fake_cl):
    device = fake_cl.platforms[0].devices[0]
    with ExecutionContext.create(device) as ctx:
        yield ctx
