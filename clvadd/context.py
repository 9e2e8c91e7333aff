"""Context and command queue for one device, plus ownership of what they create."""

import logging
from contextlib import ExitStack

import pyopencl as cl

from clvadd.errors import ContextCreationError, QueueCreationError, status_of

logger = logging.getLogger(__name__)


class ExecutionContext:
    """A context bound to one device and a single in-order command queue.

    Everything created against the context (program, kernel, buffers) is
    registered with :meth:`adopt` and released, newest first, when the
    context is closed. The queue and then the context go last.
    """

    def __init__(self, device, context, queue):
        self.device = device
        self.context = context
        self.queue = queue
        self.released = []
        self._stack = ExitStack()
        self._stack.callback(self._release, "context", self._drop_context)
        self._stack.callback(self._release, "queue", self._drop_queue)

    @classmethod
    def create(cls, device):
        try:
            context = cl.Context([device])
        except cl.Error as e:
            raise ContextCreationError("Creating context", status_of(e)) from e
        logger.debug("Created context on %s", device.name.strip())

        try:
            # default properties: in-order, no profiling
            queue = cl.CommandQueue(context, device)
        except cl.Error as e:
            del context
            logger.debug("Released context")
            raise QueueCreationError(
                "Creating command queue", status_of(e)) from e
        logger.debug("Created command queue")

        return cls(device, context, queue)

    def adopt(self, name, release):
        """Release ``name`` with ``release()`` before anything adopted earlier."""
        self._stack.callback(self._release, name, release)

    def close(self):
        self._stack.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def _release(self, name, release):
        release()
        self.released.append(name)
        logger.debug("Released %s", name)

    def _drop_queue(self):
        self.queue = None

    def _drop_context(self):
        self.context = None
