"""Platform enumeration and device selection."""

import logging

import pyopencl as cl

from clvadd.errors import NoDeviceError, NoPlatformError, status_of

logger = logging.getLogger(__name__)

DEVICE_TYPES = {
    "default": cl.device_type.DEFAULT,
    "cpu": cl.device_type.CPU,
    "gpu": cl.device_type.GPU,
    "accelerator": cl.device_type.ACCELERATOR,
    "all": cl.device_type.ALL,
}


def resolve_device_type(device_type):
    """Accept either a name from ``DEVICE_TYPES`` or a raw device_type value."""
    if isinstance(device_type, str):
        try:
            return DEVICE_TYPES[device_type.lower()]
        except KeyError:
            raise ValueError(
                f"unknown device type {device_type!r}, "
                f"expected one of {', '.join(DEVICE_TYPES)}") from None
    return device_type


def get_platforms():
    """Return every OpenCL platform, raising NoPlatformError if there are none."""
    try:
        platforms = cl.get_platforms()
    except cl.Error as e:
        # the ICD loader reports an empty installation as PLATFORM_NOT_FOUND_KHR
        raise NoPlatformError(status_of(e)) from e

    if not platforms:
        raise NoPlatformError()

    logger.debug("Found %d platform(s): %s",
                 len(platforms), ", ".join(p.name for p in platforms))
    return platforms


def find_device(platforms, device_type=cl.device_type.DEFAULT):
    """Return the first device of ``device_type``, searching platforms in order.

    The first platform that yields a device wins; later platforms are not
    consulted.
    """
    device_type = resolve_device_type(device_type)
    status = cl.status_code.DEVICE_NOT_FOUND
    for platform in platforms:
        try:
            devices = platform.get_devices(device_type=device_type)
        except cl.Error as e:
            status = status_of(e)
            logger.debug("Platform %s has no matching device (%d)",
                         platform.name, status)
            continue
        if devices:
            logger.debug("Selected platform %s", platform.name)
            return devices[0]

    raise NoDeviceError(status)


def select_device(device_type=cl.device_type.DEFAULT):
    """Locate a device and report its name on stdout."""
    device = find_device(get_platforms(), device_type)
    name = device.name.strip()
    print(f"Using device: {name}")
    logger.info("Using device %s", name)
    return device


def describe_platforms():
    """Return a printable inventory of every platform and its devices."""
    lines = []
    for platform in get_platforms():
        lines.append(f"[Platform] {platform.name} | {platform.vendor} | "
                     f"{platform.version}")
        try:
            devices = platform.get_devices()
        except cl.Error as e:
            lines.append(f"  Failed to enumerate devices: {e}")
            continue
        for device in devices:
            lines.append(f"  [Device] {device.name.strip()}")
            lines.append(
                f"           Type: {cl.device_type.to_string(device.type)}")
            lines.append(f"           Compute Units: {device.max_compute_units}")
            lines.append(
                f"           Global Memory: "
                f"{device.global_mem_size / (1024 ** 2):.2f} MB")
    return lines
