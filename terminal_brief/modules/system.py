"""
System information module for terminal-brief.
Shows load average, memory, disk, battery and uptime using psutil.
"""

import logging
import math
import time
from typing import Optional

import psutil

from terminal_brief.core.color import color_bold_text, color_text
from terminal_brief.core.config import BriefConfig
from .base import BriefModule

logger = logging.getLogger(__name__)

NOT_AVAILABLE = "N/A"
BYTE_UNITS = ("B", "KB", "MB", "GB", "TB", "PB")


def format_bytes(num_bytes: float) -> str:
    """Format a byte count with 1024 steps, e.g. 1536 -> '1.50 KB'."""
    if num_bytes <= 0:
        return "0 B"
    exponent = min(int(math.floor(math.log(num_bytes, 1024))), len(BYTE_UNITS) - 1)
    return f"{num_bytes / 1024 ** exponent:.2f} {BYTE_UNITS[exponent]}"


def format_uptime(seconds: float) -> str:
    """Format a duration as 'Hh Mm Ss'."""
    total = max(int(seconds), 0)
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours}h {minutes}m {secs}s"


def get_load_average() -> str:
    try:
        loads = psutil.getloadavg()
    except (OSError, AttributeError, psutil.Error) as e:
        logger.warning("Could not get load average: %s", e)
        return NOT_AVAILABLE
    return ", ".join(f"{load:.2f}" for load in loads)


def get_memory_usage() -> str:
    try:
        memory = psutil.virtual_memory()
    except (OSError, psutil.Error) as e:
        logger.warning("Could not get memory usage: %s", e)
        return NOT_AVAILABLE
    used = memory.total - memory.available
    return f"{format_bytes(used)} used / {format_bytes(memory.total)} total"


def get_disk_usage(path: str = "/") -> str:
    try:
        disk = psutil.disk_usage(path)
    except (OSError, psutil.Error) as e:
        logger.warning("Could not get disk usage: %s", e)
        return NOT_AVAILABLE
    return (f"{format_bytes(disk.used)} used / {format_bytes(disk.total)} total "
            f"({disk.percent:.0f}% used)")


def get_battery() -> str:
    try:
        battery = psutil.sensors_battery()
    except (OSError, AttributeError, NotImplementedError, psutil.Error) as e:
        logger.debug("Battery sensors unavailable: %s", e)
        return NOT_AVAILABLE
    if battery is None:
        return NOT_AVAILABLE
    status = " (charging)" if battery.power_plugged else ""
    return f"{round(battery.percent)}%{status}"


def get_uptime(now: Optional[float] = None) -> str:
    try:
        boot_time = psutil.boot_time()
    except (OSError, psutil.Error) as e:
        logger.warning("Could not get uptime: %s", e)
        return NOT_AVAILABLE
    return format_uptime((now if now is not None else time.time()) - boot_time)


class SystemModule(BriefModule):
    """Local machine statistics. Needs no credentials and no cache."""

    name = "system"

    async def setup(self, config: BriefConfig) -> None:
        pass

    async def display(self, config: BriefConfig) -> str:
        settings = config.system
        lines = [color_bold_text("yellow", "System Information:")]

        if settings.show_load:
            lines.append(f"{color_text('cyan', 'Load')}: {get_load_average()}")
        if settings.show_memory:
            lines.append(f"{color_text('green', 'Memory')}: {get_memory_usage()}")
        if settings.show_disk:
            lines.append(f"{color_text('magenta', 'Disk')}: {get_disk_usage()}")
        if settings.show_battery:
            lines.append(f"{color_text('yellow', 'Battery')}: {get_battery()}")
        if settings.show_uptime:
            lines.append(f"{color_text('blue', 'Uptime')}: {get_uptime()}")

        return "\n".join(lines)
