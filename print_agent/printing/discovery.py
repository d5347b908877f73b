"""
Printer discovery.

Asks the native print system for its queues (`lpstat -p`). On Windows, when
that fails, falls back to PowerShell's Get-Printer. Discovery never raises:
any failure degrades to an empty list.
"""

from __future__ import annotations

import logging
import re
import subprocess
import sys
from typing import Iterable, List, Optional, Sequence

from print_agent.core.config import get_discovery_timeout

logger = logging.getLogger(__name__)

LPSTAT_CMD = ["lpstat", "-p"]
POWERSHELL_CMD = ["powershell", "-Command", "Get-Printer | Select -ExpandProperty Name"]

_LPSTAT_LINE = re.compile(r"^printer\s+(\S+)")


def _unique(names: Iterable[str]) -> List[str]:
    seen = set()
    out: List[str] = []
    for n in names:
        if n not in seen:
            seen.add(n)
            out.append(n)
    return out


def parse_lpstat(output: str) -> List[str]:
    """
    Extract queue names from `lpstat -p` output, e.g.

        printer Kitchen is idle.  enabled since ...
    """
    names = []
    for line in output.splitlines():
        m = _LPSTAT_LINE.match(line.strip())
        if m:
            names.append(m.group(1))
    return _unique(names)


def parse_name_list(output: str) -> List[str]:
    """
    Extract names from newline-delimited output (one printer per line).
    """
    return _unique(line.strip() for line in output.splitlines() if line.strip())


def _run(cmd: Sequence[str], timeout: float) -> Optional[str]:
    """
    Run a discovery command and return stdout, or None on any failure.
    """
    try:
        proc = subprocess.run(list(cmd), capture_output=True, text=True, timeout=timeout, check=False)
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.warning("Printer discovery command %s failed: %s", cmd[0], e)
        return None
    if proc.returncode != 0:
        logger.warning(
            "Printer discovery command %s exited %d: %s",
            cmd[0],
            proc.returncode,
            (proc.stderr or "").strip(),
        )
        return None
    return proc.stdout or ""


def list_printers(timeout: Optional[float] = None) -> List[str]:
    """
    Return printer names known to the host, or [] when discovery fails.
    """
    t = get_discovery_timeout() if timeout is None else timeout

    out = _run(LPSTAT_CMD, t)
    if out is not None:
        return parse_lpstat(out)

    if sys.platform == "win32":
        out = _run(POWERSHELL_CMD, t)
        if out is not None:
            return parse_name_list(out)

    logger.info("No printers discovered")
    return []


__all__ = ["LPSTAT_CMD", "POWERSHELL_CMD", "list_printers", "parse_lpstat", "parse_name_list"]
