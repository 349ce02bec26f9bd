"""Round-trip probes backed by the system ``ping`` binary."""

from __future__ import annotations

import logging
import math
import re
import sys
from typing import Protocol

from ._safe_subprocess import SubprocessError, format_command, safe_run
from .contracts.error import BadInputError, ProbeError
from .core.samples import DROP, Sample

logger = logging.getLogger(__name__)

_RTT_RE = re.compile(r"time[=<]\s*([0-9]+(?:\.[0-9]+)?)\s*ms")
# Extra slack on top of ping's own deadline before the process is killed.
_PROCESS_GRACE_S = 1.0
# Exit status ping uses for "sent fine, nobody answered".
_NO_REPLY_EXIT: dict[str, frozenset[int]] = {
    "linux": frozenset({1}),
    "darwin": frozenset({2}),
    "freebsd": frozenset({2}),
    "openbsd": frozenset({1}),
    "netbsd": frozenset({2}),
}


class Prober(Protocol):
    """Produces exactly one sample per call; raises :class:`ProbeError` when it cannot."""

    def probe(self) -> Sample: ...


def parse_rtt(output: str) -> float | None:
    """Return the first ``time=<ms>`` value in ping output, if any."""

    match = _RTT_RE.search(output)
    if match is None:
        return None
    return float(match.group(1))


def _platform_key(platform: str) -> str:
    for key in _NO_REPLY_EXIT:
        if platform.startswith(key):
            return key
    return "linux"


class PingProber:
    """Send a single echo request to ``target`` and wait at most ``timeout`` seconds."""

    def __init__(
        self,
        target: str,
        timeout: float,
        *,
        executable: str = "ping",
        platform: str | None = None,
    ) -> None:
        target = target.strip()
        if not target:
            raise BadInputError("target address must not be empty")
        if target.startswith("-"):
            raise BadInputError(f"invalid target address {target!r}")
        if timeout <= 0:
            raise BadInputError("probe timeout must be > 0")
        self.target = target
        self.timeout = timeout
        self.executable = executable
        self._platform = _platform_key(platform or sys.platform)

    def command(self) -> list[str]:
        if self._platform == "linux" or self._platform == "openbsd":
            wait = str(max(1, math.ceil(self.timeout)))
        else:
            # BSD/macOS ping takes the wait time in milliseconds
            wait = str(max(1, math.ceil(self.timeout * 1000)))
        return [self.executable, "-n", "-c", "1", "-W", wait, self.target]

    def probe(self) -> Sample:
        command = self.command()
        try:
            completed = safe_run(command, timeout=self.timeout + _PROCESS_GRACE_S, check=False)
        except SubprocessError:
            logger.debug("ping to %s overran its deadline; counting a drop", self.target)
            return DROP
        except OSError as exc:
            raise ProbeError(
                f"cannot run {format_command(command)}: {exc}",
                hint="Install iputils-ping (or equivalent) and make sure it is on PATH.",
            ) from exc

        if completed.returncode == 0:
            rtt = parse_rtt(completed.stdout or "")
            if rtt is None:
                logger.warning("Could not find a round-trip time in ping output: %r", completed.stdout)
                return DROP
            logger.debug("Reply from %s in %.3f ms", self.target, rtt)
            return rtt
        if completed.returncode in _NO_REPLY_EXIT[self._platform]:
            logger.debug("No reply from %s within %.3fs", self.target, self.timeout)
            return DROP

        detail = (completed.stderr or completed.stdout or "").strip()
        raise ProbeError(
            f"ping {self.target} failed (exit {completed.returncode}): {detail}",
            hint="Check that the address resolves and that ping is permitted for this user.",
        )


__all__ = [
    "PingProber",
    "Prober",
    "parse_rtt",
]
