"""
Host capability probing: compile-and-run probes, detectors and tool checks.
"""

from configkit.probing.detectors import CapabilityFact, DetectionResult, run_detectors
from configkit.probing.prober import CapabilityProber
from configkit.probing.tools import check_build_tools, check_tool_version

__all__ = [
    "CapabilityFact",
    "CapabilityProber",
    "DetectionResult",
    "check_build_tools",
    "check_tool_version",
    "run_detectors",
]
