"""
Platform facts gathered with the capability prober.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Union

from configkit.core.options import ConfigureOptions
from configkit.core.platform import HostDescriptor
from configkit.probing.prober import CapabilityProber

logger = logging.getLogger(__name__)

SIZEOF_LONG_SOURCE = "int main() { return sizeof(long); }"

ENDIAN_SOURCE = "int main() { int one = 1; return (*((char*)&one)) == 1 ? 0 : 1; }"

TR1_HASH_SOURCE = """\
#include <stdint.h>
#include <tr1/unordered_map>

typedef std::tr1::unordered_map<uint64_t, void*> X;

int main() { X x; return 0; }
"""

X86_32_SOURCE = """\
int main() {
#if defined(i386) || defined(__i386__) || defined(__i386)
  return 1;
#else
  return 0;
#endif
}
"""

CURSES_SOURCE = """\
#include <curses.h>
#include <term.h>

int main() { return tgetnum(""); }
"""

CURSES_LIBRARIES = ("curses", "ncurses", "termcap")

FactValue = Union[bool, int, str, None]


@dataclass(frozen=True)
class CapabilityFact:
    """One probed platform fact."""

    name: str
    value: FactValue


@dataclass
class DetectionResult:
    """Facts and compile defines produced by a probing pass."""

    facts: List[CapabilityFact] = field(default_factory=list)
    defines: List[str] = field(default_factory=list)

    def add(self, name: str, value: FactValue) -> None:
        self.facts.append(CapabilityFact(name, value))

    def get(self, name: str) -> FactValue:
        for fact in self.facts:
            if fact.name == name:
                return fact.value
        raise KeyError(name)


def detect_sizeof_long(prober: CapabilityProber) -> int:
    size = prober.run_program(SIZEOF_LONG_SOURCE)
    prober.reporter.info(f"Checking sizeof(long): {size} bytes")
    return size


def detect_endian(prober: CapabilityProber) -> bool:
    """Return True on little-endian hosts."""
    little_endian = prober.run_program(ENDIAN_SOURCE) == 0
    prober.reporter.info(
        "Checking platform endianness: "
        + ("little endian" if little_endian else "big endian")
    )
    return little_endian


def detect_tr1_hash(prober: CapabilityProber) -> bool:
    found = prober.compile_program(TR1_HASH_SOURCE)
    prober.reporter.info(
        "Checking tr1/hash definition: " + ("found" if found else "not found")
    )
    return found


def detect_x86_32(prober: CapabilityProber, sizeof_long: int) -> bool:
    """32-bit x86 is only probed for when long is 4 bytes."""
    x86_32 = False
    if sizeof_long == 4:
        x86_32 = prober.run_program(X86_32_SOURCE) == 1
    prober.reporter.info("Checking for x86_32: " + ("yes" if x86_32 else "no"))
    return x86_32


def detect_curses(prober: CapabilityProber) -> Optional[str]:
    """Return the first curses-compatible library that links, or None."""
    found = None
    for library in CURSES_LIBRARIES:
        if prober.compile_program(CURSES_SOURCE, [library]):
            found = library
            break
    prober.reporter.info(f"Checking curses library: {found or 'not found'}")
    return found


def has_function(prober: CapabilityProber, name: str, includes: List[str]) -> bool:
    found = prober.inspect_symbol(name, includes)
    prober.reporter.info(
        f"Checking for function '{name}': " + ("found!" if found else "not found.")
    )
    return found


def detect_features(
    prober: CapabilityProber,
    options: ConfigureOptions,
    host: HostDescriptor,
    result: DetectionResult,
) -> None:
    """
    Probe optional library features and record the resulting defines.

    HAS_EXECINFO and HAS_READLINE are only probed for when their feature is
    enabled. The bundled ruby readline is used when requested or when the C
    readline library is missing.
    """
    if options.feature_enabled("execinfo", host) and has_function(
        prober, "backtrace", ["execinfo.h"]
    ):
        result.defines.append("HAS_EXECINFO")

    if options.feature_enabled("C-readline", host) and has_function(
        prober, "readline", ["stdio.h", "stdlib.h", "readline/readline.h"]
    ):
        result.defines.append("HAS_READLINE")

    rb_readline = (
        options.feature_enabled("ruby-readline", host)
        or "HAS_READLINE" not in result.defines
    )
    result.add("rb_readline", rb_readline)
    result.add("vendor_zlib", options.feature_enabled("vendor-zlib", host))


def run_detectors(
    prober: CapabilityProber, options: ConfigureOptions, host: HostDescriptor
) -> DetectionResult:
    """
    Run every detector in order.

    Args:
        prober: Capability prober
        options: Configure options (feature toggles)
        host: Host descriptor

    Returns:
        DetectionResult with sizeof_long, little_endian, tr1_hash, x86_32,
        rb_readline, vendor_zlib and curses facts

    Raises:
        FatalConfigurationError: If a mandatory probe does not compile
    """
    result = DetectionResult()

    sizeof_long = detect_sizeof_long(prober)
    result.add("sizeof_long", sizeof_long)
    result.add("little_endian", detect_endian(prober))
    result.add("tr1_hash", detect_tr1_hash(prober))
    result.add("x86_32", detect_x86_32(prober, sizeof_long))
    detect_features(prober, options, host, result)
    result.add("curses", detect_curses(prober))

    return result
