"""
Shared constants for netstat capture parsing.
"""
from types import MappingProxyType

# ── Standard ports ───────────────────────────────────────────────
# Windows netstat prints a service name instead of the port number when
# the port appears in %SystemRoot%\System32\drivers\etc\services.
STANDARD_PORTS = MappingProxyType({
    "ingreslock":     1524,
    "ms-sql-s":       1433,
    "nfsd-status":    1110,
    "ms-sna-base":    1478,
    "ms-sna-server":  1477,
    "wins":           1512,
    "pptconference":  1711,
    "pptp":           1723,
    "msiccp":         1731,
    "remote-winsock": 1745,
    "ms-streaming":   1755,
    "msmq":           1801,
    "msnp":           1863,
    "ssdp":           1900,
    "knetd":          2053,
    "man":            9535,
})

# ── Port range ───────────────────────────────────────────────────
MAX_PORT = 65535

# ── Defaults ─────────────────────────────────────────────────────
DEFAULT_PROCESS_FILTER = "java.exe"

