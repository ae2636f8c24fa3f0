# uigen/core/logging.py
import sys
import os
from datetime import datetime
from typing import Any, Optional


# ═══════════════════════════════════════════════════════════════════════════════
# LOG FILTERING
# ═══════════════════════════════════════════════════════════════════════════════
# Only these scopes are shown at INFO level
# Everything else is gated behind DEBUG

INFO_SCOPES = {
    "SERVER",       # Startup / shutdown
    "DB",           # Persistence
    "AI",           # Provider manager decisions
    "PROVIDER",     # Adapter lifecycle
    "HTTP",         # Access log + client errors
    "WS",           # WebSocket lifecycle
    "MONITORING",   # Metrics registration
}

# DEBUG-only scopes (hidden by default)
DEBUG_SCOPES = {
    "VFS",
    "TOOLS",
    "STREAM",
    "WORKSPACE",
}


def _debug_mode() -> bool:
    return os.getenv("UIGEN_DEBUG", "false").lower() == "true"


def _prefix(scope: str, project_id: Optional[str]) -> str:
    timestamp = datetime.now().strftime("%H:%M:%S")
    prefix = f"[{timestamp}] [{scope}]"
    if project_id:
        prefix += f" [{project_id[:8]}]"
    return prefix


def log(scope: str, message: str, data: Any = None, project_id: Optional[str] = None) -> None:
    """
    Unified logging function for UIGen.

    Only INFO_SCOPES are shown by default.
    Set UIGEN_DEBUG=true to see all scopes.
    """
    if not _debug_mode() and scope not in INFO_SCOPES:
        return

    print(f"{_prefix(scope, project_id)} {message}")

    if data:
        print(f"  Data: {data}")

    sys.stdout.flush()


def log_error(scope: str, message: str, data: Any = None, project_id: Optional[str] = None) -> None:
    """Log an error to stderr. Never filtered."""
    print(f"{_prefix(scope, project_id)} ❌ {message}", file=sys.stderr)
    if data:
        print(f"  Data: {data}", file=sys.stderr)
    sys.stderr.flush()


def log_section(scope: str, title: str, project_id: Optional[str] = None) -> None:
    """
    Log a section header with visual separator.
    """
    print(f"\n{'='*60}")
    print(f"{_prefix(scope, project_id)} {title}")
    print(f"{'='*60}")
    sys.stdout.flush()
