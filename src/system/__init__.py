"""Pacote system: processos externos, editor e logs.

Re-exports úteis para ``src.core``.
"""

from .log_helpers import write_text, write_json
from .process import ProcessLifecycleManager, ProcessResult, run_once

__all__ = ["write_text", "write_json", "ProcessLifecycleManager", "ProcessResult", "run_once"]
