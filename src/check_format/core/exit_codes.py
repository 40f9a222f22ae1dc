from __future__ import annotations

OK = 0
ERR_CHECKS_FAILED = 1
ERR_CONTEXT = 3
ERR_CONFIG = 4
ERR_INTERNAL = 99
