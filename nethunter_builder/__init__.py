"""NetHunter kernel + installer builder for the Pixel 4 (flame).

Core design goals:
- Strictly sequential, fail-fast stages
- Idempotent stages (the workspace on disk is the only checkpoint)
- Toolchain environment passed explicitly, never exported process-wide
- Centralized logging
"""

__all__ = []
