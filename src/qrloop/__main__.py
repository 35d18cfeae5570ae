"""Run one of the qrloop tools: ``python -m qrloop {detect,generate} ...``."""
from __future__ import annotations

import sys
from typing import Optional, Sequence

USAGE = "usage: python -m qrloop {detect,generate} [options]"


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    if not args or args[0] not in ("detect", "generate"):
        print(USAGE, file=sys.stderr)
        return 2

    if args[0] == "detect":
        from .detector import main as tool_main
    else:
        from .generator import main as tool_main
    return tool_main(args[1:])


if __name__ == "__main__":  # pragma: no cover - manual launch only
    raise SystemExit(main())
