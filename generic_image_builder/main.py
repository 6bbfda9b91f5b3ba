from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional

from .build import ImageBuilder
from .errors import ImageBuilderError
from .logging_utils import FALLBACK_LOG_NAME, add_log_file, configure_logging, default_log_path

logger = logging.getLogger(__name__)


def main(argv: Optional[list[str]] = None) -> int:
    p = argparse.ArgumentParser(prog="build-image", description="Build a bootable disk image")
    p.add_argument("-c", "--configpath", required=True, help="Path to the image config (yaml)")
    p.add_argument("--log", default=None, help="Path to the build log (default: <workdir>.log)")
    p.add_argument("-v", "--verbose", action="store_true", help="Log command output")

    args = p.parse_args(argv)

    configure_logging(level=logging.DEBUG if args.verbose else logging.INFO)

    try:
        builder = ImageBuilder.create(args.configpath)
        if args.log:
            add_log_file(args.log)
        else:
            add_log_file(str(default_log_path(builder.cfg.workdir)), fallback=FALLBACK_LOG_NAME)
        builder.run()
    except (ImageBuilderError, OSError) as e:
        logger.debug("Build aborted", exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
