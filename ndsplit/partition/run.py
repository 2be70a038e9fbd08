from __future__ import annotations
import argparse, sys
from typing import List, Optional
from ..utils.config import load_settings
from ..utils.logger import get_logger, set_level
from .engine import PartitionEngine
from .errors import SplitError

log = get_logger("ndsplit.run")

def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="ndsplit",
        description="Splits an ndjson file into multiple files according to the value at a json path.",
        epilog="Example: ndsplit -o=out/ runs.ndjson inparams target",
    )
    p.add_argument("input", help="ndjson file to split")
    p.add_argument("key_path", nargs="*", metavar="path-identifier",
                   help="json path identifiers (default: inparams target)")
    p.add_argument("-o", "--out-folder", dest="out_dir", default=None,
                   help="folder for the per-key output files (default: .)")
    p.add_argument("-c", "--config", default=None, help="YAML config with a 'split' section")
    p.add_argument("--on-error", choices=["abort", "skip"], default=None,
                   help="what to do with a line that is not valid JSON or has no key (default: abort)")
    p.add_argument("--key-policy", choices=["reject", "sanitize"], default=None,
                   help="keys that are not safe file names are rejected or sanitized (default: reject)")
    p.add_argument("--sort-keys", action="store_true", default=None, help="write object keys sorted")
    p.add_argument("--progress", choices=["console", "tqdm", "none"], default=None)
    p.add_argument("--log-level", default=None)
    return p.parse_args(argv)

def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    try:
        settings = load_settings(args.config, {
            "out_dir": args.out_dir,
            "key_path": args.key_path or None,
            "on_error": args.on_error,
            "key_policy": args.key_policy,
            "sort_keys": args.sort_keys,
            "progress": args.progress,
            "log_level": args.log_level,
        })
        set_level(settings.log_level)
        engine = PartitionEngine(args.input, settings)
        summary = engine.run()
    except SplitError as e:
        log.error(str(e))
        return e.exit_code
    except KeyboardInterrupt:
        log.error("interrupted")
        return 130

    for key, n in summary.files.items():
        log.info(f"  {key}: {n} records")
    return 0

if __name__ == "__main__":
    sys.exit(main())
