# FILE: cepoka/scripts/generate_icons.py
# Run: python -m cepoka.scripts.generate_icons [--source public/icons/sitelogo.png] [--out public]
import argparse
import sys
from pathlib import Path

from cepoka.icons import write_icons
from cepoka.settings import PUBLIC_DIR, SOURCE_LOGO, configure_logging


def main() -> int:
    parser = argparse.ArgumentParser(description="Generate favicons / touch icons from the site logo")
    parser.add_argument("--source", type=Path, default=SOURCE_LOGO, help="source logo image")
    parser.add_argument("--out", type=Path, default=PUBLIC_DIR, help="output directory")
    args = parser.parse_args()

    configure_logging()
    written = write_icons(args.source, args.out)
    return 0 if written else 1


if __name__ == "__main__":
    sys.exit(main())
