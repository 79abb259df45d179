import sys
from pathlib import Path

import fncli

from . import db
from .core.errors import GrowthError


def main():
    db.init()
    fncli.autodiscover(Path(__file__).parent, "growth")

    argv = ["growth", *(sys.argv[1:] or ["dashboard"])]
    try:
        code = fncli.dispatch(argv)
    except (GrowthError, fncli.UsageError) as e:
        sys.stderr.write(f"{e}\n")
        sys.exit(1)
    sys.exit(code)


if __name__ == "__main__":
    main()
