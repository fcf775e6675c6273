import sys

from hrpa.cli.handlers import main as run_main
from hrpa.contracts import SchemaError
from shared.errors import HdcError, InputValidationError


def main(argv=None):
    try:
        return run_main(argv)
    except (HdcError, InputValidationError, SchemaError) as exc:
        print("error:", exc, file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
