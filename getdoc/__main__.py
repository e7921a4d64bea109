import sys

from getdoc.cli.getdoc import main

if __name__ == "__main__":
    sys.exit(main())
