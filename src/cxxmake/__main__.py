"""Allow `python -m cxxmake`."""

from cxxmake.cli import main

if __name__ == "__main__":
    main()
