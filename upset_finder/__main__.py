"""Entry point for running a harvest via python -m upset_finder"""

from upset_finder.cli import main

if __name__ == "__main__":
    main()
