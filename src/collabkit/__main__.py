"""Executable entrypoint for `python -m collabkit`.

Delegates directly to :func:`collabkit.cli.main`.
"""

from collabkit.cli import main

if __name__ == "__main__":
    main()
