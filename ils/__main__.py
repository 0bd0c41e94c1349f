"""Module entrypoint for ``python -m ils``.

Behaves the same as the ``ils-bin`` script; argument parsing and setup
happen in ``ils.cli``.
"""

from .cli import main


if __name__ == "__main__":
    main()
