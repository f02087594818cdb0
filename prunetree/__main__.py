"""Module entrypoint for ``python -m prunetree``.

All argument parsing happens in ``prunetree.cli``.
"""

from .cli import main


if __name__ == "__main__":
    main()
