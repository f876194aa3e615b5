"""Package entry point for ``python -m playht_converter``.

WHY: Users run a conversion as
``python -m playht_converter "Some text" greeting.mp3``.

HOW: Delegates to the CLI's main() function.
"""

from playht_converter.cli import main

if __name__ == "__main__":
    main()
