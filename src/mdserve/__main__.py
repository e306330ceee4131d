"""Allow ``python -m mdserve``."""

from mdserve._cli import main

main()
