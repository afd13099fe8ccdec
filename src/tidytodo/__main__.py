"""Allow ``python -m tidytodo``."""
from tidytodo.cli import main

if __name__ == "__main__":
    main()
