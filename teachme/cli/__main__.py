"""Allow running as: python -m teachme.cli"""

from .app import main

if __name__ == "__main__":
    main()
