"""
Entry point for running dns_optimizer as a module.

Usage: python -m dns_optimizer [OPTIONS] [COMMAND] [ARGS]...
"""

from .cli import main

if __name__ == "__main__":
    main()
