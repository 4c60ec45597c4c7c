"""
Entry point for running vulkankit CLI as a module.

Usage: python -m vulkankit.cli [command] [options]
"""

from .parser import main

if __name__ == "__main__":
    main()
