"""Entry point for running aws-mfa-secure as a module."""

from .cli import main

if __name__ == "__main__":
    main()
