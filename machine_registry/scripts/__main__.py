"""Entry point: python -m machine_registry.scripts"""

from machine_registry.scripts.sequences import cli

if __name__ == "__main__":
    cli()
