"""
Register the /avcs slash commands with Discord and exit.

Run once after adding or changing commands:
    python -m avcs.register_commands
"""

from avcs.main import run


def main() -> None:
    run(sync_only=True)


if __name__ == "__main__":
    main()
