from cli.app import cli


def main():
    """Entry point for the cwm CLI. Delegates to cli.app:cli."""
    cli()


if __name__ == "__main__":
    main()
