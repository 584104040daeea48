"""Run the Ruleforge CLI.

Usage:
    python -m ruleforge schema validate --schema order.yaml --instance order.json
    python -m ruleforge schema formats
"""


def main():
    from ruleforge.cli.main import cli
    cli()


if __name__ == "__main__":
    main()
