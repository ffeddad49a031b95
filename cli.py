#!/usr/bin/env python3
from dotenv import load_dotenv

from timelens.cli.main import cli

if __name__ == "__main__":
    load_dotenv()
    cli()
