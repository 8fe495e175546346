#!/usr/bin/env python3
"""Entry point script for the Telegram media relay bot."""
import sys

from mediabot.config import ConfigurationError
from mediabot.main import main


if __name__ == "__main__":
    try:
        main()
    except ConfigurationError as e:
        print(f"Invalid configuration:\n{e}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nBot stopped by user. Goodbye!")
        sys.exit(0)
