"""Entry point for running the toggle as a module: python -m dictate_toggle"""

import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from dictate_toggle.app import DictationToggle
from dictate_toggle.config import Config
from dictate_toggle.errors import AlreadyRunningError, DictationError
from dictate_toggle.notify import notify


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity setting."""
    level = logging.INFO if verbose else logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    for name in ("urllib3", "requests"):
        logging.getLogger(name).setLevel(logging.WARNING)


def main() -> int:
    """Main entry point."""
    env_path = Path.cwd() / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    try:
        config = Config.from_env()
    except DictationError as e:
        setup_logging(verbose=False)
        logging.error("%s", e)
        notify(f"Configuration error: {e}")
        return 1

    setup_logging(config.verbose)

    try:
        action = DictationToggle(config).run()
    except AlreadyRunningError as e:
        logging.warning("%s; nothing to do", e)
        return 0
    except DictationError as e:
        logging.error("%s", e)
        if not e.notified:
            notify(str(e))
        return 1
    except KeyboardInterrupt:
        print("\n👋 Interrupted")
        return 130
    except Exception as e:
        logging.exception("Fatal error: %s", e)
        notify(f"Fatal error: {e}")
        return 1

    logging.info("Done: %s", action.value)
    return 0


if __name__ == "__main__":
    sys.exit(main())
