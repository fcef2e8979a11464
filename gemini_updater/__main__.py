"""Allow ``python -m gemini_updater``."""

from gemini_updater.main import main

if __name__ == "__main__":
    main()
