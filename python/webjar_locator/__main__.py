# SPDX-License-Identifier: AGPL-3.0-only OR LicenseRef-Fullbleed-Commercial
"""Enable `python -m webjar_locator` invocation."""
from webjar_locator.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
