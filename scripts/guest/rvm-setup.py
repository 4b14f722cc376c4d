#!/usr/bin/env python3
"""Provision this guest to boot the RVM hypervisor.

Runs from a source checkout without installing the package:

  python3 scripts/guest/rvm-setup.py
  python3 scripts/guest/rvm-setup.py --yes --mirror-url=http://mirrors.aliyun.com
  python3 scripts/guest/rvm-setup.py --list-steps
"""

from __future__ import annotations

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[2]))

from hostsetup.core.cli import main  # noqa: E402

if __name__ == "__main__":
    raise SystemExit(main())
