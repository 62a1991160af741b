#!/usr/bin/env python3
"""Training Timer — entry point.

Run with:
    python main.py
    python -m trainingtimer
"""

from trainingtimer.__main__ import main


if __name__ == "__main__":
    main()
