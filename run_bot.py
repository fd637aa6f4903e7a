#!/usr/bin/env python3
"""
Run the launchpad Telegram bot
"""

from launchpad.bot import main

if __name__ == '__main__':
    main()
