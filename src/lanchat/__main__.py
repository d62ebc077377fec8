"""
LAN Chat - Allow running as `python -m lanchat`.

Created by orpheus497
"""

from .main import main

if __name__ == '__main__':
    main()
