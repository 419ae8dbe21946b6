"""
Tuner package __main__ entry point.

Allows running with: python -m tuner
"""

from tuner.app.radio import main

if __name__ == "__main__":
    main()
