"""
Main entry point for the H.265 Transcoder.

    python main.py [INPUT_DIR] [OUTPUT_DIR]

See `h265_transcoder.main` for the run sequence and exit codes.
"""

import sys

from h265_transcoder.main import main

if __name__ == "__main__":
    sys.exit(main())
