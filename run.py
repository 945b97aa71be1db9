#!/usr/bin/env python3
"""
Fee Ledger Entry Point

Starts the FastAPI server with the configured taxed token.
"""

import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from fee_ledger.api import run_server


if __name__ == "__main__":
    try:
        run_server()
    except KeyboardInterrupt:
        print("\nShutting down Fee Ledger...")
    except Exception as e:
        print(f"Error starting server: {e}")
        sys.exit(1)
