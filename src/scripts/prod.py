#!/usr/bin/env python3
"""Production server startup script."""

import os
import sys

# Make the top-level packages under src/ importable
SRC_DIR = os.path.join(os.path.dirname(__file__), "..")
sys.path.insert(0, SRC_DIR)


def main():
    import uvicorn

    port = int(os.environ.get("PORT", "8080"))

    print(f"Starting production server on port {port}...")
    print("Logs: INFO level")
    print(f"Health check: http://0.0.0.0:{port}/health")
    print("-" * 50)

    uvicorn.run(
        "main:app",
        app_dir=SRC_DIR,
        host="0.0.0.0",
        port=port,
        workers=1,
        log_level="info",
    )


if __name__ == "__main__":
    main()
