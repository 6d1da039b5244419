#!/usr/bin/env python3
"""Development server startup script."""

import os
import subprocess


def main():
    env = dict(os.environ, PYTHONPATH="src")

    cmd = ["uvicorn", "main:app", "--app-dir", "src", "--reload", "--host", "0.0.0.0", "--port", "8080", "--log-level", "debug"]

    print("Starting development server...")
    print(f"Command: {' '.join(cmd)}")
    print("Server at: http://localhost:8080")
    print("API docs at: http://localhost:8080/docs")
    print("Entities at: http://localhost:8080/api/entities")
    print("-" * 50)

    subprocess.run(cmd, env=env)


if __name__ == "__main__":
    main()
