"""
Entry point for running the application with `python -m backend`.

AMA-355: Introduce app factory pattern
AMA-271: `python -m backend simulate|flatten ...` runs the CLI instead
"""
import sys

import uvicorn

if __name__ == "__main__":
    if len(sys.argv) > 1:
        from backend.cli import main

        main(sys.argv[1:])
    else:
        uvicorn.run("backend.main:app", host="0.0.0.0", port=8001, reload=True)
