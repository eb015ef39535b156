"""
Main entry point for the IDSC player registry API.
Usage (from repo root): python main.py
Equivalent to: uvicorn player_registry.api.main:app --port $PORT
"""

import os

import uvicorn


def main():
    port = int(os.environ.get("PORT", "3000"))
    host = os.environ.get("HOST", "0.0.0.0")
    uvicorn.run("player_registry.api.main:app", host=host, port=port, log_config=None)


if __name__ == "__main__":
    main()
