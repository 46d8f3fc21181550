#!/usr/bin/env python3
"""Run the spellplay API server."""

import logging
import os

import uvicorn


def main():
    logging.basicConfig(level=logging.INFO)
    host = os.environ.get('SPELLPLAY_HOST', '0.0.0.0')
    port = int(os.environ.get('SPELLPLAY_PORT', '8000'))
    print("Starting SpellPlay API server...")
    print(f"API documentation available at: http://localhost:{port}/docs")
    uvicorn.run(
        "server.app:app",
        host=host,
        port=port,
        reload=True
    )


if __name__ == "__main__":
    main()
