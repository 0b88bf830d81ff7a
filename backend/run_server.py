"""Run the telemedicine API under uvicorn. Host and port come from SERVER_HOST / SERVER_PORT."""
import signal
import sys

import uvicorn

from telemed.core.config import settings


def handle_signal(sig, frame):
    print(f"\nReceived signal {sig}, shutting down gracefully...")
    sys.exit(0)


def main():
    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    print("=" * 50)
    print(f"  Telemed API on http://{settings.SERVER_HOST}:{settings.SERVER_PORT}/api")
    print(f"  environment={settings.ENVIRONMENT} database={settings.DATABASE_URL.split(':', 1)[0]}")
    print("=" * 50)
    uvicorn.run(
        "telemed.main:app",
        host=settings.SERVER_HOST,
        port=settings.SERVER_PORT,
        reload=settings.DEBUG,
        log_level="debug" if settings.DEBUG else "info",
    )


if __name__ == "__main__":
    main()
