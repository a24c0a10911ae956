"""
Absolute Learner - Web Server Entry Point
=========================================

Run this to start the WhatsApp webhook:
    python main.py

Then point your Twilio WhatsApp sandbox "When a message comes in" URL at
    https://<your-host>/webhook
"""

import logging

import uvicorn

from src.infrastructure.config import get_settings

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)


def main():
    """Start the web server."""
    settings = get_settings()

    print("\n" + "=" * 50)
    print("   Absolute Learner - WhatsApp Daily Mentor")
    print("=" * 50)
    print(f"\n   Listening on http://{settings.server.host}:{settings.server.port}")
    print("   Press Ctrl+C to stop\n")

    uvicorn.run(
        "src.web.app:app",
        host=settings.server.host,
        port=settings.server.port,
        log_level="info"
    )


if __name__ == "__main__":
    main()
