import uvicorn

from civicpulse.config.logging_setup import setup_logging
from civicpulse.providers.settings import get_settings


def main():
    """Start the API server."""
    setup_logging()
    settings = get_settings()

    print(f"Starting CivicPulse API at http://{settings.civicpulse_host}:{settings.civicpulse_port}")
    print("Press CTRL+C to quit.")

    uvicorn.run(
        "civicpulse.main:app",
        host=settings.civicpulse_host,
        port=settings.civicpulse_port,
        log_config=None  # Use the configuration loaded above
    )


if __name__ == "__main__":
    main()
