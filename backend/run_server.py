"""Run the billing API under uvicorn. HOST/PORT come from the environment."""
import os

import uvicorn

from billing.core.config import settings


def main():
    host = os.getenv("HOST", "127.0.0.1")
    port = int(os.getenv("PORT", "8000"))
    print("=" * 50)
    print(f"  Happy Greeting Billing on http://{host}:{port} ({settings.ENVIRONMENT})")
    print("=" * 50)
    uvicorn.run(
        "billing.main:app",
        host=host,
        port=port,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
