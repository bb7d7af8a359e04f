"""Run the classpulse FastAPI application with uvicorn."""

import uvicorn

from classpulse.application.config import settings

if __name__ == "__main__":
    uvicorn.run(
        "classpulse.application.api:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
