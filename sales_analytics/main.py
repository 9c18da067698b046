"""
Sales Analytics API

Main entry point for the reporting API.
"""

from sales_analytics.config import get_settings
from sales_analytics.serving.api import create_app

settings = get_settings()

app = create_app()


@app.get("/api/v1/info")
async def api_info():
    """API information endpoint."""
    return {
        "name": "Sales Analytics API",
        "version": settings.version,
        "environment": settings.app_env,
        "documentation": "/docs",
    }


def run() -> None:
    import uvicorn
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)


if __name__ == "__main__":
    run()
