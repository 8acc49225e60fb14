"""
Run the API with uvicorn on HOST:PORT from settings:

  python -m app
"""

import uvicorn

from app.core.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.APP_ENV == "dev" and settings.DEBUG,
    )


if __name__ == "__main__":
    main()
