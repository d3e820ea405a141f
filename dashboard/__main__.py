# dashboard/__main__.py
import uvicorn

from .config import settings


def run():
    uvicorn.run("dashboard.main:app", host=settings.HOST, port=settings.PORT, log_level=settings.LOG_LEVEL.lower())


if __name__ == "__main__":
    run()
