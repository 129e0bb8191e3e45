import uvicorn

from hirevision.config import settings


def main():
    uvicorn.run(
        "hirevision.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
