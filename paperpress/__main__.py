import uvicorn

from paperpress.config import resolve_log_level, settings


def main():
    uvicorn.run(
        "paperpress.main:app",
        host=settings.host,
        port=settings.port,
        log_level=resolve_log_level(settings.log_level).lower(),
    )


if __name__ == "__main__":
    main()
