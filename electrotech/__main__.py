"""``python -m electrotech`` serves the API with uvicorn."""

import uvicorn

from .core.config import settings


def main() -> None:
    uvicorn.run("electrotech.main:app", host=settings.HOST, port=settings.PORT, log_config=None)


if __name__ == "__main__":
    main()
