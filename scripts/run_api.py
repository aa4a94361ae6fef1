"""Run the API with uvicorn on $PORT."""

import uvicorn

from quoteforge.core.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run("quoteforge.main:app", host="0.0.0.0", port=settings.PORT)


if __name__ == "__main__":
    main()
