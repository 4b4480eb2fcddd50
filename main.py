import os

import uvicorn

from airboard.factory import create_app


def main() -> None:
    uvicorn.run(
        create_app(),
        host=os.getenv("AIRBOARD_HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        log_config=None,
    )


if __name__ == "__main__":
    main()
