from __future__ import annotations

import os

import uvicorn


def main() -> None:
    host = os.getenv("GEOCODE_API_HOST", "0.0.0.0")
    port = int(os.getenv("GEOCODE_API_PORT", "8110"))
    uvicorn.run("geocode_api.app:app", host=host, port=port, reload=False)


if __name__ == "__main__":
    main()
