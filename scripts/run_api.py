import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

import uvicorn


def main() -> None:
    host = os.environ.get("API_HOST", "0.0.0.0")
    # 4000 is the historical port of this API.
    port = int(os.environ.get("PORT", os.environ.get("API_PORT", "4000")))
    uvicorn.run("billing_api.main:app", host=host, port=port, reload=False)


if __name__ == "__main__":
    main()
