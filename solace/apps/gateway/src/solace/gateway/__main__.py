"""python -m solace.gateway -- 以 uvicorn 启动网关"""

import uvicorn
from solace.core.config import get_port


def main() -> None:
    uvicorn.run(
        "solace.gateway.main:app",
        host="0.0.0.0",
        port=get_port(),
        log_config=None,
    )


if __name__ == "__main__":
    main()
