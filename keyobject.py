"""KeyObject server entry point.

Reads `config/keyobject.yml` (database address, table name, root domain,
log level) and serves the records API with uvicorn. The database address
falls back to the YDB_ADDRESS environment variable.
"""
import argparse
from pathlib import Path

from keyobject_lib.config import DEFAULT_CONFIG_PATH
from keyobject_lib.main import create_app, Config


def get_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="KeyObject records server")
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="Path to the YAML config file")
    p.add_argument("--database", help="Database address (overrides config and YDB_ADDRESS)")
    p.add_argument("--host", default="0.0.0.0")
    p.add_argument("--port", type=int, default=8000)
    return p


if __name__ == "__main__":
    import uvicorn
    args = get_parser().parse_args()
    app = create_app(Config(config_path=args.config, database=args.database))
    uvicorn.run(app, host=args.host, port=args.port)
