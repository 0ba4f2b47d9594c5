# backend/househunt/cli/__main__.py
from __future__ import annotations

import argparse
import json

from .schema import schema_ddl
from .seed_demo import seed_demo


def main(argv: list[str] | None = None) -> None:
    p = argparse.ArgumentParser(prog="python -m househunt.cli")
    sub = p.add_subparsers(dest="command", required=True)

    sub.add_parser("schema", help="print PostgreSQL DDL for the backend tables")

    seed = sub.add_parser("seed-demo", help="seed an in-memory demo backend and print the overview")
    seed.add_argument("--user-email", default="demo@househunt.local")
    seed.add_argument("--password", default="demo")

    serve = sub.add_parser("serve", help="run the JSON API with uvicorn")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    serve.add_argument("--reload", action="store_true")

    args = p.parse_args(argv)

    if args.command == "schema":
        print(schema_ddl())
        return

    if args.command == "serve":
        import uvicorn

        uvicorn.run("househunt.main:app", host=args.host, port=args.port, reload=args.reload)
        return

    out = seed_demo(user_email=args.user_email, password=args.password)
    print(
        json.dumps(
            {
                "ok": True,
                "user_email": out.user_email,
                "user_id": out.user_id,
                "home_id": out.home_id,
                "eligible": out.eligible,
                "overview": [c.model_dump(mode="json") for c in out.overview],
            },
            indent=2,
        )
    )


if __name__ == "__main__":
    main()
