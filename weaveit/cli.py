"""
CLI entrypoint:
  python -m weaveit generate script.txt --type both --title "Intro"
  python -m weaveit status video_abc123 --server http://localhost:8000
  python -m weaveit wait video_abc123
  python -m weaveit estimate script.txt
  python -m weaveit serve --port 8000
"""
import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Optional

logger = logging.getLogger("weaveit")


def _read_script(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    return Path(path).read_text(encoding="utf-8")


async def _generate(args) -> int:
    from pydantic import ValidationError

    from weaveit.exceptions import InvalidContentId, PipelineError
    from weaveit.keys import OutputType
    from weaveit.orchestration import ContentJob, JobOrchestrator

    try:
        job = ContentJob.create(
            script=_read_script(args.script),
            output_type=OutputType.from_string(args.type),
            title=args.title,
            content_id=args.content_id,
        )
    except (InvalidContentId, ValidationError) as e:
        logger.error(f"Invalid job: {e}")
        return 2
    orchestrator = JobOrchestrator()
    try:
        result = await orchestrator.run(job)
    except PipelineError as e:
        logger.error(f"Generation failed: {e}")
        return 1
    finally:
        await orchestrator.close()

    print(json.dumps(result.to_dict(), indent=2))
    return 0


async def _status(args) -> int:
    from weaveit.client import WeaveItClient

    async with WeaveItClient(args.server) as client:
        state = await client.status(args.content_id)
    print(json.dumps(state, indent=2))
    return 0


async def _wait(args) -> int:
    from weaveit.client import GenerationFailed, GenerationTimeout, WeaveItClient

    def on_poll(attempt: int, state: dict) -> None:
        logger.info(f"[{args.content_id}] poll {attempt}/{args.max_attempts}: {state.get('status')}")

    async with WeaveItClient(args.server) as client:
        try:
            state = await client.wait_for(
                args.content_id,
                max_attempts=args.max_attempts,
                interval=args.interval,
                on_poll=on_poll,
            )
        except (GenerationFailed, GenerationTimeout) as e:
            logger.error(str(e))
            return 1
    print(json.dumps(state, indent=2))
    return 0


def _estimate(args) -> int:
    from dataclasses import asdict

    from weaveit.services import preview_script

    print(json.dumps(asdict(preview_script(_read_script(args.script))), indent=2))
    return 0


def _serve(args) -> int:
    import uvicorn

    uvicorn.run("weaveit.api.main:app", host=args.host, port=args.port, log_level="info")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="weaveit",
        description="Narrated audio and scrolling-script videos from a text script",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    gen = sub.add_parser("generate", help="Run one job locally and wait for it")
    gen.add_argument("script", help="Script file, or - for stdin")
    gen.add_argument("--type", choices=["audio", "video", "both"], default="video")
    gen.add_argument("--title", default="Untitled")
    gen.add_argument("--content-id", dest="content_id", default=None)

    for name, help_text in (("status", "Show status from a server"), ("wait", "Poll a server until ready")):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("content_id")
        p.add_argument("--server", default="http://localhost:8000")
        if name == "wait":
            p.add_argument("--max-attempts", dest="max_attempts", type=int, default=120)
            p.add_argument("--interval", type=float, default=5.0)

    est = sub.add_parser("estimate", help="Word count and length preview")
    est.add_argument("script", help="Script file, or - for stdin")

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default="0.0.0.0")
    serve.add_argument("--port", type=int, default=8000)

    return parser


def main(argv: Optional[list] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )

    if args.command == "generate":
        return asyncio.run(_generate(args))
    if args.command == "status":
        return asyncio.run(_status(args))
    if args.command == "wait":
        return asyncio.run(_wait(args))
    if args.command == "estimate":
        return _estimate(args)
    return _serve(args)


if __name__ == "__main__":
    sys.exit(main())
