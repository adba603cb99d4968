from __future__ import annotations

import argparse
import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from appsynth.adapters import build_adapter
from appsynth.artifacts.writers import render_architecture_summary, write_architecture_summary
from appsynth.gateway import ModelGateway
from appsynth.models import ActiveFile
from appsynth.service import SynthesisService
from appsynth.store.sql import SqlArtifactStore
from appsynth.utils.io import read_text

PROVIDER_KEYS = {"openai": "OPENAI_API_KEY", "gemini": "GEMINI_API_KEY"}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Generate and iterate on app architectures")
    parser.add_argument("--mode", choices=["mock", "live"], default="mock")
    parser.add_argument("--provider", choices=sorted(PROVIDER_KEYS), default="openai")
    parser.add_argument("--database", default=None, help="SQLAlchemy database URL")
    parser.add_argument("--raw-dir", default=None, help="Directory for raw model responses")
    parser.add_argument("--max-output-tokens", type=int, default=None)
    parser.add_argument("--temperature", type=float, default=None)

    commands = parser.add_subparsers(dest="command", required=True)

    synth = commands.add_parser("synth", help="Create a project and run all generation stages")
    synth.add_argument("--prompt", required=True)
    synth.add_argument("--name", default=None)

    iterate = commands.add_parser("iterate", help="Apply a follow-up instruction to a project")
    iterate.add_argument("--project", required=True)
    iterate.add_argument("--message", required=True)
    iterate.add_argument("--active-file", default=None, help="File currently open in the editor")

    show = commands.add_parser("show", help="Print a Markdown summary of a project")
    show.add_argument("--project", required=True)
    show.add_argument("--out", default=None)
    return parser


def _ensure_env(provider: str) -> None:
    key = PROVIDER_KEYS[provider]
    if not os.getenv(key):
        raise RuntimeError(
            f"Missing required API key: {key}. Create a .env file and set the key."
        )


def build_service(args: argparse.Namespace) -> SynthesisService:
    if args.max_output_tokens is not None:
        os.environ["ORCH_MAX_OUTPUT_TOKENS"] = str(args.max_output_tokens)
    if args.temperature is not None:
        os.environ["ORCH_TEMPERATURE"] = str(args.temperature)

    if args.mode == "live":
        _ensure_env(args.provider)

    database_url = args.database or os.getenv("APPSYNTH_DATABASE_URL", "sqlite:///appsynth.db")
    store = SqlArtifactStore.from_url(database_url)
    raw_dir = Path(args.raw_dir) if args.raw_dir else None
    gateway = ModelGateway(build_adapter(args.mode, args.provider), raw_dir=raw_dir)
    return SynthesisService(store, gateway)


def main(argv: Optional[List[str]] = None) -> None:
    load_dotenv()
    args = build_parser().parse_args(argv)
    service = build_service(args)

    if args.command == "synth":
        project = service.create_project(args.prompt, args.name)
        print(f"Project created: {project.id}")
        result = service.start_synthesis(project.id, args.prompt)
        print(
            f"Synthesis {result.status}: {len(result.entities)} entities, "
            f"{len(result.components)} components, {len(result.pages)} pages"
        )
    elif args.command == "iterate":
        active_file = None
        if args.active_file:
            path = Path(args.active_file)
            active_file = ActiveFile(name=path.name, content=read_text(path))
        result = service.apply_iteration(args.project, args.message, active_file)
        print(f"{result.message} ({result.applied_count} action(s) applied)")
    elif args.command == "show":
        architecture = service.get_architecture(args.project)
        if args.out:
            write_architecture_summary(Path(args.out), architecture)
            print(f"Summary written to {args.out}")
        else:
            print(render_architecture_summary(architecture))


if __name__ == "__main__":
    main()
