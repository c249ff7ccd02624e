#!/usr/bin/env python3
"""ArtifactForge - staged source-file generation pipeline.

Usage:
    python main.py build --prompt "create a simple login button component"
    python main.py build --prompt "..." --output ./out --verbose
    python main.py build --prompt "..." --scope page --no-validate
    python main.py classify --prompt "build a fullstack blog with database"
    python main.py compose --prompt "..."
"""

import argparse
import json
import logging
import os
import sys

from config.defaults import PipelineConfig
from core.orchestrator import PipelineOrchestrator
from core.state import GenerationRequest, PipelineRun, ScopeType
from manager.analyzer import analyze_prompt
from utils.naming import get_output_dir

SCOPE_CHOICES = [s.value for s in ScopeType]


def _configure_logging(verbose):
    level = "DEBUG" if verbose else os.environ.get("ARTIFACTFORGE_LOG_LEVEL", "WARNING")
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _request_from_args(args):
    options = {}
    if getattr(args, "scope", None):
        options["scope"] = args.scope
    return GenerationRequest(
        prompt=args.prompt,
        framework=getattr(args, "framework", None),
        options=options,
    )


def cmd_build(args):
    """Run the full pipeline and print a summary."""
    config = PipelineConfig.from_env(
        enable_validation=False if args.no_validate else None,
        enable_optimization=False if args.no_optimize else None,
    )
    orchestrator = PipelineOrchestrator(config=config)
    result = orchestrator.execute(_request_from_args(args))

    if not result.success:
        print(f"Generation failed: {result.error}", file=sys.stderr)
        return 1

    print(f"Scope:   {result.scope.type.value} (confidence {result.scope.confidence:.2f})")
    print(f"Source:  {result.generation_source}")
    print(f"Quality: {result.quality_score}")
    print(f"\nGenerated {len(result.artifacts)} artifact(s):")
    for artifact in result.artifacts:
        status = "ok" if artifact.metadata.validated else "unvalidated"
        if artifact.metadata.validated is False and artifact.metadata.validation is not None:
            status = "FAILED"
        print(f"  {artifact.path}  [{artifact.type.value}, {status}]")

    if result.warnings:
        print("\nWarnings:")
        for warning in result.warnings:
            print(f"  - {warning}")

    if args.verbose:
        print(f"\nDependencies: {', '.join(result.dependencies) or 'none'}")

    if args.output is not None:
        output_dir = args.output or get_output_dir(result.scope.type.value, args.prompt)
        written = orchestrator.write_artifacts(result, output_dir)
        print(f"\nWrote {len(written)} file(s) to {output_dir}")
    return 0


def cmd_classify(args):
    """Dry run: analysis and scope only, no provider call."""
    orchestrator = PipelineOrchestrator()
    request = _request_from_args(args)
    analysis = analyze_prompt(request)
    scope = orchestrator.classifier.classify(request.prompt, analysis, override=request.options.get("scope"))
    data = scope.to_dict()
    data["entity"] = analysis.main_entity
    data["features"] = list(analysis.features)
    print(json.dumps(data, indent=2))
    return 0


def cmd_compose(args):
    """Print the instruction that would be sent to the provider."""
    orchestrator = PipelineOrchestrator()
    run = PipelineRun(request=_request_from_args(args))
    stage = orchestrator.prepare(run)
    if not stage.success:
        print(stage.error, file=sys.stderr)
        return 1
    print(stage.data)
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="artifactforge",
        description="Generate named, pathed source files from a natural-language request",
    )
    subparsers = parser.add_subparsers(dest="command")

    build_parser = subparsers.add_parser("build", help="Run the generation pipeline")
    build_parser.add_argument("--prompt", required=True, help="Natural language request")
    build_parser.add_argument("--framework", help="Target framework tag (default: react)")
    build_parser.add_argument("--scope", choices=SCOPE_CHOICES, help="Override the scope classifier")
    build_parser.add_argument("--no-validate", action="store_true", help="Skip the validation stage")
    build_parser.add_argument("--no-optimize", action="store_true", help="Skip the optimization stage")
    build_parser.add_argument("--output", nargs="?", const="", default=None,
                              help="Write artifacts to DIR (default: generated/<scope>/<name>)")
    build_parser.add_argument("--verbose", action="store_true", help="Debug logging and extra output")

    for name, help_text in (("classify", "Show the detected scope (no provider call)"),
                            ("compose", "Show the composed instruction (no provider call)")):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("--prompt", required=True, help="Natural language request")
        sub.add_argument("--framework", help="Target framework tag")
        sub.add_argument("--scope", choices=SCOPE_CHOICES, help="Override the scope classifier")
        sub.add_argument("--verbose", action="store_true", help="Debug logging")

    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return 1

    _configure_logging(args.verbose)
    handlers = {"build": cmd_build, "classify": cmd_classify, "compose": cmd_compose}
    return handlers[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
