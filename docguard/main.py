import argparse
import sys

from pydantic import ValidationError

from docguard.app import DocGuardApp, EXIT_FAILURE, EXIT_USAGE, setup_logging
from docguard.core.settings import resolve_settings


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docguard",
        description="Add documentation comments to source files with an LLM, refusing any output that is not a single clean file."
    )
    parser.add_argument("files", nargs="*", help="Source files to document in place (backup at FILE~). None, or '-', reads stdin and writes stdout.")
    parser.add_argument("-a", "--policy", dest="policy_path", default=None, help="Documentation standard (env: DOCGUARD_POLICY_PATH)")
    parser.add_argument("-t", "--template", dest="template_path", default=None, help="Jinja2 prompt template (env: DOCGUARD_TEMPLATE_PATH)")
    parser.add_argument("--model", type=str, default=None, help="Model name (env: DOCGUARD_MODEL)")
    parser.add_argument("--provider", type=str, default=None, help="LLM Provider (ollama, openai, anthropic, gemini, local) (env: DOCGUARD_PROVIDER)")
    parser.add_argument("--base-url", dest="base_url", default=None, help="Provider endpoint (env: DOCGUARD_BASE_URL)")
    parser.add_argument("--prompt-only", action="store_true", help="Render the prompt to stdout and stop; no model is called")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log each pipeline stage")
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    files = list(args.files)
    if "-" in files:
        if len(files) > 1:
            parser.error("'-' (stdin) cannot be combined with file paths")
        files = []

    overrides = {
        "policy_path": args.policy_path,
        "template_path": args.template_path,
        "model": args.model,
        "provider": args.provider,
        "base_url": args.base_url,
        "log_level": "INFO" if args.verbose else None,
    }
    try:
        settings = resolve_settings(overrides)
    except ValidationError as e:
        print(f"docguard: invalid configuration:\n{e}", file=sys.stderr)
        return EXIT_USAGE

    setup_logging(settings.log_level)

    app = DocGuardApp(settings)
    try:
        return app.run(files, prompt_only=args.prompt_only)
    except KeyboardInterrupt:
        print("docguard: interrupted", file=sys.stderr)
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
