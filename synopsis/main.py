"""
Synopsis command line.

    python -m synopsis.main --input article.txt
    python -m synopsis.main --input article.txt --backend openai --output summary.txt
    python -m synopsis.main --backend ollama --list-models
"""

import argparse
import sys
from pathlib import Path

from synopsis.ai.factory import BACKEND_KINDS
from synopsis.ai.ollama_backend import OllamaBackend
from synopsis.ai.worker_lifecycle import get_worker_lifecycle
from synopsis.config import get_backend_config
from synopsis.errors import SummarizationError
from synopsis.logging_config import close_debug_log, info
from synopsis.summarizer import BackendConfig, summarize


def print_progress(percent, message):
    prefix = f"[{percent:3d}%]" if percent is not None else "[ ...]"
    print(f"{prefix} {message}", file=sys.stderr)


def list_ollama_models() -> int:
    backend = OllamaBackend(get_backend_config('ollama')['default_model'])
    models = backend.get_available_models()
    if not models:
        print(f"No models found (is Ollama running at {backend.api_base}?)", file=sys.stderr)
        return 1
    for name in models:
        print(name)
    return 0


def main(argv=None) -> int:
    """Command-line interface for the summarizer."""
    parser = argparse.ArgumentParser(
        description="Synopsis - Summarize articles of any length",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Local transformers model (downloads on first use)
  python -m synopsis.main --input article.txt

  # Remote provider (reads OPENAI_API_KEY from the environment or .env)
  python -m synopsis.main --input article.txt --backend openai --output summary.txt

  # Debug mode (verbose logging)
  DEBUG=true python -m synopsis.main --input article.txt
        """
    )

    parser.add_argument('--input', help='UTF-8 text file to summarize')
    parser.add_argument(
        '--backend',
        default='local',
        choices=BACKEND_KINDS,
        help='Summarization backend (default: local)'
    )
    parser.add_argument('--model', help="Model identifier (default: the backend's default model)")
    parser.add_argument('--api-key', help='API key for remote providers (default: from environment)')
    parser.add_argument('--output', help='Write the summary to this file instead of stdout')
    parser.add_argument('--list-models', action='store_true', help='List models installed in Ollama and exit')

    args = parser.parse_args(argv)

    if args.list_models:
        return list_ollama_models()
    if not args.input:
        parser.error('--input is required')

    try:
        text = Path(args.input).read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError) as e:
        print(f"Error: cannot read {args.input}: {e}", file=sys.stderr)
        return 1

    config = BackendConfig(backend_kind=args.backend, model=args.model, credential=args.api_key)
    info(f"CLI: summarizing {args.input} with {args.backend}")

    try:
        summary = summarize(text, config, on_progress=print_progress)
    except SummarizationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        if args.backend == 'local':
            get_worker_lifecycle().shutdown()
        close_debug_log()

    if args.output:
        Path(args.output).write_text(summary, encoding='utf-8')
        info(f"Saved summary to: {args.output}")
    else:
        print(summary)
    return 0


if __name__ == "__main__":
    sys.exit(main())
