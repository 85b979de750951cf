# src/repo_analyzer/cli.py
import argparse
import json
import logging
from pathlib import Path

from .analyzer import run_repo_analysis
from .config import get_gemini_api_key, get_gemini_model, get_github_token
from .report import render_markdown_report


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="repo-analyzer",
        description="Analyze a public GitHub repository's code quality with an LLM."
    )
    parser.add_argument(
        "repo_url",
        help="The repository URL, e.g. https://github.com/owner/repo."
    )
    parser.add_argument(
        "-o", "--output",
        help="The path to the output file. If not provided, prints to standard output.",
        default=None
    )
    parser.add_argument(
        "--token",
        help="Optional GitHub Personal Access Token to raise the API rate limit. "
             "Can also be set via the GITHUB_TOKEN environment variable.",
        default=get_github_token()
    )
    parser.add_argument(
        "--api-key",
        help="Gemini API key. Can also be set via the GEMINI_API_KEY environment variable.",
        default=get_gemini_api_key()
    )
    parser.add_argument(
        "--model",
        help="Gemini model name.",
        default=get_gemini_model()
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Emit the raw analysis as JSON instead of a Markdown report."
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log collection progress."
    )

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    print("Info: Fetching repository and analyzing code...")

    repo_data, analysis, error = run_repo_analysis(
        args.repo_url,
        gh_token=args.token,
        api_key=args.api_key,
        model_name=args.model,
    )

    if error:
        print(error)
        return 1

    if args.json:
        output = json.dumps(analysis.to_dict(), indent=2, ensure_ascii=False)
    else:
        output = render_markdown_report(repo_data, analysis)

    if args.output:
        try:
            output_path = Path(args.output)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(output, encoding="utf-8")
            print(f"✅ Analysis successfully written to {output_path.resolve()}")
        except IOError as e:
            print(f"Error: Could not write to file {args.output}. Details: {e}")
            return 1
    else:
        print("\n" + "="*80)
        print(f"REPOSITORY ANALYSIS: {repo_data.full_name}")
        print("="*80 + "\n")
        print(output)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
