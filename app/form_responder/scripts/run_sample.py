from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from form_responder.clients.gemini import GenerativeModelClient
from form_responder.clients.http import GenerativeModelError
from form_responder.config import CONFIG
from form_responder.pipeline.answer import answer_questions
from form_responder.pipeline.form_extract import analyze_form
from form_responder.result import Err


def main() -> int:
    parser = argparse.ArgumentParser(description="Extract the fields of an HTML form and answer them.")
    parser.add_argument("form", type=Path, help="HTML file containing the form markup")
    parser.add_argument("--context", default="", help="Free-text context used to answer")
    parser.add_argument("--file-uri", default=None, help="Files API URI of a reference document")
    args = parser.parse_args()

    model = GenerativeModelClient(CONFIG.gemini)
    try:
        questions = analyze_form(args.form.read_text(), model)
        print(questions)
        outcome = answer_questions(questions, args.context, model, file_uri=args.file_uri)
    except GenerativeModelError as exc:
        outcome = Err(exc.kind, f"Error analyzing form: {exc}")
    finally:
        model.close()

    if not outcome.ok:
        print(json.dumps(outcome.payload(), indent=2, ensure_ascii=False), file=sys.stderr)
        return 1
    print(json.dumps(outcome.value, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
