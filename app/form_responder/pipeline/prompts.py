from __future__ import annotations

import json


ANALYZE_FORM_PROMPT = """
You are an expert in analyzing web forms made of ('title' - 'input_type') pairs.
You will receive the markup of a form. Identify and list every ('title' - 'input_type') pair it contains.

1. Identification:
   - Find titles through attributes such as 'for' or 'name', or infer them from the text
     closest to the corresponding input.

2. Input types:
   - 'input_type' must be exactly one of: 'text', 'number' or 'select'.

3. Input type validation:
   - The input type must agree with the restrictions suggested by the title or by nearby
     validation elements (error messages, pattern/type/min/max attributes).

4. Select inputs:
   - When 'input_type' is 'select', store the value of every <option> element, in order,
     in a property called 'values'.

5. Restrictions:
   - Provide 'max_length' for any input that has a character limit (maxlength attribute or
     a stated limit). Omit it otherwise.

Return JSON only.
""".strip()


ANSWER_PROMPT = """
You will receive a JSON array. Each object describes one form question:
[
  {
    "title": "question text",
    "input_type": "text" | "number" | "select",
    "values": ["option", ...],      (only when input_type is "select")
    "max_length": 120               (only when a character limit exists)
  }
]

Answer every question following these rules:
- Respond with a JSON array of answers, one per question, in the same order as the questions.
- The number of answers must equal the number of questions.
- "text": answer with a short string. If "max_length" exists the answer must not exceed it.
- "number": answer with digits only (for example "30"), no units or words.
- "select": answer with exactly one of the strings in "values", copied verbatim.
- Do not be redundant with the question itself.
- Every text answer must be written in <<LANGUAGE>>.

Example:
Questions:
[{"title":"Name","input_type":"text","max_length":20},
 {"title":"Age","input_type":"number"},
 {"title":"Favourite colour","input_type":"select","values":["red","blue"]}]
Context: "Ana is 30 years old and loves the sea."
Answers:
["Ana","30","blue"]
""".strip()


DOCUMENT_GROUNDING_PROMPT = (
    "A reference document is attached. Base your answers on its content; "
    "use the context below only to complement it."
)


def build_answer_instructions(language: str) -> str:
    return ANSWER_PROMPT.replace("<<LANGUAGE>>", language)


def build_context_prompt(context: str) -> str:
    return f"Context:\n{context}"


def build_questions_prompt(form_questions: str) -> str:
    # Re-serialize compactly when possible so the model sees one canonical form.
    try:
        payload = json.loads(form_questions)
    except ValueError:
        return f"Questions:\n{form_questions}"
    return f"Questions:\n{json.dumps(payload, ensure_ascii=False)}"
