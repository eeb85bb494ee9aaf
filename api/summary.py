# api/summary.py
"""Plain-language summary of a settlement, written by an OpenAI chat model."""

import json
import logging

from openai import OpenAI, OpenAIError

logger = logging.getLogger(__name__)

PROMPT_TEMPLATE = """
You are a helpful assistant that summarizes expense settlements.

SETTLEMENTS:
{settlements}

EXPENSES (JSON):
{expenses}

Please return:
1. A 2-3 sentence plain-language summary of who pays whom and the total money moved.
2. A short bullet list (max 4 bullets) with helpful insights (e.g., who paid most, if there's imbalance, suggestions).
Return JSON with keys: "summary" (string) and "insights" (array of strings).
"""

MAX_INSIGHTS = 4


class SummaryError(Exception):
    """The model could not be reached or returned nothing usable."""


class SummaryUnavailableError(SummaryError):
    """No API key is configured."""


def expense_to_dict(expense):
    return {
        "payer": expense.payer,
        "amount": float(expense.amount),
        "participants": list(expense.participants),
    }


def build_prompt(settlements_text, expenses):
    expenses_json = json.dumps([expense_to_dict(e) for e in expenses], indent=2)
    return PROMPT_TEMPLATE.format(settlements=settlements_text, expenses=expenses_json)


def parse_reply(text):
    """Read the model's JSON reply; anything that is not JSON becomes the summary."""
    text = (text or "").strip()
    try:
        parsed = json.loads(text)
    except ValueError:
        return {"summary": text, "insights": []}

    if not isinstance(parsed, dict):
        return {"summary": text, "insights": []}

    summary = parsed.get("summary")
    if not isinstance(summary, str):
        summary = json.dumps(parsed)
    insights = parsed.get("insights") or []
    if not isinstance(insights, list):
        insights = [insights]
    return {"summary": summary, "insights": [str(i) for i in insights][:MAX_INSIGHTS]}


class SummaryService:
    def __init__(self, client, model, max_tokens=300, temperature=0.2):
        self.client = client
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature

    @classmethod
    def from_config(cls, config):
        api_key = config.get("OPENAI_API_KEY")
        if not api_key:
            raise SummaryUnavailableError("OPENAI_API_KEY is not configured")
        client = OpenAI(api_key=api_key, timeout=config.get("OPENAI_TIMEOUT_SECONDS", 30))
        return cls(
            client,
            model=config.get("OPENAI_MODEL", "gpt-4o-mini"),
            max_tokens=config.get("OPENAI_MAX_TOKENS", 300),
            temperature=config.get("OPENAI_TEMPERATURE", 0.2),
        )

    def summarize(self, settlements_text, expenses):
        prompt = build_prompt(settlements_text, expenses)
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            )
        except OpenAIError as e:
            raise SummaryError(str(e)) from e

        if not response.choices:
            raise SummaryError("OpenAI response has no choices")
        text = response.choices[0].message.content or ""
        logger.info("AI summary generated with %s (%d chars)", self.model, len(text))
        return parse_reply(text)
