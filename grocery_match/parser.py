from __future__ import annotations

import json
import re
from typing import Any, Sequence

from anthropic import Anthropic, APIError, APIStatusError

from .log import get_logger
from .models import GroceryItem

logger = get_logger(__name__)

DEFAULT_MODEL = "claude-3-haiku-20240307"
MAX_TOKENS = 2048

PARSING_PROMPT = """You are a grocery list parser. Your job is to extract structured grocery items from natural language input.

Extract the following for each item:
- name: The grocery item name (lowercase, singular form)
- quantity: How many items (default: 1)
- unit: The unit of measurement (e.g., "carton", "bottle", "lb", "oz") if mentioned
- brand: The brand name if mentioned (null otherwise)
- size: The size or packaging info if mentioned (e.g., "dozen", "gallon", "12 oz")
- notes: Array of special requirements (e.g., ["organic"], ["unsalted"], ["low-fat"])
- retailer: The store name if mentioned using words like "from", "at", "get at", "buy at" (null otherwise, lowercase)

Example:
Input: "2 gallons of milk at target and bananas"
Output: {
  "items": [
    {"name": "milk", "quantity": 2, "unit": "gallon", "brand": null, "size": "gallon", "notes": [], "retailer": "target"},
    {"name": "bananas", "quantity": 1, "unit": null, "brand": null, "size": null, "notes": [], "retailer": null}
  ]
}

Now parse this grocery input and respond with ONLY valid JSON (no markdown, no explanation):"""

REFINEMENT_PROMPT = """You are helping refine an existing grocery list based on user commands.

The user will provide:
1. Current list items (JSON array)
2. A refinement command (e.g., "make the eggs organic", "add 2 more milk", "remove Tide")

You should:
- For "make X [attribute]": Update the matching item's notes or properties
- For "add X": Append new items to the list
- For "remove X": Remove matching items from the list
- For quantity changes: Update the quantity field

Respond with the complete updated list as valid JSON (no markdown, no explanation)."""

_FENCE_RE = re.compile(r"```(?:json)?\n?")


class ParseError(RuntimeError):
    """The language model call failed or its reply was not a usable item list."""


class AnthropicClient:
    """Thin wrapper over the Anthropic SDK; returns the text of the first content block."""

    def __init__(self, *, api_key: str, base_url: str = "https://api.anthropic.com", timeout_s: float = 30.0):
        self.client = Anthropic(api_key=api_key, base_url=base_url, timeout=timeout_s)

    def complete(self, prompt: str, *, model: str = DEFAULT_MODEL, max_tokens: int = MAX_TOKENS) -> str:
        logger.debug("messages.create model=%s prompt_chars=%d", model, len(prompt))
        try:
            message = self.client.messages.create(
                model=model,
                max_tokens=max_tokens,
                messages=[{"role": "user", "content": prompt}],
            )
        except APIStatusError as e:
            logger.error("Language model API error %s", e.status_code)
            raise ParseError(f"Language model API error {e.status_code}: {e.message}")
        except APIError as e:
            logger.error("Language model request failed: %s", e)
            raise ParseError(f"Language model request failed: {e}")

        blocks = message.content or []
        if not blocks or blocks[0].type != "text":
            return ""
        text = blocks[0].text or ""
        logger.debug("reply chars=%d", len(text))
        return text


def clean_reply(text: str) -> str:
    """Strip Markdown code fences the model sometimes wraps JSON in."""
    return _FENCE_RE.sub("", text).strip()


def _load_json(text: str) -> Any:
    cleaned = clean_reply(text)
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise ParseError(f"Invalid JSON from language model: {e}")


def items_from_rows(rows: Any) -> list[GroceryItem]:
    if not isinstance(rows, list):
        raise ParseError("Invalid response structure: expected a list of items")
    items: list[GroceryItem] = []
    for row in rows:
        if not isinstance(row, dict):
            raise ParseError(f"Invalid item in response: {row!r}")
        item = GroceryItem.from_dict(row)
        if item.name:
            items.append(item)
    return items


class GroceryParser:
    def __init__(self, client: AnthropicClient, *, model: str = DEFAULT_MODEL):
        self.client = client
        self.model = model

    def parse(self, text: str) -> list[GroceryItem]:
        """Turn free-form grocery text into items via the language model."""
        if not text.strip():
            raise ParseError("Nothing to parse: input is empty")

        reply = self.client.complete(f'{PARSING_PROMPT}\n\nInput: "{text}"', model=self.model)
        data = _load_json(reply)
        if not isinstance(data, dict) or "items" not in data:
            raise ParseError("Invalid response structure: missing 'items'")
        items = items_from_rows(data["items"])
        logger.info("Parsed %d items from %d chars of input", len(items), len(text))
        return items

    def refine(self, items: Sequence[GroceryItem], command: str) -> list[GroceryItem]:
        """Apply a spoken/typed edit ("make the eggs organic") to an existing list."""
        if not command.strip():
            raise ParseError("Nothing to apply: refinement command is empty")

        current = json.dumps([i.to_dict() for i in items], indent=2)
        prompt = (
            f"{REFINEMENT_PROMPT}\n\nCurrent list:\n{current}\n\n"
            f'Command: "{command}"\n\nProvide the updated list as JSON:'
        )
        data = _load_json(self.client.complete(prompt, model=self.model))

        # Either a bare list or {"items": [...]}
        rows = data if isinstance(data, list) else data.get("items") if isinstance(data, dict) else None
        return items_from_rows(rows)
