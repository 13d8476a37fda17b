from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any

from model_relay.core.provider.adapters.base import (
    Message,
    PreparedRequest,
    ProviderAdapter,
    content_to_text,
)
from model_relay.core.provider.key_selector import NO_CREDENTIAL

ANTHROPIC_MESSAGES_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"


def to_anthropic_payload(
    *,
    messages: Sequence[Message],
    model_name: str,
    max_tokens: int,
    tools: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    """Convert generic chat messages into an Anthropic Messages request.

    Subset implementation:
    - system messages are hoisted into the top-level ``system`` field
    - user/assistant text and OpenAI-style tool calls/results
    - OpenAI tools -> Anthropic tools
    """

    out: dict[str, Any] = {"model": model_name, "max_tokens": max_tokens}

    system_parts: list[str] = []
    messages_out: list[dict[str, Any]] = []

    for msg in messages:
        role = msg.get("role")
        content = msg.get("content")

        if role == "system":
            system_parts.append(content_to_text(content))
            continue

        if role in ("user", "assistant"):
            tool_calls = msg.get("tool_calls")
            if role == "assistant" and isinstance(tool_calls, list):
                messages_out.append({"role": role, "content": _tool_use_blocks(tool_calls)})
                continue

            if isinstance(content, str):
                messages_out.append({"role": role, "content": content})
            elif isinstance(content, list):
                parts = [
                    {"type": "text", "text": str(part.get("text", ""))}
                    for part in content
                    if isinstance(part, dict) and part.get("type") == "text"
                ]
                messages_out.append({"role": role, "content": parts})
            continue

        if role == "tool":
            # OpenAI tool result message -> Anthropic tool_result content block.
            tool_content = content if isinstance(content, str) else json.dumps(content)
            messages_out.append(
                {
                    "role": "user",
                    "content": [
                        {
                            "type": "tool_result",
                            "tool_use_id": msg.get("tool_call_id"),
                            "content": tool_content,
                        }
                    ],
                }
            )

    if system_parts:
        out["system"] = "\n\n".join(p for p in system_parts if p)

    out["messages"] = messages_out

    anthropic_tools = _anthropic_tools(tools or [])
    if anthropic_tools:
        out["tools"] = anthropic_tools

    return out


def _tool_use_blocks(tool_calls: list[Any]) -> list[dict[str, Any]]:
    blocks: list[dict[str, Any]] = []
    for tc in tool_calls:
        if not isinstance(tc, dict) or tc.get("type") != "function":
            continue
        fn = tc.get("function") or {}
        name = fn.get("name") if isinstance(fn, dict) else None
        if not isinstance(name, str) or not name:
            continue
        args = fn.get("arguments")
        try:
            input_obj = json.loads(args) if isinstance(args, str) and args else {}
        except json.JSONDecodeError:
            input_obj = {}
        blocks.append(
            {
                "type": "tool_use",
                "id": tc.get("id") or f"call-{name}",
                "name": name,
                "input": input_obj,
            }
        )
    return blocks


def _anthropic_tools(tools: list[dict[str, Any]]) -> list[dict[str, Any]]:
    converted: list[dict[str, Any]] = []
    for tool in tools:
        if not isinstance(tool, dict) or tool.get("type") != "function":
            continue
        fn = tool.get("function") or {}
        if not isinstance(fn, dict) or not fn.get("name"):
            continue
        converted.append(
            {
                "name": fn["name"],
                "description": fn.get("description") or "",
                "input_schema": fn.get("parameters") or {"type": "object", "properties": {}},
            }
        )
    return converted


class AnthropicAdapter(ProviderAdapter):
    """Anthropic Messages API: ``x-api-key`` auth, system prompt outside the messages."""

    provider = "Claude"
    supports_tools = True

    def __init__(self, max_tokens: int = 4096) -> None:
        self.max_tokens = max_tokens

    def build_request(
        self,
        model_name: str,
        credential: str,
        messages: Sequence[Message],
        tools: list[dict[str, Any]] | None,
        base_url: str | None,
    ) -> PreparedRequest:
        headers = {
            "anthropic-version": ANTHROPIC_VERSION,
            "content-type": "application/json",
        }
        if credential != NO_CREDENTIAL:
            headers["x-api-key"] = credential

        return PreparedRequest(
            url=ANTHROPIC_MESSAGES_URL,
            payload=to_anthropic_payload(
                messages=messages,
                model_name=model_name,
                max_tokens=self.max_tokens,
                tools=tools,
            ),
            headers=headers,
        )

    def extract_text(self, data: Any) -> str | None:
        if not isinstance(data, dict):
            return None
        blocks = data.get("content")
        if not isinstance(blocks, list):
            return None
        for block in blocks:
            if isinstance(block, dict) and block.get("type") == "text":
                text = block.get("text")
                if isinstance(text, str):
                    return text
        return None
