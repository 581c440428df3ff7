"""The three model-backed flows the conversation uses."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from loguru import logger

from advocate import schema as s
from advocate.errors import ValidationError
from advocate.flows.registry import Invoker, Registry
from advocate.models import InterpretationResult
from advocate.types import FlowSpec, Payload, PromptSpec

DEFAULT_LANGUAGE = "en"
SUMMARY_UNAVAILABLE = "I couldn't summarize the page content. The AI service didn't provide a valid response."

INTERPRET_COMMAND_INPUT = s.obj(
    command=s.string("The voice command to interpret."),
    context=s.optional(s.string("Optional context, such as a JSON string of available custom commands.")),
)
INTERPRET_COMMAND_OUTPUT = s.obj(
    action=s.string('The interpreted action, e.g. "navigate", "search", "customAction", "unknown".'),
    parameters=s.obj(
        matchedPhrase=s.optional(s.string("Custom command phrase the command matched, if any.")),
        allow_extra=True,
        description="Always an object, possibly empty.",
    ),
    confidence=s.number("Confidence of the interpretation, 0-1."),
)

GENERATE_RESPONSE_INPUT = s.obj(
    context=s.string("The context to generate the response from."),
    query=s.string("The query to generate the response for."),
    language=s.optional(s.string('Two-letter response language code, e.g. "en", "hi".')),
    mediaDataUri=s.optional(s.string("Image or video as 'data:<mimetype>;base64,<encoded_data>'.")),
)
GENERATE_RESPONSE_OUTPUT = s.obj(response=s.string("The generated response."))

SUMMARIZE_PAGE_INPUT = s.obj(
    url=s.string("The URL of the webpage to summarize."),
    additionalContext=s.optional(s.string("Additional context to include when summarizing.")),
)
SUMMARIZE_PAGE_OUTPUT = s.obj(summary=s.string("A concise summary of the webpage content."))


def _interpret_command_prompt(payload: Payload) -> str:
    return (
        "You are a voice command interpreter. Analyze the voice command and determine the action to perform.\n\n"
        f"Voice Command: {payload.get('command', '')}\n"
        f"Context (e.g., custom commands available): {payload.get('context') or ''}\n\n"
        'Identify the action (e.g., "navigate", "search", "customAction", "unknown") and any required parameters.\n'
        "If the command matches a custom command phrase from the context, include the original phrase as "
        "'matchedPhrase' within the parameters object.\n"
        "Give a confidence level (0-1). The parameters field must always be an object, even if empty.\n"
        'If you cannot understand the command, return {"action": "unknown", "parameters": {}, "confidence": 0}.'
    )


def _generate_response_prompt(payload: Payload) -> str:
    lines = [
        "You are an AI embodying human nature, acting as a Devil's Advocate. Be conversational, inquisitive "
        "and don't shy away from nuanced perspectives. Engage with the query using the context rather than "
        "just answering it directly.",
        "",
        f"Respond in the language specified by the two-letter code: {payload.get('language') or DEFAULT_LANGUAGE}.",
    ]
    if payload.get("mediaDataUri"):
        lines += ["", "The user has also attached media. Consider it part of their query or context."]
    lines += [
        "",
        f"Context (may include user's typed text or URL info): {payload.get('context', '')}",
        f"User's explicit query/statement: {payload.get('query', '')}",
        "",
        "Based on all the above, provide your Devil's Advocate response.",
    ]
    return "\n".join(lines)


def _summarize_page_prompt(payload: Payload) -> str:
    lines = [
        "You are an AI assistant that summarizes the content of a webpage given its URL. "
        "Provide a concise summary of the content.",
        "",
        f"URL: {payload.get('url', '')}",
    ]
    if payload.get("additionalContext"):
        lines += ["", f"Additional Context: {payload['additionalContext']}"]
    return "\n".join(lines)


@dataclass(frozen=True)
class Flows:
    """Typed entry points for the conversation flows."""

    interpret_command: Invoker
    generate_response: Invoker
    summarize_page: Invoker

    async def interpret(self, command: str, context: str | None = None) -> InterpretationResult:
        payload: Payload = {"command": command}
        if context is not None:
            payload["context"] = context
        output = await self.interpret_command(payload)
        return InterpretationResult.from_payload(output)

    async def respond(
        self,
        *,
        context: str,
        query: str,
        language: str | None = None,
        media_data_uri: str | None = None,
    ) -> str:
        payload: Payload = {"context": context, "query": query}
        if language:
            payload["language"] = language
        if media_data_uri:
            payload["mediaDataUri"] = media_data_uri
        output = await self.generate_response(payload)
        return _text_field(output, "response")

    async def summarize(self, url: str, additional_context: str | None = None) -> str:
        payload: Payload = {"url": url}
        if additional_context:
            payload["additionalContext"] = additional_context
        output = await self.summarize_page(payload)
        return _text_field(output, "summary")


def build_flows(registry: Registry) -> Flows:
    """Declare the conversation prompts and flows on ``registry``."""
    interpret_prompt = registry.define_prompt(
        PromptSpec(
            name="interpretCommandPrompt",
            input_schema=INTERPRET_COMMAND_INPUT,
            output_schema=INTERPRET_COMMAND_OUTPUT,
            template=_interpret_command_prompt,
        )
    )
    respond_prompt = registry.define_prompt(
        PromptSpec(
            name="generateResponseFromContextPrompt",
            input_schema=GENERATE_RESPONSE_INPUT,
            output_schema=GENERATE_RESPONSE_OUTPUT,
            template=_generate_response_prompt,
            media_field="mediaDataUri",
        )
    )
    summarize_prompt = registry.define_prompt(
        PromptSpec(
            name="summarizePageContentPrompt",
            input_schema=SUMMARIZE_PAGE_INPUT,
            output_schema=SUMMARIZE_PAGE_OUTPUT,
            template=_summarize_page_prompt,
        )
    )

    async def interpret_command(payload: Payload) -> Any:
        return await interpret_prompt(payload)

    async def generate_response(payload: Payload) -> Any:
        return await respond_prompt({**payload, "language": payload.get("language") or DEFAULT_LANGUAGE})

    async def summarize_page(payload: Payload) -> Any:
        try:
            return await summarize_prompt(payload)
        except ValidationError as exc:
            logger.error("flow.summarize.no_output url={} error={}", payload.get("url"), exc)
            return {"summary": SUMMARY_UNAVAILABLE}

    return Flows(
        interpret_command=registry.define_flow(
            FlowSpec(
                name="interpretCommandFlow",
                input_schema=INTERPRET_COMMAND_INPUT,
                output_schema=INTERPRET_COMMAND_OUTPUT,
                body=interpret_command,
            )
        ),
        generate_response=registry.define_flow(
            FlowSpec(
                name="generateResponseFromContextFlow",
                input_schema=GENERATE_RESPONSE_INPUT,
                output_schema=GENERATE_RESPONSE_OUTPUT,
                body=generate_response,
            )
        ),
        summarize_page=registry.define_flow(
            FlowSpec(
                name="summarizePageContentFlow",
                input_schema=SUMMARIZE_PAGE_INPUT,
                output_schema=SUMMARIZE_PAGE_OUTPUT,
                body=summarize_page,
            )
        ),
    )


def _text_field(output: Any, key: str) -> str:
    if isinstance(output, dict):
        value = output.get(key)
        if isinstance(value, str):
            return value
        # generic degraded payload carries its text under "response"
        fallback = output.get("response")
        if isinstance(fallback, str):
            return fallback
    if isinstance(output, str):
        return output
    raise ValidationError("missing text field", path=f"$.{key}")
