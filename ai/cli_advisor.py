import os
from typing import Any, Dict, List, Optional

from openai import OpenAI
from pydantic import BaseModel, ConfigDict, Field


# Structured Outputs needs additionalProperties=false on every object schema,
# so the reply model forbids extra keys.


class CLIHint(BaseModel):
    model_config = ConfigDict(extra="forbid")

    """Structured reply returned by the model.

    - tip: one short, concrete suggestion to show under the failed command
    """

    tip: str = Field(..., description="One or two sentences explaining the fix. Empty if unsure.")


SYSTEM_PROMPT = """\
You are a Cisco IOS tutor embedded in a network simulator terminal.

You will receive a command the student typed and the error the device printed.
Reply with a short tip (one or two sentences) telling the student what to type
instead, or which mode to enter first. Mention the exact corrected command when
you can. Do not repeat the error text.

Always return JSON matching the CLIHint schema (no extra keys).\
"""

DEFAULT_MODEL = "gpt-4o-mini"


class CLIAdvisor:
    """Callable advisor: (command, error) -> tip or None.

    The engine runs it on a background thread, so it may block on the network.
    """

    def __init__(self, model: Optional[str] = None):
        # OPENAI_API_KEY is read from the environment; never hardcode it.
        self.model = model or os.getenv("NETSIM_AI_MODEL", DEFAULT_MODEL)
        self._client: Optional[OpenAI] = None

    @property
    def enabled(self) -> bool:
        return bool(os.getenv("OPENAI_API_KEY"))

    def _get_client(self) -> OpenAI:
        if self._client is None:
            self._client = OpenAI(api_key=os.getenv("OPENAI_API_KEY"))
        return self._client

    def __call__(self, command: str, error: str) -> Optional[str]:
        return self.suggest(command, error)

    def suggest(self, command: str, error: str) -> Optional[str]:
        if not self.enabled:
            return None

        # NOTE (Responses API): content parts must use type="input_text" (not "text").
        input_messages: List[Dict[str, Any]] = [
            {"role": "system", "content": [{"type": "input_text", "text": SYSTEM_PROMPT}]},
            {
                "role": "user",
                "content": [
                    {"type": "input_text", "text": f"COMMAND:\n{command}"},
                    {"type": "input_text", "text": f"ERROR:\n{error}"},
                ],
            },
        ]

        resp = self._get_client().responses.parse(
            model=self.model,
            input=input_messages,
            text_format=CLIHint,
        )
        parsed: Optional[CLIHint] = resp.output_parsed
        if parsed is None:
            return None
        return parsed.tip.strip() or None
