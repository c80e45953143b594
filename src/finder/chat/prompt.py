"""Prompt assembly for the chat exchange."""

from finder.models import ChatRequest, Role

_SYSTEM_PROMPT = """You are a helpful assistant. Answer questions using the markdown documents below.

Formatting:
- Use markdown: **bold** for key terms, `code` for commands and file names,
  ## or ### headers for sections, bullet or numbered lists where they help.
- Keep answers concise and well structured.

Citations:
- Every line of the documents is prefixed with its address as [file:line].
- When you rely on a document, cite it inline with that exact address,
  e.g. "Installation requires cargo [README.md:20]".
- Only cite addresses that appear in the documents.

DOCUMENTS:
{context}"""


def system_prompt(context: str) -> str:
    return _SYSTEM_PROMPT.format(context=context)


def build_messages(request: ChatRequest) -> list[dict[str, str]]:
    """Build the provider message list for ``request``.

    Failed assistant turns are left out of the history since their text is
    an error notice, not something the assistant said.
    """
    messages = [{"role": "system", "content": system_prompt(request.context)}]
    for turn in request.history:
        if turn.role is Role.ASSISTANT and (turn.error or not turn.text):
            continue
        messages.append({"role": turn.role.value, "content": turn.text})
    messages.append({"role": Role.USER.value, "content": request.message})
    return messages
