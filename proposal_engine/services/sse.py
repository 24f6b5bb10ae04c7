"""Server-Sent Events encoding for generation streams.

Request handlers relay ``ProposalGenerator.stream`` output to browsers as
``data: {...}`` frames:

- data: {"type":"chunk","text":"..."}
- data: {"type":"done","content":{...},"generatedSections":[],"failedSections":[]}
- data: {"type":"error","code":"...","message":"..."}
"""

from collections.abc import AsyncIterable, AsyncIterator

from ..models.generation import ChunkEvent, DoneEvent, ErrorEvent

SSE_HEADERS = {
    "Content-Type": "text/event-stream",
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}


def encode_sse_event(event: ChunkEvent | DoneEvent | ErrorEvent) -> str:
    """Encode one stream event as an SSE frame with camelCase keys."""
    payload = event.model_dump_json(by_alias=True, exclude_none=True)
    return f"data: {payload}\n\n"


async def stream_as_sse(
    events: AsyncIterable[ChunkEvent | DoneEvent | ErrorEvent],
) -> AsyncIterator[str]:
    """Adapt an event stream into encoded SSE frames."""
    async for event in events:
        yield encode_sse_event(event)
