"""
Grounded Relay MCP Server

Exposes the grounding + routing pipeline to MCP clients.
Tools: ask()
"""

import asyncio
import json

from mcp.server.fastmcp import FastMCP

import relay
from relay.config import SERVER_PORT, Settings
from relay.logger import get_logger

log = get_logger("gateway")

mcp = FastMCP("grounded-relay", host="0.0.0.0")

# ASGI app for uvicorn compatibility
app = mcp.sse_app()

settings = Settings.from_env()


async def startup_config_check() -> None:
    """Log which parts of the pipeline are usable with the current settings."""
    log.info("Checking configuration...")

    if settings.search_api_key and settings.search_cx:
        log.info("[OK] Google Search grounding configured")
    else:
        log.info("[INFO] GOOGLE_API_KEY/GOOGLE_SEARCH_CX missing, requests will run ungrounded")

    if settings.tunnel_url:
        log.info(f"[OK] Code backend at {settings.tunnel_url}")
    else:
        log.warning("[WARNING] CLOUDFLARE_TUNNEL_URL not set, code requests will go straight to fallback")

    if settings.gemini_api_key:
        log.info(f"[OK] General backend using {settings.gemini_model}")
    else:
        log.warning("[WARNING] No Gemini API key, general requests will fail")


@mcp.tool()
async def ask(prompt: str, model: str | None = None) -> str:
    """
    Answer a request with web-grounded context, routed to the best backend.

    ROUTING (automatic):
    - Code tasks (debug, implement, refactor, SQL, ...) → self-hosted coder model
      with the hosted model as fallback
    - Everything else → hosted general-purpose model

    Args:
        prompt: The request in natural language
        model: Optional backend preference ("code" or "general")

    Returns:
        JSON with success, response, sources [{title, link, snippet}],
        model_used, grounding_performed, outcome

    Example: ask("fix this function: def f(: pass")
    """
    response = await relay.ask(prompt, preferred_model=model, settings=settings)
    return json.dumps(response.to_dict())


def run_stdio() -> None:
    mcp.run(transport="stdio")


def run_sse(host: str = "0.0.0.0", port: int | None = None) -> None:
    import uvicorn

    asyncio.run(startup_config_check())

    print(f"\nStarting Grounded Relay (transport: sse)...")
    uvicorn.run(mcp.sse_app(), host=host, port=port or SERVER_PORT)


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Grounded Relay")
    parser.add_argument("-t", "--transport", choices=["stdio", "sse"], default="stdio")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("-p", "--port", type=int, default=SERVER_PORT)

    args = parser.parse_args()

    if args.transport == "stdio":
        run_stdio()
    else:
        run_sse(args.host, args.port)
